"""
SRT and WebVTT codecs: raw text to CaptionDocument and back.
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import pysrt

from .errors import MalformedDocument, MalformedTimestamp
from .logging import get_logger
from .model import CaptionDocument, CaptionEntry
from .speakers import SpeakerPolicy, colon_prefix, split_speaker
from .timestamp import CaptionFormat, Timestamp

# start --> end, with optional trailing cue settings or coordinates
TIMING_LINE = re.compile( r'^\s*(\S+)\s*-->\s*(\S+)(?:\s+(.*))?$' );

# WebVTT voice span: <v Name> or <v.class Name>
VOICE_TAG = re.compile( r'^\s*<v(?:\.[^\s>]+)?\s+([^>]+)>(.*)$' );

VTT_SKIPPED_BLOCKS = ( "NOTE", "STYLE", "REGION" );


@dataclass
class Block:
    """Run of non-blank lines with its position in the source text."""
    
    number: int;        # 1-based block number
    line: int;          # 1-based line number of the first line
    lines: List[str];


def split_blocks( text: str ) -> List[Block]:
    """Split caption text into blank-line separated blocks."""
    text = text.lstrip( "\ufeff" ).replace( "\r\n", "\n" ).replace( "\r", "\n" );
    
    blocks = [];
    current = [];
    first_line = 0;
    for lineno, raw in enumerate( text.split( "\n" ), start=1 ):
        if not raw.strip():
            if current:
                blocks.append( Block( len( blocks ) + 1, first_line, current ) );
                current = [];
            continue
        if not current:
            first_line = lineno;
        current.append( raw.rstrip() );
    
    if current:
        blocks.append( Block( len( blocks ) + 1, first_line, current ) );
    
    return blocks;


class CaptionCodec( ABC ):
    """Abstract base class for caption formats."""
    
    format = None;
    
    def __init__( self, speaker_policy: SpeakerPolicy = colon_prefix ):
        self.logger = get_logger();
        self.speaker_policy = speaker_policy;
    
    def parse( self, text: str, source: Optional[str] = None ) -> CaptionDocument:
        """
        Parse caption text into a CaptionDocument.
        
        Args:
            text: Full file contents
            source: Name used in error messages (usually the file path)
            
        Returns:
            CaptionDocument with entries in source order
            
        Raises:
            MalformedDocument: a block lacks a valid timestamp line
            MalformedTimestamp: a timestamp does not match the format grammar
        """
        header, entries = self._read_blocks( split_blocks( text ), source );
        self.logger.info( f"Parsed {len( entries )} {self.format.value.upper()} caption entries from {source or 'text'}" );
        return CaptionDocument( entries=entries, header=header, source_format=self.format );
    
    @abstractmethod
    def _read_blocks( self, blocks: List[Block], source: Optional[str] ) -> Tuple[Tuple[str, ...], List[CaptionEntry]]:
        """Turn blocks into (header lines, entries)."""
        pass
    
    @abstractmethod
    def serialize( self, document: CaptionDocument ) -> str:
        """Render a document as text in this format."""
        pass
    
    def _read_cue( self, block: Block, timing_index: int, source: Optional[str] ) -> CaptionEntry:
        """Read the timing line at timing_index and the text lines after it."""
        lineno = block.line + timing_index;
        match = TIMING_LINE.match( block.lines[timing_index] ) if timing_index < len( block.lines ) else None;
        if not match:
            raise MalformedDocument( "Missing timestamp line 'start --> end'", block=block.number, line=lineno, source=source );
        
        try:
            start = Timestamp.parse( match.group( 1 ), self.format );
            end = Timestamp.parse( match.group( 2 ), self.format );
        except MalformedTimestamp as e:
            raise MalformedTimestamp( e.message, block=block.number, line=lineno, source=source ) from e;
        
        if end < start:
            raise MalformedDocument( f"Cue ends at {end} before it starts at {start}", block=block.number, line=lineno, source=source );
        if end == start:
            self.logger.warning( f"Zero-duration cue at {start} (block {block.number}, line {lineno})" );
        
        speaker, text = self._split_speaker( tuple( block.lines[timing_index + 1:] ) );
        return CaptionEntry( start=start, end=end, speaker=speaker, text=text );
    
    def _split_speaker( self, lines: Tuple[str, ...] ) -> Tuple[Optional[str], Tuple[str, ...]]:
        return split_speaker( lines, self.speaker_policy );


class SrtCodec( CaptionCodec ):
    """
    SubRip codec.
    
    Block numbers are ignored on input and regenerated on output,
    counting from first_index.
    """
    
    format = CaptionFormat.SRT;
    
    def __init__( self, speaker_policy: SpeakerPolicy = colon_prefix, first_index: int = 1 ):
        super().__init__( speaker_policy );
        self.first_index = first_index;
    
    def _read_blocks( self, blocks, source ):
        entries = [];
        for block in blocks:
            first = block.lines[0];
            if TIMING_LINE.match( first ):
                timing_index = 0;
            elif first.strip().isdigit():
                timing_index = 1;
            else:
                raise MalformedDocument( f"Expected a cue number or timestamp line, got {first!r}", block=block.number, line=block.line, source=source );
            entries.append( self._read_cue( block, timing_index, source ) );
        return (), entries;
    
    def serialize( self, document: CaptionDocument ) -> str:
        items = [];
        for number, entry in enumerate( document.entries, start=self.first_index ):
            item = pysrt.SubRipItem(
                index=number,
                start=pysrt.SubRipTime.from_ordinal( entry.start.milliseconds ),
                end=pysrt.SubRipTime.from_ordinal( entry.end.milliseconds ),
                text="\n".join( self._payload( entry ) )
            );
            items.append( str( item ) );
        return "\n".join( items );
    
    def _payload( self, entry: CaptionEntry ) -> List[str]:
        lines = list( entry.text );
        if entry.speaker:
            if lines:
                lines[0] = f"{entry.speaker}: {lines[0]}";
            else:
                lines = [ f"{entry.speaker}:" ];
        return lines;


class VttCodec( CaptionCodec ):
    """
    WebVTT codec.
    
    Keeps the WEBVTT header block as document metadata, skips NOTE, STYLE
    and REGION blocks, and drops cue identifiers and cue settings. A
    leading <v Name> voice span is read as the speaker before the
    configured speaker policy is tried.
    """
    
    format = CaptionFormat.VTT;
    
    def _read_blocks( self, blocks, source ):
        header = ();
        if blocks and self._is_header( blocks[0].lines[0] ):
            head = blocks.pop( 0 );
            for offset, line in enumerate( head.lines ):
                if "-->" in line:
                    raise MalformedDocument( "WEBVTT header must be followed by a blank line", block=head.number, line=head.line + offset, source=source );
            header = tuple( head.lines );
        
        entries = [];
        for block in blocks:
            first = block.lines[0];
            if "-->" in first:
                timing_index = 0;
            elif first.split( " ", 1 )[0] in VTT_SKIPPED_BLOCKS:
                self.logger.debug( f"Skipping {first.split( ' ', 1 )[0]} block {block.number}" );
                continue
            else:
                # Cue identifier, timing must follow
                timing_index = 1;
            entries.append( self._read_cue( block, timing_index, source ) );
        return header, entries;
    
    def _is_header( self, line: str ) -> bool:
        return line == "WEBVTT" or line.startswith( "WEBVTT " ) or line.startswith( "WEBVTT\t" );
    
    def _split_speaker( self, lines ):
        if lines:
            match = VOICE_TAG.match( lines[0] );
            if match:
                first = match.group( 2 );
                if first.endswith( "</v>" ):
                    first = first[:-len( "</v>" )];
                return match.group( 1 ).strip(), ( first.strip(), ) + tuple( lines[1:] );
        return super()._split_speaker( lines );
    
    def serialize( self, document: CaptionDocument ) -> str:
        if document.header and self._is_header( document.header[0] ):
            parts = [ "\n".join( document.header ) ];
        else:
            parts = [ "WEBVTT" ];
        
        for entry in document.entries:
            timing = f"{entry.start.format( self.format )} --> {entry.end.format( self.format )}";
            parts.append( "\n".join( [ timing ] + self._payload( entry ) ) );
        
        return "\n\n".join( parts ) + "\n";
    
    def _payload( self, entry: CaptionEntry ) -> List[str]:
        lines = list( entry.text );
        if entry.speaker:
            first = lines[0] if lines else "";
            lines = [ f"<v {entry.speaker}>{first}" ] + lines[1:];
        return lines;


CODECS = {
    CaptionFormat.SRT: SrtCodec,
    CaptionFormat.VTT: VttCodec,
};


def get_codec( fmt: Union[CaptionFormat, str], **options ) -> CaptionCodec:
    """
    Factory function to create a codec for a format.
    
    Args:
        fmt: CaptionFormat or format name ("srt", "vtt")
        **options: Codec options (speaker_policy, and first_index for SRT)
    """
    if not isinstance( fmt, CaptionFormat ):
        fmt = CaptionFormat.from_name( fmt );
    codec_class = CODECS[fmt];
    if codec_class is not SrtCodec:
        options.pop( "first_index", None );
    return codec_class( **options );


def parse( text: str, fmt: Union[CaptionFormat, str], source: Optional[str] = None, **options ) -> CaptionDocument:
    return get_codec( fmt, **options ).parse( text, source=source );


def serialize( document: CaptionDocument, fmt: Union[CaptionFormat, str], **options ) -> str:
    return get_codec( fmt, **options ).serialize( document );
