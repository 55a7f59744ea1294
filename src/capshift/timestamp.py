"""
Millisecond timestamps and their SRT/VTT text forms.
"""
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

import pysrt

from .errors import MalformedDocument, MalformedTimestamp


class CaptionFormat( Enum ):
    """Supported caption file formats."""
    
    SRT = "srt";
    VTT = "vtt";
    
    @classmethod
    def from_name( cls, name: str ) -> "CaptionFormat":
        """Resolve a format marker such as 'srt', '.VTT' or 'webvtt'."""
        marker = str( name ).strip().lower().lstrip( "." );
        if marker == "webvtt":
            marker = "vtt";
        for fmt in cls:
            if fmt.value == marker:
                return fmt;
        raise MalformedDocument( f"Unknown caption format: {name!r} (expected srt or vtt)" );
    
    @classmethod
    def from_path( cls, path: Union[str, Path] ) -> "CaptionFormat":
        """Resolve the format from a file suffix."""
        suffix = Path( path ).suffix;
        if not suffix:
            raise MalformedDocument( f"Cannot tell caption format without a file suffix: {path}" );
        return cls.from_name( suffix );


# HH:MM:SS,mmm (hours may grow past two digits)
SRT_TIMESTAMP = re.compile( r'^(\d{2,}):(\d{2}):(\d{2}),(\d{3})$' );

# [HH:]MM:SS.mmm
VTT_TIMESTAMP = re.compile( r'^(?:(\d{2,}):)?(\d{2}):(\d{2})\.(\d{3})$' );


@dataclass( frozen=True, order=True )
class Timestamp:
    """
    Absolute offset from the start of the media, in whole milliseconds.
    
    Values are never negative. Arithmetic that would cross zero clamps to
    zero instead of wrapping or raising.
    """
    
    milliseconds: int;
    
    def __post_init__( self ):
        if self.milliseconds < 0:
            raise ValueError( f"Timestamp cannot be negative: {self.milliseconds}ms" );
    
    @classmethod
    def parse( cls, text: str, fmt: CaptionFormat ) -> "Timestamp":
        """
        Parse a timestamp in the grammar of the given format.
        
        Args:
            text: Timestamp text such as "00:01:02,500"
            fmt: CaptionFormat whose grammar applies
            
        Returns:
            Parsed Timestamp
            
        Raises:
            MalformedTimestamp: text does not match the grammar
        """
        pattern = SRT_TIMESTAMP if fmt is CaptionFormat.SRT else VTT_TIMESTAMP;
        match = pattern.match( text.strip() );
        if not match:
            expected = "HH:MM:SS,mmm" if fmt is CaptionFormat.SRT else "[HH:]MM:SS.mmm";
            raise MalformedTimestamp( f"Invalid {fmt.value.upper()} timestamp {text!r}, expected {expected}" );
        
        hours = int( match.group( 1 ) or 0 );
        minutes = int( match.group( 2 ) );
        seconds = int( match.group( 3 ) );
        milliseconds = int( match.group( 4 ) );
        
        if minutes > 59 or seconds > 59:
            raise MalformedTimestamp( f"Minutes and seconds must be below 60 in {text!r}" );
        
        return cls( pysrt.SubRipTime( hours, minutes, seconds, milliseconds ).ordinal );
    
    def format( self, fmt: CaptionFormat ) -> str:
        """Render as zero-padded HH:MM:SS,mmm (SRT) or HH:MM:SS.mmm (VTT)."""
        text = str( pysrt.SubRipTime.from_ordinal( self.milliseconds ) );
        if fmt is CaptionFormat.VTT:
            text = text.replace( ",", "." );
        return text;
    
    def add( self, delta_ms: int ) -> "Timestamp":
        """Shift by a signed number of milliseconds, clamping at zero."""
        return Timestamp( max( 0, self.milliseconds + int( delta_ms ) ) );
    
    def subtract( self, other: "Timestamp" ) -> int:
        """Signed difference self - other in milliseconds."""
        return self.milliseconds - other.milliseconds;
    
    def would_clamp( self, delta_ms: int ) -> bool:
        return self.milliseconds + int( delta_ms ) < 0;
    
    def __str__( self ):
        return self.format( CaptionFormat.SRT );


ZERO = Timestamp( 0 );


def compare( a: Timestamp, b: Timestamp ) -> int:
    """Three-way comparison: -1 if a < b, 0 if equal, 1 if a > b."""
    if a < b:
        return -1;
    if a > b:
        return 1;
    return 0;


def coerce_timestamp( value: Union[Timestamp, int] ) -> Timestamp:
    """Accept a Timestamp or a non-negative millisecond count."""
    if isinstance( value, Timestamp ):
        return value;
    return Timestamp( int( value ) );
