"""
Edit operations over caption documents.

Every operation takes documents and returns a new one (or a report);
inputs are never modified.
"""
from dataclasses import dataclass, field
from typing import Dict, Sequence, Union

from .codecs import get_codec
from .errors import EmptyInput, InvalidRange
from .logging import get_logger
from .model import CaptionDocument
from .timestamp import CaptionFormat, Timestamp, ZERO, coerce_timestamp

# Talk-time bucket for entries without a speaker tag
UNSPECIFIED_SPEAKER = "(unspecified)";


def convert( document: CaptionDocument, target_format: Union[CaptionFormat, str], **codec_options ) -> str:
    """Serialize a document in another format; timestamps are untouched."""
    return get_codec( target_format, **codec_options ).serialize( document );


def offset( document: CaptionDocument, delta_ms: int ) -> CaptionDocument:
    """
    Shift every entry by delta_ms milliseconds.
    
    Clamp policy: a start or end that would become negative is set to 0.
    An entry pushed entirely before zero becomes a zero-length cue at 0.
    """
    logger = get_logger();
    delta_ms = int( delta_ms );
    
    clamped = sum( 1 for entry in document.entries if entry.start.would_clamp( delta_ms ) );
    if clamped:
        logger.warning( f"Offset {delta_ms}ms clamped {clamped} entr{'y' if clamped == 1 else 'ies'} at 00:00:00,000" );
    
    logger.debug( f"Shifting {len( document )} entries by {delta_ms}ms" );
    return document.with_entries( entry.shifted( delta_ms ) for entry in document.entries );


def crop( document: CaptionDocument, lower: Union[Timestamp, int], upper: Union[Timestamp, int] ) -> CaptionDocument:
    """
    Keep the entries overlapping [lower, upper], clipped and re-based to 0.
    
    Overlap is exclusive at the window edges: an entry is kept when
    end > lower and start < upper, so an entry that only touches a bound
    is dropped.
    
    Raises:
        InvalidRange: lower >= upper
    """
    lower = coerce_timestamp( lower );
    upper = coerce_timestamp( upper );
    if lower >= upper:
        raise InvalidRange( f"Crop start {lower} must be before crop end {upper}" );
    
    kept = [
        entry.clipped( lower, upper ).shifted( -lower.milliseconds )
        for entry in document.entries
        if entry.end > lower and entry.start < upper
    ];
    
    get_logger().debug( f"Crop {lower} - {upper} kept {len( kept )} of {len( document )} entries" );
    return document.with_entries( kept );


def tail_offset( document: CaptionDocument ) -> int:
    """Shift in milliseconds that places another document right after this one."""
    return document.last_end.milliseconds;


def concat( documents: Sequence[CaptionDocument] ) -> CaptionDocument:
    """
    Join documents end to end.
    
    Document i is shifted by the summed last end times of documents
    0..i-1, then all entries are stably sorted by start time. Header
    metadata is taken from the first document.
    
    Raises:
        EmptyInput: no documents were given
    """
    documents = list( documents );
    if not documents:
        raise EmptyInput( "Concat needs at least one document" );
    if len( documents ) == 1:
        return documents[0];
    
    logger = get_logger();
    entries = [];
    shift = 0;
    for position, document in enumerate( documents ):
        if position > 0:
            shift += tail_offset( documents[position - 1] );
        logger.debug( f"Concat part {position + 1}: {len( document )} entries shifted by {shift}ms" );
        entries.extend( entry.shifted( shift ) for entry in document.entries );
    
    return documents[0].with_entries( entries ).sorted_by_start();


@dataclass( frozen=True )
class CaptionReport:
    """Summary returned by info()."""
    
    duration: Timestamp;
    entry_count: int;
    talk_time: Dict[str, int] = field( default_factory=dict );  # speaker -> ms
    
    def speakers_by_talk_time( self ):
        return sorted( self.talk_time.items(), key=lambda item: ( -item[1], item[0] ) );


def info( document: CaptionDocument ) -> CaptionReport:
    """
    Report duration, entry count and per-speaker talk time.
    
    Talk time is the plain sum of entry durations, so overlapping entries
    of one speaker are counted twice. Entries without a speaker are
    summed under UNSPECIFIED_SPEAKER.
    """
    talk_time = {};
    for entry in document.entries:
        speaker = entry.speaker or UNSPECIFIED_SPEAKER;
        talk_time[speaker] = talk_time.get( speaker, 0 ) + entry.duration;
    
    duration = document.last_end if document.entries else ZERO;
    return CaptionReport( duration=duration, entry_count=len( document ), talk_time=talk_time );
