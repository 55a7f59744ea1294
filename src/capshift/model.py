"""
In-memory caption model shared by every codec and edit operation.
"""
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Optional, Tuple

from .timestamp import CaptionFormat, Timestamp, ZERO


@dataclass( frozen=True )
class CaptionEntry:
    """One cue: a time range, an optional speaker and its text lines."""
    
    start: Timestamp;
    end: Timestamp;
    speaker: Optional[str] = None;
    text: Tuple[str, ...] = ();
    
    def __post_init__( self ):
        if self.end < self.start:
            raise ValueError( f"Caption end {self.end} precedes start {self.start}" );
        object.__setattr__( self, "text", tuple( self.text ) );
    
    @property
    def duration( self ) -> int:
        """Length of the cue in milliseconds."""
        return self.end.subtract( self.start );
    
    def shifted( self, delta_ms: int ) -> "CaptionEntry":
        return replace( self, start=self.start.add( delta_ms ), end=self.end.add( delta_ms ) );
    
    def clipped( self, lower: Timestamp, upper: Timestamp ) -> "CaptionEntry":
        """Raise start to lower and lower end to upper where they fall outside."""
        start = max( self.start, lower );
        end = min( self.end, upper );
        return replace( self, start=start, end=max( start, end ) );
    
    def __repr__( self ):
        preview = " / ".join( self.text )[:30];
        who = f"{self.speaker}: " if self.speaker else "";
        return f"CaptionEntry({self.start} --> {self.end}, '{who}{preview}')";


@dataclass( frozen=True )
class CaptionDocument:
    """
    Ordered cues plus format metadata.
    
    Entries keep the order they had in the source; loading never sorts.
    A document is never modified after construction, operations build
    a new one instead.
    """
    
    entries: Tuple[CaptionEntry, ...] = ();
    header: Tuple[str, ...] = ();          # WEBVTT line and metadata lines
    source_format: Optional[CaptionFormat] = field( default=None, compare=False );
    
    def __post_init__( self ):
        object.__setattr__( self, "entries", tuple( self.entries ) );
        object.__setattr__( self, "header", tuple( self.header ) );
    
    def __len__( self ):
        return len( self.entries );
    
    def __iter__( self ) -> Iterator[CaptionEntry]:
        return iter( self.entries );
    
    @property
    def last_end( self ) -> Timestamp:
        """Latest end time of any entry, or zero for an empty document."""
        if not self.entries:
            return ZERO;
        return max( entry.end for entry in self.entries );
    
    @property
    def first_start( self ) -> Timestamp:
        if not self.entries:
            return ZERO;
        return min( entry.start for entry in self.entries );
    
    def with_entries( self, entries: Iterable[CaptionEntry] ) -> "CaptionDocument":
        """New document with the same metadata and different entries."""
        return replace( self, entries=tuple( entries ) );
    
    def sorted_by_start( self ) -> "CaptionDocument":
        # sorted() is stable, ties keep source order
        return self.with_entries( sorted( self.entries, key=lambda entry: entry.start ) );
