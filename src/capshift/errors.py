"""
Error kinds raised by the caption parsers and edit operations.
"""
from typing import Optional


class CaptionError( Exception ):
    """
    Base class for all caption failures.
    
    Carries an optional locator (source name, block number, line number)
    that is rendered into the message so malformed input can be found
    without opening the file.
    """
    
    def __init__( self, message: str, block: Optional[int] = None, line: Optional[int] = None, source: Optional[str] = None ):
        super().__init__( message );
        self.message = message;
        self.block = block;
        self.line = line;
        self.source = source;
    
    def locator( self ) -> str:
        parts = [];
        if self.source:
            parts.append( str( self.source ) );
        if self.block is not None:
            parts.append( f"block {self.block}" );
        if self.line is not None:
            parts.append( f"line {self.line}" );
        return ", ".join( parts );
    
    def __str__( self ):
        where = self.locator();
        if where:
            return f"{self.message} ({where})";
        return self.message;


class MalformedTimestamp( CaptionError ):
    """Raised when text does not match a format's timestamp grammar."""


class MalformedDocument( CaptionError ):
    """Raised when a block is missing required parts or the format is unknown."""


class InvalidRange( CaptionError ):
    """Raised when crop bounds are inverted or equal."""


class EmptyInput( CaptionError ):
    """Raised when concat receives no documents."""
