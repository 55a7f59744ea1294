"""
Speaker tag policies.

Neither SRT nor WebVTT defines a speaker field in plain cue text. Many
transcripts mark the speaker with a leading "Name:" token instead; that
is a convention, not a format rule, so extraction is a swappable policy
of the form line -> (speaker or None, remaining line).
"""
import re
from typing import Callable, Optional, Tuple

SpeakerPolicy = Callable[[str], Tuple[Optional[str], str]];

# Letter first, short name, then ":" and either whitespace plus text or nothing
SPEAKER_PREFIX = re.compile( r"^\s*([^\W\d_][\w.' \-]{0,39}?)\s*:(?:\s+(\S.*))?\s*$" );


def colon_prefix( line: str ) -> Tuple[Optional[str], str]:
    """
    Split a leading "Name:" token off a text line.
    
    Args:
        line: First text line of a cue
        
    Returns:
        (speaker, remaining text), or (None, line) when no tag is present
    """
    match = SPEAKER_PREFIX.match( line );
    if not match:
        return None, line;
    return match.group( 1 ).strip(), match.group( 2 ) or "";


def no_speakers( line: str ) -> Tuple[Optional[str], str]:
    """Leave every line untouched."""
    return None, line;


def split_speaker( lines: Tuple[str, ...], policy: SpeakerPolicy ) -> Tuple[Optional[str], Tuple[str, ...]]:
    """Apply a policy to the first line of a cue's text."""
    if not lines:
        return None, lines;
    speaker, first = policy( lines[0] );
    if speaker is None:
        return None, lines;
    return speaker, ( first, ) + tuple( lines[1:] );
