"""
CapShift - Caption editing utility.

Parses SRT and WebVTT files into one caption model and converts,
offsets, crops, concatenates and summarizes them.
"""

__version__ = "0.1.0";
__author__ = "CapShift Project";
__license__ = "MIT";

from .errors import CaptionError, EmptyInput, InvalidRange, MalformedDocument, MalformedTimestamp
from .timestamp import CaptionFormat, Timestamp, compare
from .model import CaptionDocument, CaptionEntry
from .codecs import SrtCodec, VttCodec, get_codec, parse, serialize
from .operations import CaptionReport, UNSPECIFIED_SPEAKER, concat, convert, crop, info, offset, tail_offset
