"""
CLI entry point for CapShift with argument parsing and environment variable loading.
"""
import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from rich.text import Text

from . import __version__
from .backup import BackupManager, DEFAULT_MAX_BACKUPS
from .codecs import get_codec
from .errors import CaptionError, MalformedDocument, MalformedTimestamp
from .logging import setup_logging
from .model import CaptionDocument
from .operations import concat, convert, crop, info, offset, tail_offset
from .speakers import colon_prefix, no_speakers
from .timestamp import CaptionFormat, Timestamp

TRUTHY = ( "1", "true", "yes", "on" );


def parse_time_arg( text: str ) -> Timestamp:
    """Parse a command line time: milliseconds, HH:MM:SS,mmm or [HH:]MM:SS.mmm."""
    text = text.strip();
    if text.isdigit():
        return Timestamp( int( text ) );
    for fmt in ( CaptionFormat.SRT, CaptionFormat.VTT ):
        try:
            return Timestamp.parse( text, fmt );
        except MalformedTimestamp:
            continue
    raise argparse.ArgumentTypeError( f"invalid time {text!r}, use milliseconds, HH:MM:SS,mmm or HH:MM:SS.mmm" );


class CapShiftCLI:
    """
    Command line interface for CapShift caption editing.
    
    Supports command line arguments with environment variable defaults
    for logging and backup settings.
    """
    
    def __init__( self ):
        self.parser = self._create_parser();
        self.args = None;
        self.logger = None;
        self.current_file = None;
    
    def _create_parser( self ):
        """Create argument parser with all CapShift commands."""
        parser = argparse.ArgumentParser(
            prog="capshift",
            description="Edit SRT and WebVTT caption files: convert, offset, crop, concat and talk-time info",
            epilog="Environment variables: CAPSHIFT_DEBUG, CAPSHIFT_LOG_DIR, CAPSHIFT_BACKUP_DIR, CAPSHIFT_MAX_BACKUPS"
        );
        parser.add_argument( "--version", action="version", version=f"%(prog)s {__version__}" );
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug mode with verbose output"
        );
        parser.add_argument(
            "--log-dir",
            type=Path,
            default=None,
            help="Also write a rotating log file to this directory"
        );
        parser.add_argument(
            "--no-speakers",
            action="store_true",
            help="Do not split leading 'Name:' speaker tags off caption text"
        );
        
        # Options shared by every command that writes a document
        output = argparse.ArgumentParser( add_help=False );
        output.add_argument(
            "--output", "-w",
            type=Path,
            default=None,
            help="Write the result to this file instead of stdout"
        );
        output.add_argument(
            "--format", "-f",
            choices=[ fmt.value for fmt in CaptionFormat ],
            default=None,
            help="Output format (default: output file suffix, else input format)"
        );
        output.add_argument(
            "--block-offset",
            type=int,
            default=0,
            help="Number added to every SRT block number (default: 0)"
        );
        output.add_argument(
            "--no-backup",
            action="store_true",
            help="Overwrite an existing output file without keeping a backup"
        );
        
        commands = parser.add_subparsers( dest="command", metavar="COMMAND" );
        commands.required = True;
        
        convert_parser = commands.add_parser( "convert", parents=[ output ], help="Convert between SRT and VTT" );
        convert_parser.add_argument( "input", type=Path, help="Caption file (.srt or .vtt)" );
        convert_parser.add_argument( "--to", dest="format", choices=[ fmt.value for fmt in CaptionFormat ], help="Target format" );
        
        offset_parser = commands.add_parser( "offset", parents=[ output ], help="Shift every caption by a fixed time" );
        offset_parser.add_argument( "input", type=Path, help="Caption file (.srt or .vtt)" );
        offset_parser.add_argument( "delta", type=int, nargs="?", default=None, help="Milliseconds to add (negative to move earlier)" );
        offset_parser.add_argument(
            "--tail-from",
            type=Path,
            default=None,
            help="Use the end time of the last caption in this file as the offset"
        );
        
        crop_parser = commands.add_parser( "crop", parents=[ output ], help="Keep a time window and re-base it to zero" );
        crop_parser.add_argument( "input", type=Path, help="Caption file (.srt or .vtt)" );
        crop_parser.add_argument( "start", type=parse_time_arg, help="Window start (ms, HH:MM:SS,mmm or HH:MM:SS.mmm)" );
        crop_parser.add_argument( "end", type=parse_time_arg, help="Window end (ms, HH:MM:SS,mmm or HH:MM:SS.mmm)" );
        
        concat_parser = commands.add_parser( "concat", parents=[ output ], help="Append files one after another" );
        concat_parser.add_argument( "inputs", type=Path, nargs="+", help="Caption files in playback order" );
        
        info_parser = commands.add_parser( "info", help="Show duration, entry count and talk time per speaker" );
        info_parser.add_argument( "inputs", type=Path, nargs="+", help="Caption files" );
        
        return parser;
    
    def _load_environment( self ):
        """Load environment variables from .env file and system."""
        env_file = Path( ".env" );
        if env_file.exists():
            load_dotenv( env_file );
        
        self.env_debug = ( os.getenv( "CAPSHIFT_DEBUG" ) or "" ).strip().lower() in TRUTHY;
        self.log_dir = os.getenv( "CAPSHIFT_LOG_DIR" );
        self.backup_dir = os.getenv( "CAPSHIFT_BACKUP_DIR" ) or "backup";
        self.max_backups = os.getenv( "CAPSHIFT_MAX_BACKUPS" ) or str( DEFAULT_MAX_BACKUPS );
    
    def _input_paths( self ) -> List[Path]:
        if hasattr( self.args, "inputs" ):
            return list( self.args.inputs );
        return [ self.args.input ];
    
    def _validate_arguments( self ):
        """Validate parsed arguments and environment setup."""
        errors = [];
        
        for path in self._input_paths():
            if not path.exists():
                errors.append( f"Caption file not found: {path}" );
        
        if self.args.command == "convert" and not self.args.format:
            errors.append( "convert needs a target format (--to srt or --to vtt)" );
        
        if self.args.command == "offset":
            if ( self.args.delta is None ) == ( self.args.tail_from is None ):
                errors.append( "offset needs exactly one of DELTA or --tail-from" );
            if self.args.tail_from is not None and not self.args.tail_from.exists():
                errors.append( f"Caption file not found: {self.args.tail_from}" );
        
        if getattr( self.args, "block_offset", 0 ) < 0:
            errors.append( "Block offset cannot be negative" );
        
        try:
            self.max_backups = int( self.max_backups );
            if self.max_backups < 1:
                errors.append( "CAPSHIFT_MAX_BACKUPS must be at least 1" );
        except ValueError:
            errors.append( f"CAPSHIFT_MAX_BACKUPS must be a number, got {self.max_backups!r}" );
        
        return errors;
    
    def parse_args( self, argv=None ):
        """Parse command line arguments and validate configuration."""
        self.args = self.parser.parse_args( argv );
        
        self._load_environment();
        
        debug = self.args.debug or self.env_debug;
        self.logger = setup_logging( debug=debug, log_dir=self.args.log_dir or self.log_dir );
        
        errors = self._validate_arguments();
        if errors:
            self.logger.error( "Configuration errors:" );
            for error in errors:
                self.logger.error( f"  - {error}" );
            sys.exit( 1 );
        
        self.logger.debug( f"CapShift v{__version__} starting {self.args.command}" );
        self.logger.debug( f"Inputs: {', '.join( str( path ) for path in self._input_paths() )}" );
        
        return self.args;
    
    @property
    def speaker_policy( self ):
        return no_speakers if self.args.no_speakers else colon_prefix;
    
    def load( self, path: Path ) -> CaptionDocument:
        """Read and parse one caption file, format chosen by suffix."""
        self.current_file = path;
        fmt = CaptionFormat.from_path( path );
        try:
            text = path.read_text( encoding="utf-8" );
        except UnicodeDecodeError as e:
            raise MalformedDocument( f"Not valid UTF-8 text: {e.reason} at byte {e.start}", source=str( path ) ) from e;
        return get_codec( fmt, speaker_policy=self.speaker_policy ).parse( text, source=str( path ) );
    
    def emit( self, document: CaptionDocument, default_format: Optional[CaptionFormat] ):
        """Serialize a document to --output or stdout."""
        output = self.args.output;
        if output is not None:
            self.current_file = output;
        if self.args.format:
            fmt = CaptionFormat.from_name( self.args.format );
        elif output is not None:
            fmt = CaptionFormat.from_path( output );
        else:
            fmt = default_format or CaptionFormat.SRT;
        
        text = convert(
            document,
            fmt,
            speaker_policy=self.speaker_policy,
            first_index=1 + self.args.block_offset
        );
        
        if output is None:
            sys.stdout.write( text );
            return;
        
        if output.exists() and not self.args.no_backup:
            BackupManager( Path( self.backup_dir ), self.max_backups ).create_backup( output );
        output.write_text( text, encoding="utf-8" );
        self.logger.info( f"Wrote {len( document )} {fmt.value.upper()} entries to {output}" );
    
    def run_convert( self ):
        document = self.load( self.args.input );
        self.emit( document, document.source_format );
    
    def run_offset( self ):
        if self.args.tail_from is not None:
            delta = tail_offset( self.load( self.args.tail_from ) );
            self.logger.info( f"Offset taken from end of {self.args.tail_from}: {delta}ms" );
        else:
            delta = self.args.delta;
        document = self.load( self.args.input );
        self.emit( offset( document, delta ), document.source_format );
    
    def run_crop( self ):
        document = self.load( self.args.input );
        self.emit( crop( document, self.args.start, self.args.end ), document.source_format );
    
    def run_concat( self ):
        documents = [ self.load( path ) for path in self.args.inputs ];
        self.current_file = None;
        self.emit( concat( documents ), documents[0].source_format );
    
    def run_info( self ):
        console = Console();
        for path in self.args.inputs:
            report = info( self.load( path ) );
            
            table = Table( title=Text( str( path ) ) );
            table.add_column( "Speaker" );
            table.add_column( "Talk time", justify="right" );
            table.add_column( "Share", justify="right" );
            total = sum( report.talk_time.values() );
            for speaker, talk_ms in report.speakers_by_talk_time():
                share = f"{100.0 * talk_ms / total:.1f}%" if total else "-";
                table.add_row( Text( speaker ), str( Timestamp( talk_ms ) ), share );
            
            console.print( table );
            console.print( f"Duration: {report.duration}  Entries: {report.entry_count}", markup=False );
    
    def run( self ) -> int:
        """Run the parsed command; returns the process exit code."""
        handler = getattr( self, f"run_{self.args.command}" );
        try:
            handler();
        except CaptionError as e:
            where = f" for {self.current_file}" if self.current_file and not e.source else "";
            self.logger.error( f"{self.args.command} failed{where}: {e}" );
            return 1;
        except OSError as e:
            self.logger.error( f"{self.args.command} failed: {e}" );
            return 1;
        return 0;


def main( argv=None ):
    """Main entry point for the CapShift CLI."""
    cli = CapShiftCLI();
    args = cli.parse_args( argv );
    
    try:
        code = cli.run();
    except KeyboardInterrupt:
        cli.logger.warning( "Interrupted by user" );
        sys.exit( 130 );
    except Exception as e:
        cli.logger.error( f"Unexpected error: {e}" );
        if args.debug:
            raise;
        sys.exit( 1 );
    
    if code:
        sys.exit( code );


if __name__ == "__main__":
    main();
