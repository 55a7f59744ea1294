"""
Logging for CapShift: Rich console output plus an optional rotating log file.
"""
import logging
import shutil
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union
from rich.console import Console
from rich.logging import RichHandler

MAX_LOG_BYTES = 5 * 1024 * 1024;  # 5MB


class CapShiftLogger:
    """
    Logger wrapper with Rich display and optional file logging.
    
    Features:
    - Rich console output on stderr, so captions written to stdout stay clean
    - File logging only when a log directory is configured
    - 5MB size check on startup, rotates if exceeded
    - INFO default, DEBUG with --debug flag
    """
    
    def __init__( self, name: str = "capshift", debug: bool = False, log_dir: Optional[Union[str, Path]] = None ):
        self.name = name;
        self.debug_mode = debug;
        self.console = Console( stderr=True );
        
        self.logs_dir = Path( log_dir ) if log_dir else None;
        self.log_file = None;
        if self.logs_dir is not None:
            self.logs_dir.mkdir( parents=True, exist_ok=True );
            self.log_file = self.logs_dir / f"{name}.log";
            self._check_and_rotate_on_startup();
        
        self.logger = self._setup_logger();
    
    def _check_and_rotate_on_startup( self ):
        """Check log file size on startup and rotate if >5MB."""
        if self.log_file.exists() and self.log_file.stat().st_size > MAX_LOG_BYTES:
            timestamp = datetime.now().isoformat().replace( ":", "-" );
            backup_name = self.logs_dir / f"{self.name}.{timestamp}.log";
            shutil.move( str( self.log_file ), str( backup_name ) );
    
    def _setup_logger( self ):
        """Setup logger with Rich console and, if configured, file handlers."""
        logger = logging.getLogger( self.name );
        logger.setLevel( logging.DEBUG if self.debug_mode else logging.INFO );
        logger.propagate = False;
        
        # Clear existing handlers
        for handler in list( logger.handlers ):
            handler.close();
        logger.handlers.clear();
        
        console_handler = RichHandler( 
            console=self.console,
            rich_tracebacks=True,
            show_time=True,
            show_path=self.debug_mode,
            markup=False
        );
        console_handler.setLevel( logging.DEBUG if self.debug_mode else logging.INFO );
        console_handler.setFormatter( logging.Formatter( "%(message)s" ) );
        logger.addHandler( console_handler );
        
        if self.log_file is not None:
            file_handler = RotatingFileHandler(
                self.log_file,
                maxBytes=MAX_LOG_BYTES,
                backupCount=5,
                encoding="utf-8"
            );
            file_handler.setLevel( logging.DEBUG );
            file_handler.setFormatter( logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ) );
            logger.addHandler( file_handler );
        
        return logger;
    
    def debug( self, message, **kwargs ):
        self.logger.debug( message, **kwargs );
    
    def info( self, message, **kwargs ):
        self.logger.info( message, **kwargs );
    
    def warning( self, message, **kwargs ):
        self.logger.warning( message, **kwargs );
    
    def error( self, message, **kwargs ):
        self.logger.error( message, **kwargs );
    
    def critical( self, message, **kwargs ):
        self.logger.critical( message, **kwargs );


# Global logger instance
_logger = None;


def get_logger() -> CapShiftLogger:
    """Get the global CapShift logger, creating a console-only one if needed."""
    global _logger;
    if _logger is None:
        _logger = CapShiftLogger();
    return _logger;


def setup_logging( debug: bool = False, log_dir: Optional[Union[str, Path]] = None ) -> CapShiftLogger:
    """Rebuild the global logger for the given debug flag and log directory."""
    global _logger;
    _logger = CapShiftLogger( debug=debug, log_dir=log_dir );
    return _logger;
