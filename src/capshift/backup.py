"""
Timestamped backups of caption files before they are overwritten.
"""
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from .logging import get_logger

DEFAULT_MAX_BACKUPS = 25;


class BackupManager:
    """
    Keeps ISO-8601 timestamped copies of files the CLI is about to replace.
    
    Only the newest max_backups copies per file are retained.
    """
    
    def __init__( self, backup_dir: Optional[Path] = None, max_backups: int = DEFAULT_MAX_BACKUPS ):
        self.logger = get_logger();
        self.backup_dir = Path( backup_dir ) if backup_dir else Path( "backup" );
        self.max_backups = max( 1, int( max_backups ) );
    
    def get_backup_filename( self, original_file: Path ) -> str:
        """Backup name: <stem>.<YYYY-MM-DDTHH-MM-SS-ffffff><suffix>."""
        timestamp = datetime.now().isoformat( timespec="microseconds" ).replace( ":", "-" ).replace( ".", "-" );
        return f"{original_file.stem}.{timestamp}{original_file.suffix}";
    
    def get_existing_backups( self, original_file: Path ) -> List[Tuple[Path, datetime]]:
        """
        Get existing backups of a file, oldest first.
        
        Args:
            original_file: Path of the file that was backed up
            
        Returns:
            List of (backup_path, timestamp) tuples
        """
        pattern = f"{original_file.stem}.????-??-??T??-??-??-??????{original_file.suffix}";
        
        backups = [];
        for backup_path in self.backup_dir.glob( pattern ):
            try:
                stamp = backup_path.name[len( original_file.stem ) + 1:len( backup_path.name ) - len( original_file.suffix )];
                timestamp = datetime.strptime( stamp, "%Y-%m-%dT%H-%M-%S-%f" );
                backups.append( ( backup_path, timestamp ) );
            except ValueError as e:
                self.logger.debug( f"Skipping malformed backup file {backup_path}: {e}" );
        
        backups.sort( key=lambda item: item[1] );
        return backups;
    
    def apply_retention_policy( self, original_file: Path ) -> int:
        """Remove the oldest backups beyond max_backups; returns how many were removed."""
        backups = self.get_existing_backups( original_file );
        if len( backups ) <= self.max_backups:
            return 0;
        
        removed = 0;
        for backup_path, _ in backups[:-self.max_backups]:
            try:
                backup_path.unlink();
                removed += 1;
                self.logger.debug( f"Removed old backup: {backup_path.name}" );
            except OSError as e:
                self.logger.warning( f"Could not remove backup {backup_path}: {e}" );
        
        if removed:
            self.logger.info( f"Removed {removed} old backup(s) of {original_file.name}" );
        return removed;
    
    def create_backup( self, file_path: Path ) -> Path:
        """
        Copy a file into the backup directory and prune old copies.
        
        Raises:
            FileNotFoundError: file_path does not exist
        """
        file_path = Path( file_path );
        if not file_path.exists():
            raise FileNotFoundError( f"File to backup not found: {file_path}" );
        
        self.backup_dir.mkdir( parents=True, exist_ok=True );
        backup_path = self.backup_dir / self.get_backup_filename( file_path );
        shutil.copy2( file_path, backup_path );
        self.logger.info( f"Created backup: {backup_path}" );
        
        self.apply_retention_policy( file_path );
        return backup_path;
