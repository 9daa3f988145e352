"""Run log for sshsetup."""

import sys
from datetime import datetime
from pathlib import Path


class SetupLog:
    """Appends timestamped events to the setup log file."""

    def __init__(self, log_file: Path):
        self.log_file = log_file

    def log_event(self, message: str, level: str = 'INFO') -> None:
        """Log an event to the setup log."""
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        entry = f'[{timestamp}] {level}: {message}\n'
        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, 'a') as f:
                f.write(entry)
        except (IOError, OSError) as e:
            print(f"Warning: Failed to log event: {e}", file=sys.stderr)
