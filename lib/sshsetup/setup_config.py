"""Parse ~/.sshsetup/config.yml user configuration."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from sshsetup.ssh_keys import DEFAULT_HOST, DEFAULT_KEY_NAME

KNOWN_FIELDS = {'ssh_dir', 'key_name', 'host', 'log_file'}


@dataclass
class SetupConfig:
    """User defaults for sshsetup, from config.yml."""
    ssh_dir: Path
    log_file: Path
    key_name: str = DEFAULT_KEY_NAME
    host: str = DEFAULT_HOST

    @classmethod
    def defaults(cls, home: Path) -> 'SetupConfig':
        return cls(
            ssh_dir=home / '.ssh',
            log_file=home / '.sshsetup' / 'setup.log',
        )

    @classmethod
    def load(cls, home: Path, config_file: Optional[Path] = None) -> 'SetupConfig':
        """Load config.yml, falling back to built-in defaults if it is absent."""
        config = cls.defaults(home)
        config_file = config_file or home / '.sshsetup' / 'config.yml'
        if not config_file.exists():
            return config

        with open(config_file, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"{config_file} must contain a mapping")

        unknown = set(data.keys()) - KNOWN_FIELDS
        if unknown:
            raise ValueError(f"Unknown config.yml field(s): {', '.join(sorted(unknown))}")

        if data.get('ssh_dir'):
            config.ssh_dir = _expand(data['ssh_dir'], home)
        if data.get('log_file'):
            config.log_file = _expand(data['log_file'], home)
        if data.get('key_name'):
            config.key_name = str(data['key_name'])
        if data.get('host'):
            config.host = str(data['host'])
        return config


def _expand(value, home: Path) -> Path:
    text = str(value)
    if text == '~' or text.startswith('~/'):
        return home / text[2:]
    return Path(text)
