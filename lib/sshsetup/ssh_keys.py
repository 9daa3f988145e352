"""SSH key generation and key file handling."""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

DEFAULT_KEY_NAME = 'id_ed25519'
DEFAULT_HOST = '*'


@dataclass(frozen=True)
class KeySpec:
    """What to generate and how to reach it.

    Example:
        spec = KeySpec.from_args(['gh', 'GitHub key', 'github.com', 'git'])
    """

    name: str = DEFAULT_KEY_NAME
    comment: str = ''
    host: str = DEFAULT_HOST
    user: str = ''
    hostname: str = ''

    @classmethod
    def from_args(cls, values: Sequence[Optional[str]],
                  default_name: str = DEFAULT_KEY_NAME,
                  default_host: str = DEFAULT_HOST) -> 'KeySpec':
        """Map positional values (name, comment, host, user, hostname) onto a KeySpec.

        Missing trailing values take their defaults. An empty name or host
        also falls back to the default.
        """
        if len(values) > 5:
            raise ValueError(f"Expected at most 5 values, got {len(values)}")
        padded = [v or '' for v in values] + [''] * (5 - len(values))
        name, comment, host, user, hostname = padded
        return cls(
            name=name or default_name,
            comment=comment,
            host=host or default_host,
            user=user,
            hostname=hostname,
        )

    def fields(self) -> dict:
        return {
            'key name': self.name,
            'comment': self.comment,
            'host': self.host,
            'user': self.user,
            'hostname': self.hostname,
        }


@dataclass(frozen=True)
class KeyFilePair:
    """Private/public key paths for one key."""

    private: Path
    public: Path

    def exists(self) -> bool:
        return self.private.exists() or self.public.exists()


def key_paths(ssh_dir: Path, name: str) -> KeyFilePair:
    """Derive the key file paths for a key name inside ssh_dir.

    A leading slash in name does not escape ssh_dir: '/tmp/k' maps to
    <ssh_dir>/tmp/k.
    """
    name = name.lstrip('/')
    return KeyFilePair(private=ssh_dir / name, public=ssh_dir / f'{name}.pub')


def prepare_ssh_dir(ssh_dir: Path) -> None:
    """Create ssh_dir if needed and force it to mode 700."""
    ssh_dir.mkdir(parents=True, exist_ok=True)
    ssh_dir.chmod(0o700)


def generate_key(pair: KeyFilePair, comment: str = '') -> str:
    """Generate an ed25519 SSH keypair with no passphrase.

    Any existing files at the pair's paths are removed first so ssh-keygen
    never asks its own overwrite question. If ssh-keygen then fails, the
    old pair is already gone and no key is left at these paths.

    Args:
        pair: Where the private and public key are written
        comment: Key comment; the -C flag is omitted when empty

    Returns:
        ssh-keygen's output (fingerprint and randomart)

    Raises:
        subprocess.CalledProcessError: ssh-keygen exited non-zero
        FileNotFoundError: ssh-keygen is not installed
    """
    pair.private.unlink(missing_ok=True)
    pair.public.unlink(missing_ok=True)

    cmd = ['ssh-keygen', '-t', 'ed25519', '-f', str(pair.private), '-N', '']
    if comment:
        cmd += ['-C', comment]

    result = subprocess.run(cmd, check=True, capture_output=True, text=True)
    return result.stdout


def fix_permissions(pair: KeyFilePair) -> None:
    """Force private key to 600 and public key to 644."""
    pair.private.chmod(0o600)
    pair.public.chmod(0o644)


def get_public_key(pair: KeyFilePair) -> str:
    """Read public key content.

    Returns:
        Public key content as string
    """
    return pair.public.read_text().strip()
