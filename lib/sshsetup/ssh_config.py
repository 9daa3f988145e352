"""Host stanza construction for ~/.ssh/config."""

from pathlib import Path

from sshsetup.ssh_keys import KeySpec

INDENT = '    '


def build_stanza(spec: KeySpec, private_key: Path) -> str:
    """Render the Host block for a key.

    Line order is fixed: Host, AddKeysToAgent, IdentityFile, then User and
    HostName only when set. A blank line follows the block.

    Example:
        >>> print(build_stanza(KeySpec('gh', host='github.com', user='git'), Path('/home/me/.ssh/gh')))
        Host github.com
            AddKeysToAgent yes
            IdentityFile /home/me/.ssh/gh
            User git
        <BLANKLINE>
    """
    lines = [
        f'Host {spec.host}',
        f'{INDENT}AddKeysToAgent yes',
        f'{INDENT}IdentityFile {private_key}',
    ]
    if spec.user:
        lines.append(f'{INDENT}User {spec.user}')
    if spec.hostname:
        lines.append(f'{INDENT}HostName {spec.hostname}')

    return '\n'.join(lines) + '\n\n'


def write_stanza(config_file: Path, stanza: str) -> bool:
    """Create or append to the SSH config file.

    Existing files get a blank separator line before the stanza and keep
    their permissions. Duplicate Host blocks are not detected.

    Returns:
        True if the file was created, False if appended to
    """
    if not config_file.exists():
        config_file.write_text(stanza)
        config_file.chmod(0o600)
        return True

    with open(config_file, 'a') as f:
        f.write('\n' + stanza)
    return False
