"""Interactive prompts for key setup."""

import click

from sshsetup.ssh_keys import DEFAULT_HOST, DEFAULT_KEY_NAME, KeyFilePair, KeySpec


def _ask(label: str, default: str = '') -> str:
    return click.prompt(label, default=default, show_default=False)


def prompt_key_spec(default_name: str = DEFAULT_KEY_NAME,
                    default_host: str = DEFAULT_HOST) -> KeySpec:
    """Ask for each KeySpec field in order, applying defaults to empty answers."""
    click.echo("SSH Key Setup - Interactive Mode")
    click.echo("=" * 32)

    name = _ask(f"Key name (default: {default_name})")
    comment = _ask("Comment (optional)")
    host = _ask(f"Host (default: {default_host})")
    user = _ask("User (optional)")
    hostname = _ask("Hostname (optional)")
    click.echo("")

    return KeySpec.from_args([name, comment, host, user, hostname],
                             default_name=default_name,
                             default_host=default_host)


def confirm_overwrite(name: str, pair: KeyFilePair) -> bool:
    """Warn that a key already exists and ask whether to replace it.

    Returns:
        True only if the reply starts with y or Y
    """
    click.secho(f"Warning: SSH key '{name}' already exists!", fg='yellow')
    click.echo(f"  Private key: {pair.private}")
    click.echo(f"  Public key:  {pair.public}")

    reply = _ask("Do you want to overwrite it? (y/N)")
    return reply[:1] in ('y', 'Y')
