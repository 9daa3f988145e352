#!/usr/bin/env python3
"""sshsetup CLI - ed25519 key, SSH config entry and agent registration in one step."""

import os
import subprocess
import sys
from pathlib import Path

import click

from sshsetup.agent import add_key, ensure_agent
from sshsetup.prompts import confirm_overwrite, prompt_key_spec
from sshsetup.setup_config import SetupConfig
from sshsetup.setup_log import SetupLog
from sshsetup.ssh_config import build_stanza, write_stanza
from sshsetup.ssh_keys import (KeySpec, fix_permissions, generate_key, get_public_key,
                               key_paths, prepare_ssh_dir)

FORBIDDEN_CHARS = {'\n': 'a line break', '\r': 'a carriage return', '\0': 'a NUL byte'}


def _check_spec(spec: KeySpec) -> None:
    """Reject values that would break the config file's line structure."""
    for field, value in spec.fields().items():
        for char, description in FORBIDDEN_CHARS.items():
            if char in value:
                raise click.UsageError(f"{field.capitalize()} must not contain {description}")


def _fail(log: SetupLog, message: str) -> None:
    log.log_event(message, level='ERROR')
    click.secho(f"❌ {message}", fg='red', err=True)
    sys.exit(1)


@click.command(context_settings={'ignore_unknown_options': True})
@click.argument('args', nargs=-1, metavar='[KEY_NAME] [COMMENT] [HOST] [USER] [HOSTNAME]')
@click.version_option(package_name='sshsetup')
def main(args):
    """Create an ed25519 SSH key, add a Host entry to ~/.ssh/config and load it into ssh-agent.

    With no arguments the values are asked for interactively. Positional
    arguments are taken in order; omitted trailing ones use the defaults
    (key name id_ed25519, host *).
    """
    if len(args) > 5:
        raise click.UsageError(f"Got {len(args)} arguments, expected at most 5")

    home = Path.home()
    try:
        config = SetupConfig.load(home)
    except (ValueError, OSError) as e:
        click.secho(f"❌ Invalid configuration: {e}", fg='red', err=True)
        sys.exit(1)

    if args:
        spec = KeySpec.from_args(args, default_name=config.key_name, default_host=config.host)
    else:
        spec = prompt_key_spec(default_name=config.key_name, default_host=config.host)
    _check_spec(spec)

    log = SetupLog(config.log_file)
    log.log_event(f'Setup started for key {spec.name!r}, host {spec.host!r}')

    ssh_dir = config.ssh_dir
    pair = key_paths(ssh_dir, spec.name)
    config_file = ssh_dir / 'config'

    try:
        prepare_ssh_dir(ssh_dir)

        if pair.exists():
            if not confirm_overwrite(spec.name, pair):
                log.log_event(f'Overwrite of {pair.private} declined', level='WARN')
                click.secho("Operation cancelled. Please run the script again with a different key name.",
                            fg='yellow')
                sys.exit(1)
            log.log_event(f'Overwriting existing key {pair.private}', level='WARN')
            click.echo("Overwriting existing key...")

        click.echo(f"Generating ed25519 SSH key: {spec.name}")
        keygen_output = generate_key(pair, spec.comment)
        fix_permissions(pair)
        if keygen_output:
            click.echo(keygen_output.rstrip())
        log.log_event(f'Key generated: {pair.private}')

        created = write_stanza(config_file, build_stanza(spec, pair.private))
        if created:
            click.echo("Created SSH config file")
        else:
            click.echo("Added key to existing SSH config file")
        log.log_event(f'Host {spec.host} written to {config_file}')

        env, started = ensure_agent(os.environ)
        if started:
            log.log_event(f"Started ssh-agent (pid {env.get('SSH_AGENT_PID', 'unknown')})")
            click.echo(f"Started ssh-agent (pid {env.get('SSH_AGENT_PID', 'unknown')})")

        added = add_key(pair.private, env)
        if added:
            click.echo(added)
        log.log_event(f'Key added to agent: {pair.private}')

        pubkey = get_public_key(pair)

    except subprocess.CalledProcessError as e:
        detail = (e.stderr or '').strip()
        _fail(log, f"{e.cmd[0]} failed (exit {e.returncode}){': ' + detail if detail else ''}")
    except FileNotFoundError as e:
        if e.filename in ('ssh-keygen', 'ssh-agent', 'ssh-add'):
            _fail(log, f"{e.filename} not found. Install OpenSSH client tools.")
        else:
            _fail(log, f"Error: {e}")
    except (RuntimeError, OSError) as e:
        _fail(log, f"Error: {e}")

    log.log_event('Setup complete')
    click.secho("✅ SSH key setup complete!", fg='green')
    click.echo("Public key:")
    click.echo(pubkey)

    click.echo("")
    click.echo("Note: Please review your SSH config file to ensure it has all required properties:")
    click.echo(f"  Config file: {config_file}")
    click.echo(f"  You can edit it with: nano {config_file}")
    click.echo(f"  Test your SSH connection with: ssh -T {spec.host}")


if __name__ == '__main__':
    main()
