"""ssh-agent bootstrap and key registration."""

import re
import subprocess
from pathlib import Path
from typing import Dict, Mapping, Tuple

AGENT_VARS = ('SSH_AUTH_SOCK', 'SSH_AGENT_PID')

# Matches lines like: SSH_AUTH_SOCK=/tmp/ssh-XXXX/agent.123; export SSH_AUTH_SOCK;
_ASSIGNMENT = re.compile(r'^(\w+)=([^;]*);')


def parse_agent_output(output: str) -> Dict[str, str]:
    """Extract agent bindings from `ssh-agent -s` output."""
    bindings = {}
    for line in output.splitlines():
        match = _ASSIGNMENT.match(line.strip())
        if match and match.group(1) in AGENT_VARS:
            bindings[match.group(1)] = match.group(2)
    return bindings


def ensure_agent(environ: Mapping[str, str]) -> Tuple[Dict[str, str], bool]:
    """Return an environment that points at a running agent.

    If environ already names an agent socket it is used as-is. Otherwise a
    new agent is started and its bindings are layered on a copy of environ.
    environ itself is never modified.

    Returns:
        Tuple of (env, started) where started is True if a new agent was launched

    Raises:
        subprocess.CalledProcessError: ssh-agent exited non-zero
        RuntimeError: ssh-agent output did not contain a socket path
    """
    env = dict(environ)
    if env.get('SSH_AUTH_SOCK'):
        return env, False

    result = subprocess.run(
        ['ssh-agent', '-s'],
        capture_output=True,
        text=True,
        check=True
    )
    bindings = parse_agent_output(result.stdout)
    if not bindings.get('SSH_AUTH_SOCK'):
        raise RuntimeError(f"ssh-agent did not report a socket: {result.stdout.strip()!r}")

    env.update(bindings)
    return env, True


def add_key(private_key: Path, env: Mapping[str, str]) -> str:
    """Register a private key with the agent described by env.

    Returns:
        ssh-add's confirmation message (e.g. "Identity added: ...")
    """
    result = subprocess.run(
        ['ssh-add', str(private_key)],
        env=dict(env),
        check=True,
        capture_output=True,
        text=True
    )
    return (result.stderr or result.stdout).strip()
