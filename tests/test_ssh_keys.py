import shutil
import stat
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from sshsetup.ssh_keys import (KeySpec, fix_permissions, generate_key, get_public_key,
                               key_paths, prepare_ssh_dir)

needs_ssh_keygen = pytest.mark.skipif(shutil.which('ssh-keygen') is None,
                                      reason='ssh-keygen not installed')


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


def test_key_spec_defaults_when_no_values():
    spec = KeySpec.from_args([])
    assert spec == KeySpec(name='id_ed25519', comment='', host='*', user='', hostname='')


def test_key_spec_maps_positionally():
    spec = KeySpec.from_args(['gh', 'GitHub key', 'github.com', 'git'])
    assert spec.name == 'gh'
    assert spec.comment == 'GitHub key'
    assert spec.host == 'github.com'
    assert spec.user == 'git'
    assert spec.hostname == ''


def test_key_spec_empty_name_and_host_fall_back():
    spec = KeySpec.from_args(['', 'c', ''])
    assert spec.name == 'id_ed25519'
    assert spec.host == '*'


def test_key_spec_custom_defaults():
    spec = KeySpec.from_args([], default_name='work', default_host='bastion')
    assert spec.name == 'work'
    assert spec.host == 'bastion'


def test_key_spec_rejects_too_many_values():
    with pytest.raises(ValueError, match='at most 5'):
        KeySpec.from_args(['a', 'b', 'c', 'd', 'e', 'f'])


def test_key_paths(tmp_path):
    pair = key_paths(tmp_path, 'ci_key')
    assert pair.private == tmp_path / 'ci_key'
    assert pair.public == tmp_path / 'ci_key.pub'
    assert not pair.exists()

    pair.public.write_text('x')
    assert pair.exists()


def test_prepare_ssh_dir_creates_with_700(tmp_path):
    ssh_dir = tmp_path / 'home' / '.ssh'
    prepare_ssh_dir(ssh_dir)
    assert ssh_dir.is_dir()
    assert _mode(ssh_dir) == 0o700


def test_prepare_ssh_dir_tightens_existing(tmp_path):
    ssh_dir = tmp_path / '.ssh'
    ssh_dir.mkdir(mode=0o755)
    ssh_dir.chmod(0o755)
    prepare_ssh_dir(ssh_dir)
    assert _mode(ssh_dir) == 0o700


def test_generate_key_omits_empty_comment(tmp_path):
    pair = key_paths(tmp_path, 'ci_key')
    with patch('subprocess.run') as mock_run:
        generate_key(pair, '')

    cmd = mock_run.call_args[0][0]
    assert cmd == ['ssh-keygen', '-t', 'ed25519', '-f', str(pair.private), '-N', '']
    assert mock_run.call_args[1]['check'] is True


def test_generate_key_passes_comment(tmp_path):
    pair = key_paths(tmp_path, 'gh')
    with patch('subprocess.run') as mock_run:
        generate_key(pair, 'GitHub key')

    cmd = mock_run.call_args[0][0]
    assert cmd[-2:] == ['-C', 'GitHub key']


def test_generate_key_removes_previous_pair(tmp_path):
    pair = key_paths(tmp_path, 'gh')
    pair.private.write_text('old')
    pair.public.write_text('old')

    with patch('subprocess.run'):
        generate_key(pair)

    assert not pair.private.exists()
    assert not pair.public.exists()


def test_generate_key_propagates_failure(tmp_path):
    pair = key_paths(tmp_path, 'gh')
    error = subprocess.CalledProcessError(1, ['ssh-keygen'], stderr='boom')
    with patch('subprocess.run', side_effect=error):
        with pytest.raises(subprocess.CalledProcessError):
            generate_key(pair)


def test_fix_permissions(tmp_path):
    pair = key_paths(tmp_path, 'k')
    pair.private.write_text('private')
    pair.public.write_text('public')
    pair.private.chmod(0o644)
    pair.public.chmod(0o600)

    fix_permissions(pair)

    assert _mode(pair.private) == 0o600
    assert _mode(pair.public) == 0o644


@needs_ssh_keygen
def test_generate_key_with_ssh_keygen(tmp_path):
    """Should produce a real ed25519 keypair"""
    pair = key_paths(tmp_path, 'id_ed25519_test')

    generate_key(pair, 'sshsetup test')
    fix_permissions(pair)

    pubkey = get_public_key(pair)
    assert pubkey.startswith('ssh-ed25519')
    assert pubkey.endswith('sshsetup test')
    assert _mode(pair.private) == 0o600


@needs_ssh_keygen
def test_generate_key_overwrites_without_prompting(tmp_path):
    pair = key_paths(tmp_path, 'id_ed25519_test')
    generate_key(pair)
    first = get_public_key(pair)

    generate_key(pair)

    assert get_public_key(pair) != first


def test_key_paths_absolute_name_stays_inside(tmp_path):
    ssh_dir = tmp_path / '.ssh'
    pair = key_paths(ssh_dir, '/tmp/k')
    assert pair.private == ssh_dir / 'tmp' / 'k'
    assert pair.public == ssh_dir / 'tmp' / 'k.pub'


def test_generate_key_returns_tool_output(tmp_path):
    pair = key_paths(tmp_path, 'gh')
    completed = subprocess.CompletedProcess([], 0, stdout="The key's randomart image is:\n", stderr='')
    with patch('subprocess.run', return_value=completed):
        assert generate_key(pair) == "The key's randomart image is:\n"
