from typing import List

import pytest

from arm_kube_tools import __version__, KNOWN_DOCKER_VERSIONS
from arm_kube_tools.__main__ import CommandHandler

from conftest import FakePackageManager, FakeServiceManager

@pytest.fixture
def config_file(tmp_path) -> str:
  pathname = tmp_path / "config.yaml"
  pathname.write_text(
      f"apt_sources_dir: {tmp_path / 'sources.list.d'}\n"
      f"docker_daemon_config: {tmp_path / 'docker' / 'daemon.json'}\n",
      encoding='utf-8',
    )
  return str(pathname)

@pytest.fixture
def host(monkeypatch, no_docker) -> None:
  monkeypatch.setattr('arm_kube_tools.installer.docker.installer.get_linux_distro_id', lambda: 'raspbian')
  monkeypatch.setattr('arm_kube_tools.installer.docker.installer.get_linux_distro_name', lambda: 'stretch')

def answer(text: str):
  def _input(prompt: str) -> str:
    return text
  return _input

def refuse_input(prompt: str) -> str:
  raise AssertionError("confirmation prompt must not be shown")

def make_handler(argv: List[str], package_manager, service_manager, input_func=refuse_input) -> CommandHandler:
  return CommandHandler(
      argv,
      prog='arm-kube-tools',
      package_manager=package_manager,
      service_manager=service_manager,
      input_func=input_func,
    )

@pytest.mark.parametrize('flag', ['-h', '-v', '-l'])
def test_informational_flags_exit_1_without_side_effects(flag, as_user, package_manager, service_manager, calls):
  rc = make_handler([flag], package_manager, service_manager).run()
  assert rc == 1
  assert calls == []

def test_help_prints_usage(package_manager, service_manager, capsys):
  assert make_handler(['-h'], package_manager, service_manager).run() == 1
  out = capsys.readouterr().out
  assert 'usage: arm-kube-tools' in out
  assert '-i VERSION' in out

def test_version_prints_version_string(package_manager, service_manager, capsys):
  assert make_handler(['-v'], package_manager, service_manager).run() == 1
  assert __version__ in capsys.readouterr().out

def test_list_prints_known_versions(package_manager, service_manager, capsys):
  assert make_handler(['-l'], package_manager, service_manager).run() == 1
  out = capsys.readouterr().out
  for docker_version in KNOWN_DOCKER_VERSIONS:
    assert docker_version in out

@pytest.mark.parametrize('argv', [['-x'], ['--bogus'], ['-i'], ['extra']])
def test_bad_arguments_print_help(argv, package_manager, service_manager, calls, capsys):
  rc = make_handler(argv, package_manager, service_manager).run()
  assert rc == 1
  assert 'usage: arm-kube-tools' in capsys.readouterr().out
  assert calls == []

def test_non_root_is_rejected(as_user, config_file, package_manager, service_manager, calls, capsys):
  rc = make_handler(['--config', config_file, '-M'], package_manager, service_manager).run()
  assert rc == 1
  assert 'sudo' in capsys.readouterr().out
  assert calls == []

@pytest.mark.parametrize('reply', ['n', 'N', '', 'q', ' y'])
def test_declined_confirmation_exits_0(reply, as_root, config_file, package_manager, service_manager, calls):
  rc = make_handler(['--config', config_file, '-M'], package_manager, service_manager, answer(reply)).run()
  assert rc == 0
  assert calls == []

def test_end_of_input_declines(as_root, config_file, package_manager, service_manager, calls):
  def eof(prompt: str) -> str:
    raise EOFError()
  assert make_handler(['--config', config_file, '-M'], package_manager, service_manager, eof).run() == 0
  assert calls == []

@pytest.mark.parametrize('reply', ['y', 'Y', 'yes'])
def test_full_run_with_default_version(reply, as_root, host, config_file, package_manager, service_manager, calls, capsys):
  rc = make_handler(['--config', config_file, '-M'], package_manager, service_manager, answer(reply)).run()
  assert rc == 0
  assert calls == [
      ('update',),
      ('install', 'apt-transport-https', 'ca-certificates', 'curl', 'software-properties-common'),
      ('add_signing_key', 'https://download.docker.com/linux/raspbian/gpg'),
      ('update',),
      ('available_versions', 'docker-ce'),
      ('install', 'docker-ce=17.03.2~ce-0~raspbian'),
      ('hold', 'docker-ce'),
      ('restart', 'docker'),
      ('add_signing_key', 'https://packages.cloud.google.com/apt/doc/apt-key.gpg'),
      ('update',),
      ('install', 'kubelet', 'kubeadm', 'kubectl'),
    ]
  out = capsys.readouterr().out
  assert 'default Docker version (17.03)' in out
  assert 'kubeadm version' in out

def test_chosen_version_is_installed(as_root, host, config_file, package_manager, service_manager, calls, capsys):
  rc = make_handler(['-i', '17.09', '--config', config_file, '-M'], package_manager, service_manager, answer('y')).run()
  assert rc == 0
  assert ('install', 'docker-ce=17.09.0~ce-0~raspbian') in calls
  assert 'Docker version 17.09' in capsys.readouterr().out

def test_unavailable_version_fails_in_package_manager(as_root, host, config_file, package_manager, service_manager, calls):
  rc = make_handler(['-i', '19.03', '--config', config_file, '-M'], package_manager, service_manager, answer('y')).run()
  assert rc == 100
  assert calls[-1] == ('install', 'docker-ce=')
  assert ('hold', 'docker-ce') not in calls
  assert ('install', 'kubelet', 'kubeadm', 'kubectl') not in calls

def test_signing_key_failure_stops_the_run(as_root, host, config_file, calls, service_manager):
  package_manager = FakePackageManager(calls)
  package_manager.fail_on = 'add_signing_key'
  rc = make_handler(['--config', config_file, '-M'], package_manager, service_manager, answer('y')).run()
  assert rc != 0
  assert calls[-1] == ('add_signing_key', 'https://download.docker.com/linux/raspbian/gpg')
  assert not any(x[0] == 'install' and x[1].startswith('docker-ce=') for x in calls)
  assert ('restart', 'docker') not in calls

def test_non_root_is_rejected_before_reading_config(as_user, tmp_path, package_manager, service_manager, calls, capsys):
  bad_config = tmp_path / "bad.yaml"
  bad_config.write_text("key: [unclosed\n", encoding='utf-8')
  for config_file in (str(bad_config), str(tmp_path / "missing.yaml")):
    rc = make_handler(['--config', config_file, '-M'], package_manager, service_manager).run()
    assert rc == 1
    assert 'sudo' in capsys.readouterr().out
  assert calls == []

def test_command_failure_exit_code_propagates(as_root, host, config_file, calls, service_manager):
  package_manager = FakePackageManager(calls)
  package_manager.fail_on = 'hold'
  rc = make_handler(['--config', config_file, '-M'], package_manager, service_manager, answer('y')).run()
  assert rc == 100
  assert calls[-1] == ('hold', 'docker-ce')
  assert ('restart', 'docker') not in calls

def test_traceback_reraises(as_root, host, config_file, calls, service_manager):
  package_manager = FakePackageManager(calls)
  package_manager.fail_on = 'update'
  handler = make_handler(['--config', config_file, '-M', '--traceback'], package_manager, service_manager, answer('y'))
  with pytest.raises(Exception):
    handler.run()

def test_missing_config_file_is_an_error(as_root, tmp_path, package_manager, service_manager, calls):
  missing = str(tmp_path / "nope.yaml")
  rc = make_handler(['--config', missing, '-M'], package_manager, service_manager).run()
  assert rc == 1
  assert calls == []
