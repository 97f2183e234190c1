from typing import List, Optional, Tuple

import subprocess

import pytest

from arm_kube_tools import ProvisionConfig, PackageIndexEntry, PackageManager, ServiceManager

MADISON_LINES = [
    " docker-ce | 18.06.1~ce~3-0~raspbian | https://download.docker.com/linux/raspbian stretch/stable armhf Packages",
    " docker-ce | 17.09.0~ce-0~raspbian | https://download.docker.com/linux/raspbian stretch/stable armhf Packages",
    " docker-ce | 17.03.2~ce-0~raspbian | https://download.docker.com/linux/raspbian stretch/stable armhf Packages",
    " docker-ce | 17.03.1~ce-0~raspbian | https://download.docker.com/linux/raspbian stretch/stable armhf Packages",
]

Call = Tuple[str, ...]

class FakePackageManager(PackageManager):
  calls: List[Call]
  index: List[PackageIndexEntry]
  fail_on: Optional[str]
  missing_packages: List[str]

  def __init__(self, calls: List[Call], index_lines: Optional[List[str]]=None):
    self.calls = calls
    if index_lines is None:
      index_lines = MADISON_LINES
    self.index = [ PackageIndexEntry.parse(x) for x in index_lines ]
    self.fail_on = None
    self.missing_packages = []

  def _record(self, *call: str) -> None:
    self.calls.append(call)
    if call[0] == self.fail_on:
      raise subprocess.CalledProcessError(100, list(call))

  def update(self) -> None:
    self._record('update')

  def install(self, package_names: List[str], version: Optional[str]=None) -> None:
    if version is None:
      self._record('install', *package_names)
    else:
      self._record('install', *[ f"{x}={version}" for x in package_names ])
      if version == '':
        # apt-get exits 100 on "pkg=" with no version
        raise subprocess.CalledProcessError(100, ['apt-get', 'install', '-y'] + [ f"{x}=" for x in package_names ])

  def remove(self, package_names: List[str]) -> None:
    self._record('remove', *package_names)
    if any(x in self.missing_packages for x in package_names):
      raise subprocess.CalledProcessError(100, ['apt-get', 'remove'] + package_names)

  def autoremove(self) -> None:
    self._record('autoremove')

  def purge(self, package_names: List[str]) -> None:
    self._record('purge', *package_names)
    if any(x in self.missing_packages for x in package_names):
      raise subprocess.CalledProcessError(100, ['apt-get', 'purge'] + package_names)

  def available_versions(self, package_name: str) -> List[PackageIndexEntry]:
    self._record('available_versions', package_name)
    return [ x for x in self.index if x.package_name == package_name ]

  def hold(self, package_name: str) -> None:
    self._record('hold', package_name)

  def add_signing_key(self, url: str) -> None:
    self._record('add_signing_key', url)

class FakeServiceManager(ServiceManager):
  calls: List[Call]

  def __init__(self, calls: List[Call]):
    self.calls = calls

  def restart(self, service_name: str) -> None:
    self.calls.append(('restart', service_name))

@pytest.fixture
def calls() -> List[Call]:
  return []

@pytest.fixture
def package_manager(calls: List[Call]) -> FakePackageManager:
  return FakePackageManager(calls)

@pytest.fixture
def service_manager(calls: List[Call]) -> FakeServiceManager:
  return FakeServiceManager(calls)

@pytest.fixture
def cfg(tmp_path) -> ProvisionConfig:
  return ProvisionConfig(
      apt_sources_dir=str(tmp_path / "sources.list.d"),
      docker_daemon_config=str(tmp_path / "docker" / "daemon.json"),
    )

@pytest.fixture
def no_docker(monkeypatch) -> None:
  monkeypatch.setattr('arm_kube_tools.installer.docker.installer.docker_is_installed', lambda: False)

@pytest.fixture
def as_root(monkeypatch) -> None:
  monkeypatch.setattr('os.geteuid', lambda: 0)

@pytest.fixture
def as_user(monkeypatch) -> None:
  monkeypatch.setattr('os.geteuid', lambda: 1000)
