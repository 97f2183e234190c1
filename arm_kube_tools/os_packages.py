#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package manager capability and its apt-based implementation"""

from typing import List, Optional, Set, TextIO, Union, Iterator

import os
import tempfile

from .exceptions import ArmKubeError
from .util import (
    check_call,
    check_output_stderr_exception,
    download_url_file,
    write_file_contents,
  )

class PackageIndexEntry:
  """One line of `apt-cache madison` output"""
  package_name: str
  version: str
  source: str
  line: str

  def __init__(self, package_name: str, version: str, source: str, line: Optional[str]=None):
    self.package_name = package_name
    self.version = version
    self.source = source
    if line is None:
      line = f"{package_name} | {version} | {source}"
    self.line = line

  @classmethod
  def parse(cls, line: str) -> 'PackageIndexEntry':
    fields = [ x.strip() for x in line.split('|') ]
    if len(fields) < 3 or fields[0] == '' or fields[1] == '':
      raise ArmKubeError(f"Unrecognized package index line: <{line.rstrip()}>")
    return cls(fields[0], fields[1], '|'.join(fields[2:]).strip(), line=line.rstrip())

  def __repr__(self) -> str:
    return f"PackageIndexEntry({self.package_name!r}, {self.version!r}, {self.source!r})"

def parse_package_index(text: str) -> List[PackageIndexEntry]:
  return [ PackageIndexEntry.parse(x) for x in text.split('\n') if x.strip() != '' ]

def select_package_version(entries: List[PackageIndexEntry], version_filter: str) -> Optional[str]:
  """Returns the version of the first index entry whose text contains version_filter.

  The filter is a literal substring, not a version range. Selection depends on
  the order in which the package index lists its entries.

  Args:
      entries (List[PackageIndexEntry]): Entries as returned by PackageManager.available_versions
      version_filter (str): A substring such as "17.03"

  Returns:
      Optional[str]: The full package version (e.g., "17.03.2~ce-0~raspbian"), or None
                     if no entry matches.
  """
  for entry in entries:
    if version_filter in entry.line:
      return entry.version
  return None

class PackageManager:
  """The package operations needed by the installers.

  Every method blocks until the underlying operation completes and raises
  on failure.
  """

  def update(self) -> None:
    raise NotImplementedError()

  def install(self, package_names: List[str], version: Optional[str]=None) -> None:
    """Installs packages. If version is provided, it applies to every package."""
    raise NotImplementedError()

  def remove(self, package_names: List[str]) -> None:
    raise NotImplementedError()

  def autoremove(self) -> None:
    raise NotImplementedError()

  def purge(self, package_names: List[str]) -> None:
    raise NotImplementedError()

  def available_versions(self, package_name: str) -> List[PackageIndexEntry]:
    raise NotImplementedError()

  def hold(self, package_name: str) -> None:
    raise NotImplementedError()

  def add_signing_key(self, url: str) -> None:
    raise NotImplementedError()

class AptPackageManager(PackageManager):
  """PackageManager that shells out to apt-get, apt-cache, apt-mark and apt-key"""
  _stderr: Optional[TextIO]

  def __init__(self, stderr: Optional[TextIO]=None):
    self._stderr = stderr

  def update(self) -> None:
    check_call(['apt-get', 'update'], stderr=self._stderr, reason="Updating available apt-get package metadata")

  def install(self, package_names: List[str], version: Optional[str]=None) -> None:
    if len(package_names) > 0:
      targets = package_names if version is None else [ f"{x}={version}" for x in package_names ]
      check_call(['apt-get', 'install', '-y'] + targets, stderr=self._stderr, reason=f"Installing packages {targets}")

  def remove(self, package_names: List[str]) -> None:
    if len(package_names) > 0:
      check_call(['apt-get', 'remove', '-y'] + package_names, stderr=self._stderr, reason=f"Removing packages {package_names}")

  def autoremove(self) -> None:
    check_call(['apt-get', 'autoremove', '-y'], stderr=self._stderr, reason="Removing unused dependency packages")

  def purge(self, package_names: List[str]) -> None:
    if len(package_names) > 0:
      check_call(['apt-get', 'purge', '-y'] + package_names, stderr=self._stderr, reason=f"Purging packages {package_names}")

  def available_versions(self, package_name: str) -> List[PackageIndexEntry]:
    output = check_output_stderr_exception(
        ['apt-cache', 'madison', package_name],
        stderr=self._stderr,
        reason=f"Querying available versions of {package_name}",
      )
    return parse_package_index(output)

  def hold(self, package_name: str) -> None:
    check_call(['apt-mark', 'hold', package_name], stderr=self._stderr, reason=f"Pinning package {package_name}")

  def add_signing_key(self, url: str) -> None:
    with tempfile.TemporaryDirectory() as tmp_dir:
      key_file = os.path.join(tmp_dir, "signing-key.asc")
      download_url_file(url, key_file)
      check_call(['apt-key', 'add', key_file], stderr=self._stderr, reason=f"Trusting package signing key from {url}")

def write_apt_sources_list(dest_file: str, line: str) -> None:
  """Overwrites an apt sources list file with a single repository line."""
  write_file_contents(dest_file, line.rstrip('\n') + '\n')

class PackageList:
  """An ordered, duplicate-free list of package names to be acted on together"""
  _package_names: List[str]
  _package_name_set: Set[str]

  def __init__(self, package_names: Optional[List[str]]=None):
    self._package_names = []
    self._package_name_set = set()
    self.add_packages(package_names)

  def add_packages(self, package_names: Optional[Union[str, List[str]]]) -> None:
    if not package_names is None:
      if not isinstance(package_names, list):
        package_names = [ package_names ]
      for package_name in package_names:
        if not package_name in self._package_name_set:
          self._package_names.append(package_name)
          self._package_name_set.add(package_name)

  def install_all(self, package_manager: PackageManager, version: Optional[str]=None) -> None:
    if len(self._package_names) > 0:
      package_manager.install(list(self._package_names), version=version)

  def __len__(self) -> int:
    return len(self._package_names)

  def __contains__(self, package_name: str) -> bool:
    return package_name in self._package_name_set

  def __iter__(self) -> Iterator[str]:
    return iter(self._package_names)

  def is_empty(self) -> bool:
    return len(self._package_names) == 0
