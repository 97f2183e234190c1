#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Removal of previous Docker installations and installation of a pinned docker-ce"""

from typing import Optional

import json
import subprocess

from ...config import (
    ProvisionConfig,
    DOCKER_PACKAGE,
    DOCKER_SERVICE,
    DOCKER_STORAGE_DRIVER,
    PREVIOUS_DOCKER_PACKAGES,
  )
from ...console import Console
from ...internal_types import JsonableDict
from ...os_packages import PackageManager, PackageList, select_package_version, write_apt_sources_list
from ...services import ServiceManager
from ...util import (
    command_exists,
    get_linux_distro_id,
    get_linux_distro_name,
    remove_file_if_exists,
    write_file_contents,
  )

def docker_is_installed() -> bool:
  return command_exists('docker')

def remove_docker(
      cfg: ProvisionConfig,
      package_manager: PackageManager,
      console: Optional[Console]=None,
      installed: Optional[bool]=None,
    ) -> bool:
  """Removes a previous Docker installation, if the docker command is present.

  Each package is removed, autoremoved and purged on a best-effort basis; packages
  that are not installed or not known to the package index are reported and skipped.
  The Docker apt sources list is deleted afterwards.

  Returns:
      bool: True if a previous installation was found
  """
  if console is None:
    console = Console()
  if installed is None:
    installed = docker_is_installed()
  if not installed:
    console.info("docker", "No previous Docker installation found")
    return False

  console.info("docker", "Removing previous Docker installation")
  for package_name in PREVIOUS_DOCKER_PACKAGES:
    try:
      package_manager.remove([package_name])
    except subprocess.CalledProcessError as e:
      console.warning("docker", f"Could not remove {package_name}: {e}")
  package_manager.autoremove()
  for package_name in PREVIOUS_DOCKER_PACKAGES:
    try:
      package_manager.purge([package_name])
    except subprocess.CalledProcessError as e:
      console.warning("docker", f"Could not purge {package_name}: {e}")

  if remove_file_if_exists(cfg.docker_source_file):
    console.info("docker", f"Removed {cfg.docker_source_file}")
  return True

def docker_daemon_config() -> JsonableDict:
  return { "storage-driver": DOCKER_STORAGE_DRIVER }

def write_docker_daemon_config(pathname: str) -> None:
  text = json.dumps(docker_daemon_config(), indent=2, sort_keys=True) + '\n'
  write_file_contents(pathname, text)

def install_docker(
      cfg: ProvisionConfig,
      package_manager: PackageManager,
      service_manager: ServiceManager,
      console: Optional[Console]=None,
      distro_id: Optional[str]=None,
      codename: Optional[str]=None,
    ) -> str:
  """Installs the first docker-ce version in the package index that matches cfg.docker_version.

  Registers Docker's signing key and repository for the running distribution,
  installs and holds the selected package version, writes the storage-driver
  configuration and restarts the docker service.

  Returns:
      str: The full package version that was installed

  Raises:
      subprocess.CalledProcessError: Any underlying command failed, including the install
                                     of an empty version when no index entry matches
  """
  if console is None:
    console = Console()
  if distro_id is None:
    distro_id = get_linux_distro_id()
  if codename is None:
    codename = get_linux_distro_name()

  key_url = cfg.docker_key_url(distro_id)
  console.info("docker", f"Adding Docker signing key from {key_url}")
  package_manager.add_signing_key(key_url)

  repo_line = cfg.docker_repo_line(distro_id, codename)
  console.info("docker", f"Writing {cfg.docker_source_file}")
  write_apt_sources_list(cfg.docker_source_file, repo_line)
  package_manager.update()

  entries = package_manager.available_versions(DOCKER_PACKAGE)
  package_version = select_package_version(entries, cfg.docker_version)
  if package_version is None:
    # the package manager rejects the empty version and the run stops there
    console.warning(
        "docker",
        f"No {DOCKER_PACKAGE} package matching version '{cfg.docker_version}' "
        f"is available from {cfg.docker_repo_base_url}/{distro_id} ({codename})"
      )
    package_version = ''

  console.info("docker", f"Installing {DOCKER_PACKAGE} {package_version}")
  PackageList([ DOCKER_PACKAGE ]).install_all(package_manager, version=package_version)
  package_manager.hold(DOCKER_PACKAGE)

  console.info("docker", f"Setting storage driver to {DOCKER_STORAGE_DRIVER} in {cfg.docker_daemon_config}")
  write_docker_daemon_config(cfg.docker_daemon_config)
  service_manager.restart(DOCKER_SERVICE)

  return package_version
