#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""ProvisionConfig class definition"""

from typing import Optional, List, Dict, Any, cast

import os
import yaml

try:
  from yaml import CLoader as YamlLoader
except ImportError:
  from yaml import Loader as YamlLoader  #type: ignore[misc]

from .exceptions import ArmKubeError

DEFAULT_DOCKER_VERSION = "17.03"

KNOWN_DOCKER_VERSIONS: List[str] = [
    "17.03",
    "17.06",
    "17.09",
    "17.12",
    "18.03",
    "18.06",
    "18.09",
]

DEPENDENCY_PACKAGES: List[str] = [
    "apt-transport-https",
    "ca-certificates",
    "curl",
    "software-properties-common",
]

PREVIOUS_DOCKER_PACKAGES: List[str] = [
    "docker",
    "docker-ce",
    "docker.io",
    "docker-engine",
]

KUBERNETES_PACKAGES: List[str] = [
    "kubelet",
    "kubeadm",
    "kubectl",
]

DOCKER_PACKAGE = "docker-ce"
DOCKER_SERVICE = "docker"
DOCKER_STORAGE_DRIVER = "overlay2"

class ProvisionConfig:
  """Settings for one provisioning run.

  Populated once, from defaults, an optional YAML file, and the command line,
  and then handed to each installation step.
  """
  docker_version: str = DEFAULT_DOCKER_VERSION
  docker_version_chosen: bool = False
  arch: str = "armhf"
  apt_sources_dir: str = "/etc/apt/sources.list.d"
  docker_daemon_config: str = "/etc/docker/daemon.json"
  docker_repo_base_url: str = "https://download.docker.com/linux"
  docker_channel: str = "stable"
  kubernetes_key_url: str = "https://packages.cloud.google.com/apt/doc/apt-key.gpg"
  kubernetes_repo_line: str = "deb http://apt.kubernetes.io/ kubernetes-xenial main"

  settable_keys = (
      'docker_version',
      'arch',
      'apt_sources_dir',
      'docker_daemon_config',
      'docker_repo_base_url',
      'docker_channel',
      'kubernetes_key_url',
      'kubernetes_repo_line',
    )

  def __init__(self, docker_version: Optional[str]=None, **kwargs):
    self.update(kwargs)
    if not docker_version is None:
      self.docker_version = docker_version
      self.docker_version_chosen = True

  def update(self, settings: Dict[str, Any]) -> None:
    for key, value in settings.items():
      if not key in self.settable_keys:
        raise ArmKubeError(f"Unknown configuration setting '{key}'")
      if not isinstance(value, str):
        raise ArmKubeError(
            f"Configuration setting '{key}' must be a string, got {value!r}; "
            f"quote the value in YAML (e.g., {key}: \"17.03\")"
          )
      setattr(self, key, value)
      if key == 'docker_version':
        self.docker_version_chosen = True

  @classmethod
  def load(cls, config_file: Optional[str]=None, docker_version: Optional[str]=None) -> 'ProvisionConfig':
    """Creates a config from an optional YAML file and an optional command-line version.

    A version given on the command line takes precedence over one in the file.
    """
    cfg = cls()
    if not config_file is None:
      config_file = os.path.abspath(os.path.normpath(os.path.expanduser(config_file)))
      with open(config_file, encoding='utf-8') as f:
        data = yaml.load(f, Loader=YamlLoader)
      if data is None:
        data = {}
      if not isinstance(data, dict):
        raise ArmKubeError(f"Configuration file {config_file} must contain a YAML mapping")
      cfg.update(cast(Dict[str, Any], data))
    if not docker_version is None:
      cfg.docker_version = docker_version
      cfg.docker_version_chosen = True
    return cfg

  @property
  def docker_source_file(self) -> str:
    return os.path.join(self.apt_sources_dir, "docker.list")

  @property
  def kubernetes_source_file(self) -> str:
    return os.path.join(self.apt_sources_dir, "kubernetes.list")

  def docker_key_url(self, distro_id: str) -> str:
    return f"{self.docker_repo_base_url}/{distro_id}/gpg"

  def docker_repo_line(self, distro_id: str, codename: str) -> str:
    return f"deb [arch={self.arch}] {self.docker_repo_base_url}/{distro_id} {codename} {self.docker_channel}"

  def describe_action(self) -> str:
    if self.docker_version_chosen:
      return f"install Docker version {self.docker_version} and Kubernetes"
    return f"install the default Docker version ({self.docker_version}) and Kubernetes"
