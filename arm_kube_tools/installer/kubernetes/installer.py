#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Installer for kubelet, kubeadm and kubectl"""

from typing import Optional

from ...config import ProvisionConfig, KUBERNETES_PACKAGES
from ...console import Console
from ...os_packages import PackageManager, PackageList, write_apt_sources_list

def install_kubernetes(
      cfg: ProvisionConfig,
      package_manager: PackageManager,
      console: Optional[Console]=None,
    ) -> None:
  if console is None:
    console = Console()

  console.info("kubernetes", f"Adding Kubernetes signing key from {cfg.kubernetes_key_url}")
  package_manager.add_signing_key(cfg.kubernetes_key_url)

  console.info("kubernetes", f"Writing {cfg.kubernetes_source_file}")
  write_apt_sources_list(cfg.kubernetes_source_file, cfg.kubernetes_repo_line)
  package_manager.update()

  # whatever version the index currently offers; not pinned
  pl = PackageList(KUBERNETES_PACKAGES)
  console.info("kubernetes", f"Installing {', '.join(pl)}")
  pl.install_all(package_manager)
