#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Pinned docker-ce remover/installer command-line tool"""

from typing import Optional, Sequence

import sys

# do not use relative imports
from arm_kube_tools import Console, CmdExitError, ProvisionConfig, AptPackageManager, SystemctlServiceManager
from arm_kube_tools.provision import check_root
from arm_kube_tools.installer.docker import install_docker, remove_docker

def main(argv: Optional[Sequence[str]]=None, prog: Optional[str]=None) -> int:
  import argparse

  parser = argparse.ArgumentParser(prog=prog, description='Replace any existing Docker with a pinned docker-ce version.')
  parser.add_argument('-i', '--docker-version', default=None,
                      help='Docker version to install, matched as a substring of the package version.')
  parser.add_argument('--config', default=None,
                      help='YAML file with configuration overrides')
  parser.add_argument('--keep-existing', action='store_true', default=False,
                      help='Do not remove a previous Docker installation first.')

  args = parser.parse_args(argv)

  console = Console()
  try:
    check_root(console)
    cfg = ProvisionConfig.load(config_file=args.config, docker_version=args.docker_version)
    pm = AptPackageManager()
    if not args.keep_existing:
      remove_docker(cfg, pm, console=console)
    package_version = install_docker(cfg, pm, SystemctlServiceManager(), console=console)
  except CmdExitError as ex:
    return ex.exit_code
  console.info("done", f"docker-ce {package_version} is installed and held")
  return 0

if __name__ == "__main__":
  sys.exit(main())
