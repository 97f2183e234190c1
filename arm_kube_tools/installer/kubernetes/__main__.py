#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""kubelet/kubeadm/kubectl installer command-line tool"""

from typing import Optional, Sequence

import sys

# do not use relative imports
from arm_kube_tools import Console, CmdExitError, ProvisionConfig, AptPackageManager
from arm_kube_tools.provision import check_root
from arm_kube_tools.installer.kubernetes import install_kubernetes

def main(argv: Optional[Sequence[str]]=None, prog: Optional[str]=None) -> int:
  import argparse

  parser = argparse.ArgumentParser(prog=prog, description='Install kubelet, kubeadm and kubectl.')
  parser.add_argument('--config', default=None,
                      help='YAML file with configuration overrides')

  args = parser.parse_args(argv)

  console = Console()
  try:
    check_root(console)
    cfg = ProvisionConfig.load(config_file=args.config)
    install_kubernetes(cfg, AptPackageManager(), console=console)
  except CmdExitError as ex:
    return ex.exit_code
  return 0

if __name__ == "__main__":
  sys.exit(main())
