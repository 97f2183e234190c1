#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""arm-kube-tools CLI"""

from typing import Optional, Sequence, Callable

import sys
import argparse
import subprocess
import argcomplete # type: ignore[import]
import colorama # type: ignore[import]

# This module runs as -m -- do NOT use relative imports
from arm_kube_tools import (
    __version__ as pkg_version,
    ArgparseExitError,
    CmdExitError,
    Console,
    PackageManager,
    ProvisionConfig,
    ServiceManager,
    DEFAULT_DOCKER_VERSION,
    KNOWN_DOCKER_VERSIONS,
    check_root,
    provision,
  )
from arm_kube_tools.console import is_colorizable

class NoExitArgumentParser(argparse.ArgumentParser):
  def exit(self, status=0, message=None):
    if message:
      self._print_message(message, sys.stderr)
    raise ArgparseExitError(status, message)

  def error(self, message):
    self.print_help()
    self.exit(1, f"{self.prog}: error: {message}\n")

class CommandHandler:
  _argv: Optional[Sequence[str]]
  _prog: Optional[str]
  _parser: NoExitArgumentParser
  _args: argparse.Namespace
  _console: Console
  _package_manager: Optional[PackageManager]
  _service_manager: Optional[ServiceManager]
  _input_func: Optional[Callable[[str], str]]

  def __init__(
        self,
        argv: Optional[Sequence[str]]=None,
        prog: Optional[str]=None,
        package_manager: Optional[PackageManager]=None,
        service_manager: Optional[ServiceManager]=None,
        input_func: Optional[Callable[[str], str]]=None,
      ):
    self._argv = argv
    self._prog = prog
    self._package_manager = package_manager
    self._service_manager = service_manager
    self._input_func = input_func
    self._console = Console()

  def cmd_help(self) -> int:
    self._parser.print_help()
    return 1

  def cmd_version(self) -> int:
    print(f"{self._parser.prog} version {pkg_version}")
    return 1

  def cmd_list(self) -> int:
    print("Known working Docker versions:")
    for docker_version in KNOWN_DOCKER_VERSIONS:
      print(f"  {docker_version}")
    return 1

  def cmd_install(self) -> int:
    check_root(self._console)
    cfg = ProvisionConfig.load(config_file=self._args.config, docker_version=self._args.docker_version)
    provision(
        cfg,
        console=self._console,
        package_manager=self._package_manager,
        service_manager=self._service_manager,
        input_func=self._input_func,
      )
    return 0

  def build_parser(self) -> NoExitArgumentParser:
    parser = NoExitArgumentParser(
        prog=self._prog,
        add_help=False,
        allow_abbrev=False,
        description="Replace any existing Docker with a pinned docker-ce version, then install "
                    "kubelet, kubeadm and kubectl on a Debian-family ARM host.",
        epilog=f"With no options, Docker {DEFAULT_DOCKER_VERSION} is installed after confirmation.",
      )
    parser.add_argument('-h', dest='show_help', action='store_true', default=False,
                        help='Show this help message and exit')
    parser.add_argument('-v', dest='show_version', action='store_true', default=False,
                        help='Show the version of this tool and exit')
    parser.add_argument('-l', dest='list_versions', action='store_true', default=False,
                        help='List known working Docker versions and exit')
    parser.add_argument('-i', dest='docker_version', metavar='VERSION', default=None,
                        help=f'Docker version to install, matched as a substring of the package version. '
                             f'Default is {DEFAULT_DOCKER_VERSION}')
    parser.add_argument('--config', default=None,
                        help='YAML file with configuration overrides')
    parser.add_argument('-M', '--monochrome', action='store_true', default=False,
                        help='Output in monochrome. Default is to colorize if stdout is a terminal')
    parser.add_argument('--traceback', '--tb', action='store_true', default=False,
                        help='Display detailed exception information')
    return parser

  def run(self) -> int:
    """Run the arm-kube-tools command-line tool with provided arguments

    Returns:
        int: The exit code that would be returned if this were run as a standalone command.
    """
    parser = self.build_parser()
    self._parser = parser
    argcomplete.autocomplete(parser)
    try:
      args = parser.parse_args(self._argv)
    except ArgparseExitError as ex:
      return ex.exit_code
    self._args = args

    if args.show_help:
      return self.cmd_help()
    if args.show_version:
      return self.cmd_version()
    if args.list_versions:
      return self.cmd_list()

    if args.monochrome:
      self._console = Console(colorize=False)
    elif is_colorizable(sys.stdout):
      colorama.init(wrap=False)

    traceback: bool = args.traceback
    try:
      rc = self.cmd_install()
    except CmdExitError as ex:
      rc = ex.exit_code
    except KeyboardInterrupt:
      rc = 130
    except Exception as ex:
      if isinstance(ex, subprocess.CalledProcessError) and ex.returncode > 0:
        rc = ex.returncode
      else:
        rc = 1
      if traceback:
        raise
      console = self._console
      print(f"{console.color(colorama.Fore.RED)}{parser.prog}: error: {ex}{console.color(colorama.Style.RESET_ALL)}",
            file=sys.stderr)
    return rc

def run(argv: Optional[Sequence[str]]=None, prog: Optional[str]=None) -> int:
  try:
    rc = CommandHandler(argv, prog=prog).run()
  except CmdExitError as ex:
    rc = ex.exit_code
  return rc

def main_script():
  rc = run(prog="arm-kube-tools")
  sys.exit(rc)

# allow running with "python3 -m", or as a standalone script
if __name__ == "__main__":
  main_script()
