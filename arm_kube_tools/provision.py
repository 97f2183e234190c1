#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""The provisioning sequence: guards, stages and completion summary"""

from typing import Callable, List, Optional, Tuple

from .config import ProvisionConfig, DEPENDENCY_PACKAGES
from .console import Console
from .exceptions import CmdExitError
from .installer.docker import install_docker, remove_docker
from .installer.kubernetes import install_kubernetes
from .os_packages import AptPackageManager, PackageList, PackageManager
from .services import ServiceManager, SystemctlServiceManager
from .util import running_as_root

VERIFY_COMMANDS: List[str] = [
    "docker version",
    "kubeadm version",
    "kubectl version --client",
    "kubelet --version",
]

def check_root(console: Console) -> None:
  if not running_as_root():
    console.bail("This tool must be run as root. Try again with sudo.")

def confirm(
      cfg: ProvisionConfig,
      console: Console,
      input_func: Optional[Callable[[str], str]]=None,
    ) -> bool:
  """Describes the pending action and asks for a y/n answer.

  Only an answer whose first character is 'y' or 'Y' is a confirmation. End of
  input counts as a refusal.
  """
  if input_func is None:
    input_func = input
  console.info("confirm", f"About to remove any existing Docker, then {cfg.describe_action()}.")
  try:
    answer = input_func("Proceed? [y/N] ")
  except EOFError:
    answer = ''
  return answer[:1] in ('y', 'Y')

def confirm_or_exit(
      cfg: ProvisionConfig,
      console: Console,
      input_func: Optional[Callable[[str], str]]=None,
    ) -> None:
  if not confirm(cfg, console, input_func=input_func):
    raise CmdExitError(0, "Aborted by user")

class ProvisionResult:
  completed_stages: List[str]
  docker_package_version: Optional[str] = None
  removed_previous_docker: bool = False

  def __init__(self):
    self.completed_stages = []

class Provisioner:
  """Runs the provisioning stages in order.

  The first stage that raises stops the run; the exception propagates to the
  caller and no later stage runs. Nothing is retried or rolled back.
  """
  cfg: ProvisionConfig
  console: Console
  package_manager: PackageManager
  service_manager: ServiceManager
  result: ProvisionResult
  _distro_id: Optional[str]
  _codename: Optional[str]

  def __init__(
        self,
        cfg: ProvisionConfig,
        console: Optional[Console]=None,
        package_manager: Optional[PackageManager]=None,
        service_manager: Optional[ServiceManager]=None,
        distro_id: Optional[str]=None,
        codename: Optional[str]=None,
      ):
    if console is None:
      console = Console()
    if package_manager is None:
      package_manager = AptPackageManager(stderr=console.stderr)
    if service_manager is None:
      service_manager = SystemctlServiceManager(stderr=console.stderr)
    self.cfg = cfg
    self.console = console
    self.package_manager = package_manager
    self.service_manager = service_manager
    self._distro_id = distro_id
    self._codename = codename
    self.result = ProvisionResult()

  def stage_update_index(self) -> None:
    self.console.info("apt", "Updating package index")
    self.package_manager.update()

  def stage_install_dependencies(self) -> None:
    self.console.info("apt", f"Installing dependencies: {', '.join(DEPENDENCY_PACKAGES)}")
    PackageList(DEPENDENCY_PACKAGES).install_all(self.package_manager)

  def stage_remove_docker(self) -> None:
    self.result.removed_previous_docker = remove_docker(self.cfg, self.package_manager, console=self.console)

  def stage_install_docker(self) -> None:
    self.result.docker_package_version = install_docker(
        self.cfg,
        self.package_manager,
        self.service_manager,
        console=self.console,
        distro_id=self._distro_id,
        codename=self._codename,
      )

  def stage_install_kubernetes(self) -> None:
    install_kubernetes(self.cfg, self.package_manager, console=self.console)

  def stages(self) -> List[Tuple[str, Callable[[], None]]]:
    return [
        ('update-index', self.stage_update_index),
        ('install-dependencies', self.stage_install_dependencies),
        ('remove-docker', self.stage_remove_docker),
        ('install-docker', self.stage_install_docker),
        ('install-kubernetes', self.stage_install_kubernetes),
      ]

  def run(self) -> ProvisionResult:
    for name, func in self.stages():
      func()
      self.result.completed_stages.append(name)
    self.print_summary()
    return self.result

  def print_summary(self) -> None:
    console = self.console
    console.info("done", f"Docker {self.result.docker_package_version} and Kubernetes packages are installed")
    console.info("done", "Verify the installation with:")
    for cmd in VERIFY_COMMANDS:
      console.info("done", f"    {cmd}")

def provision(
      cfg: ProvisionConfig,
      console: Optional[Console]=None,
      package_manager: Optional[PackageManager]=None,
      service_manager: Optional[ServiceManager]=None,
      input_func: Optional[Callable[[str], str]]=None,
    ) -> ProvisionResult:
  """Checks for root, asks for confirmation, then runs every provisioning stage.

  Raises:
      CmdExitError: exit code 1 if not root; exit code 0 if the user declined
      subprocess.CalledProcessError: An external command failed
      ArmKubeError: The run could not continue for another reason
  """
  if console is None:
    console = Console()
  check_root(console)
  confirm_or_exit(cfg, console, input_func=input_func)
  provisioner = Provisioner(
      cfg,
      console=console,
      package_manager=package_manager,
      service_manager=service_manager,
    )
  return provisioner.run()
