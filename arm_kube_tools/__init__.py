# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Package arm_kube_tools provisions a Debian-family ARM host for Kubernetes:
it replaces any existing Docker with a pinned docker-ce version, configures
its storage driver, and installs kubelet, kubeadm and kubectl.
"""

from .version import __version__

from .internal_types import Jsonable, JsonableDict
from .exceptions import ArmKubeError, ArgparseExitError, CmdExitError, CalledProcessErrorWithStderrMessage
from .util import (
    run_once,
    running_as_root,
    command_exists,
    find_command_in_path,
    file_contents,
    write_file_contents,
    get_linux_distro_id,
    get_linux_distro_name,
    download_url_file,
    check_call,
    check_output_stderr_exception,
  )
from .console import Console
from .config import (
    ProvisionConfig,
    DEFAULT_DOCKER_VERSION,
    KNOWN_DOCKER_VERSIONS,
  )
from .os_packages import (
    PackageIndexEntry,
    PackageList,
    PackageManager,
    AptPackageManager,
    parse_package_index,
    select_package_version,
    write_apt_sources_list,
  )
from .services import ServiceManager, SystemctlServiceManager
from .provision import Provisioner, ProvisionResult, provision, check_root, confirm
