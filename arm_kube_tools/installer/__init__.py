#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Installers for the container runtime and Kubernetes packages"""

from .docker import install_docker, remove_docker, docker_is_installed
from .kubernetes import install_kubernetes
