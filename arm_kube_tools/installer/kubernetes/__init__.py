#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""kubelet/kubeadm/kubectl installer"""

from .installer import install_kubernetes
