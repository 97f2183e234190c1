#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Pinned docker-ce remover/installer"""

from .installer import (
    install_docker,
    remove_docker,
    docker_is_installed,
    docker_daemon_config,
    write_docker_daemon_config,
  )
