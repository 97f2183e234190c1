#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Service manager capability and its systemctl-based implementation"""

from typing import Optional, TextIO

from .util import check_call

class ServiceManager:
  def restart(self, service_name: str) -> None:
    raise NotImplementedError()

class SystemctlServiceManager(ServiceManager):
  _stderr: Optional[TextIO]

  def __init__(self, stderr: Optional[TextIO]=None):
    self._stderr = stderr

  def restart(self, service_name: str) -> None:
    check_call(['systemctl', 'restart', service_name], stderr=self._stderr, reason=f"Restarting service {service_name}")
