#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

from typing import Optional

from subprocess import CalledProcessError

class ArmKubeError(Exception):
  """Base class for all error exceptions defined by this package."""
  #pass

class CmdExitError(RuntimeError):
  """Raised to terminate the command-line tool with a specific exit code."""
  exit_code: int

  def __init__(self, exit_code: int, msg: Optional[str]=None):
    if msg is None:
      msg = f"Command exited with return code {exit_code}"
    super().__init__(msg)
    self.exit_code = exit_code

class ArgparseExitError(CmdExitError):
  pass

class CalledProcessErrorWithStderrMessage(CalledProcessError):
  def __str__(self):
    return super().__str__() + f": [{self.stderr}]"
