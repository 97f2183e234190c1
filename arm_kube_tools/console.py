#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Colored progress and error messages for the command-line tools"""

from typing import Optional, TextIO, NoReturn

import sys
from colorama import Fore, Style # type: ignore[import]

from .exceptions import CmdExitError

def is_colorizable(stream: TextIO) -> bool:
  is_a_tty = hasattr(stream, 'isatty') and stream.isatty()
  return is_a_tty

class Console:
  """Prints "[tag] message" lines, with the tag colored when the output is a terminal.

  Both info and error lines go to stdout; only announcements of external
  commands go to stderr.
  """
  _stdout: Optional[TextIO]
  _stderr: Optional[TextIO]
  _colorize: Optional[bool]

  def __init__(
        self,
        stdout: Optional[TextIO]=None,
        stderr: Optional[TextIO]=None,
        colorize: Optional[bool]=None,
      ):
    self._stdout = stdout
    self._stderr = stderr
    self._colorize = colorize

  @property
  def stdout(self) -> TextIO:
    return sys.stdout if self._stdout is None else self._stdout

  @property
  def stderr(self) -> TextIO:
    return sys.stderr if self._stderr is None else self._stderr

  def color(self, codes: str) -> str:
    colorize = self._colorize
    if colorize is None:
      colorize = is_colorizable(self.stdout)
    return codes if colorize else ""

  def _emit(self, color: str, tag: str, message: str) -> None:
    print(f"{self.color(color)}[{tag}]{self.color(Style.RESET_ALL)} {message}", file=self.stdout)
    self.stdout.flush()

  def info(self, tag: str, message: str) -> None:
    self._emit(Fore.GREEN, tag, message)

  def warning(self, tag: str, message: str) -> None:
    self._emit(Fore.YELLOW, tag, message)

  def error(self, message: str) -> None:
    self._emit(Fore.RED, "error", message)

  def bail(self, message: str) -> NoReturn:
    """Prints an error line and terminates the command with exit code 1."""
    self.error(message)
    raise CmdExitError(1, message)
