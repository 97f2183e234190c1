#!/usr/bin/env python3
#
# Copyright (c) 2022 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Host inspection and process/file helpers used by the installers"""

from typing import TYPE_CHECKING, Optional, List, TextIO, cast, Any, Tuple, Generator, Dict

import os
import sys
import shlex
import shutil
import tempfile
import threading
import subprocess
import urllib3

from .exceptions import ArmKubeError, CalledProcessErrorWithStderrMessage

if TYPE_CHECKING:
  from subprocess import _CMD
else:
  _CMD = Any

OS_RELEASE_FILE = "/etc/os-release"

class _RunOnceState:
  has_run: bool = False
  result: Any = None
  lock: threading.Lock

  def __init__(self):
    self.lock = threading.Lock()

def run_once(func):
  """Function decorator that caches the result of the first call to a function.

  The decorator is thread safe--if multiple threads call the function at the same
  time before the first call has returned, they will block waiting for the result.

  Any arguments provided to the function are ignored after the first call.

  Args:
      func (_type_): A function that returns a value to be cached. This
                     function will only be called once.

  Returns:
      _type_: A decorated function that returns the value returned from the
              first call to func.
  """
  state = _RunOnceState()

  def _run_once(*args, **kwargs) -> Any:
    if not state.has_run:
      with state.lock:
        if not state.has_run:
          state.result = func(*args, **kwargs)
          state.has_run = True
    return state.result
  return _run_once

def running_as_root() -> bool:
  return os.geteuid() == 0

def file_contents(filename: str) -> str:
  with open(filename, encoding='utf-8') as f:
    result = f.read()
  return result

def write_file_contents(pathname: str, content: str, mode: int=0o644) -> None:
  """Replaces the content of a file, creating it and its parent directory if necessary.

  The new content is written to a temporary file in the same directory and then
  renamed over the destination, so readers see either the old or the new content.
  Any previous content is discarded.

  Args:
      pathname (str): The file to create or overwrite
      content (str): The complete new text content of the file
      mode (int, optional): Permission bits of the resulting file. Defaults to 0o644.
  """
  pathname = os.path.abspath(os.path.expanduser(pathname))
  dirname = os.path.dirname(pathname)
  os.makedirs(dirname, exist_ok=True)
  fd, tmp_file = tempfile.mkstemp(dir=dirname, prefix=f".{os.path.basename(pathname)}.")
  try:
    with os.fdopen(fd, 'w', encoding='utf-8') as f:
      f.write(content)
    os.chmod(tmp_file, mode)
    os.replace(tmp_file, pathname)
  except BaseException:
    if os.path.exists(tmp_file):
      os.unlink(tmp_file)
    raise

def searchpath_split(searchpath: Optional[str]=None) -> List[str]:
  if searchpath is None:
    searchpath = os.environ.get('PATH', '')
  result = [ x for x in searchpath.split(os.pathsep) if x != '' ]
  return result

def pathname_is_executable(pathname: str) -> bool:
  return os.path.isfile(pathname) and os.access(pathname, os.X_OK)

def find_commands_in_path(
      cmd: str,
      searchpath: Optional[str]=None,
      cwd: Optional[str]=None
    ) -> Generator[str, None, None]:
  if cwd is None:
    cwd = '.'
  cwd = os.path.abspath(os.path.expanduser(cwd))
  cmd = os.path.expanduser(cmd)
  if os.path.sep in cmd or (not os.path.altsep is None and os.path.altsep in cmd):
    fq_cmd = os.path.abspath(os.path.join(cwd, cmd))
    if pathname_is_executable(fq_cmd):
      yield fq_cmd
    return
  for path_dir in searchpath_split(searchpath):
    fq_cmd = os.path.abspath(os.path.join(cwd, os.path.expanduser(path_dir), cmd))
    if pathname_is_executable(fq_cmd):
      yield fq_cmd

def find_command_in_path(cmd: str, searchpath: Optional[str]=None, cwd: Optional[str]=None) -> Optional[str]:
  for fq_cmd in find_commands_in_path(cmd, searchpath=searchpath, cwd=cwd):
    return fq_cmd
  return None

def command_exists(cmd: str, searchpath: Optional[str]=None) -> bool:
  return not find_command_in_path(cmd, searchpath=searchpath) is None

def parse_os_release(text: str, source: str=OS_RELEASE_FILE) -> Dict[str, str]:
  """Parses the KEY=value lines of an os-release(5) file.

  Values may be quoted with single or double quotes; comments and blank
  lines are ignored.

  Raises:
      ArmKubeError: A value has unbalanced quotes
  """
  result: Dict[str, str] = {}
  for line in text.split('\n'):
    line = line.strip()
    if line == '' or line.startswith('#') or not '=' in line:
      continue
    key, value = line.split('=', 1)
    try:
      parts = shlex.split(value) if value != '' else []
    except ValueError as e:
      raise ArmKubeError(f"Malformed line in {source}: <{line}>: {e}") from e
    result[key.strip()] = parts[0] if len(parts) > 0 else ''
  return result

@run_once
def get_linux_distro_id() -> str:
  """Returns the lowercase distribution id (e.g., "raspbian", "debian", "ubuntu")"""
  fields = parse_os_release(file_contents(OS_RELEASE_FILE), source=OS_RELEASE_FILE)
  distro_id = fields.get('ID', '').lower()
  if distro_id == '':
    raise ArmKubeError(f"Unable to determine the distribution ID from {OS_RELEASE_FILE}")
  return distro_id

@run_once
def get_linux_distro_name() -> str:
  """Returns the distribution codename (e.g., "stretch") as reported by lsb_release"""
  result = subprocess.check_output(['lsb_release', '-cs'])
  linux_distro = result.decode('utf-8').rstrip()
  return linux_distro

def download_url_file(
      url: str,
      filename: str,
      pool_manager: Optional[urllib3.PoolManager]=None,
    ) -> None:
  if pool_manager is None:
    pool_manager = urllib3.PoolManager()
  resp = pool_manager.request('GET', url, preload_content=False)
  try:
    if resp.status >= 400:
      raise ArmKubeError(f"HTTP GET of {url} failed with status {resp.status}")
    with open(filename, 'wb') as f:
      shutil.copyfileobj(resp, f)
  finally:
    resp.release_conn()

def announce_command(args: _CMD, stderr: Optional[TextIO]=None, reason: Optional[str]=None) -> None:
  if stderr is None:
    stderr = sys.stderr
  cmd_text = args if isinstance(args, str) else shlex.join(cast(List[str], args))
  if reason is None:
    print(f"Running: {cmd_text}", file=stderr)
  else:
    print(f"{reason}: {cmd_text}", file=stderr)

def check_call(
      args: List[str],
      stderr: Optional[TextIO]=None,
      reason: Optional[str]=None,
    ) -> int:
  """Runs a command, passing its output through, and raises on a nonzero exit code.

  Args:
      args (List[str]): The command and its arguments
      stderr (Optional[TextIO], optional): Stream on which the command is announced. Defaults to sys.stderr.
      reason (Optional[str], optional): A description of why the command is being run.

  Raises:
      subprocess.CalledProcessError: The command exited with a nonzero exit code
  """
  announce_command(args, stderr=stderr, reason=reason)
  return subprocess.check_call(args)

def check_output_stderr_exception(
      args: List[str],
      stderr: Optional[TextIO]=None,
      reason: Optional[str]=None,
      encoding: str='utf-8',
    ) -> str:
  """Runs a command and returns its decoded stdout.

  On failure, the raised exception carries the command's stderr output in its message.

  Raises:
      CalledProcessErrorWithStderrMessage: The command exited with a nonzero exit code
  """
  announce_command(args, stderr=stderr, reason=reason)
  with subprocess.Popen(
        args,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
      ) as proc:
    (stdout_bytes, stderr_bytes) = cast(Tuple[bytes, bytes], proc.communicate())
    exit_code = proc.returncode
  if exit_code != 0:
    stderr_s = stderr_bytes.decode(encoding).rstrip()
    raise CalledProcessErrorWithStderrMessage(exit_code, args, stderr=stderr_s)
  return stdout_bytes.decode(encoding)

def remove_file_if_exists(pathname: str) -> bool:
  if os.path.exists(pathname):
    os.unlink(pathname)
    return True
  return False
