# rectify/invoker.py
"""Runs formatter executables with either calling convention.

STDIN tools get the text on standard input and return the formatted text on
standard output. TEMP_FILE tools get a scratch file path and rewrite that file
in place; their output streams are diagnostics only.

Text crosses the process boundary as UTF-8 bytes so that line endings reach
the tool and come back untouched.
"""

import logging
import os
import subprocess
from typing import Callable, List, Optional

from .protocol import ExecutionResult, FormatterTool, InputMode
from .trace import trace as _trace_write

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


def _trace(msg: str) -> None:
    _trace_write("Invoker", msg)


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode(ENCODING, errors="replace")


class SubprocessRunner:
    """ProcessRunner backed by subprocess and the local filesystem.

    Args:
        timeout: Seconds to wait for a tool before killing it. None waits
            indefinitely.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def invoke(
        self,
        executable_path: str,
        tool: FormatterTool,
        target_path: str,
        text: str,
        project_root: Optional[str] = None,
        on_start: Optional[Callable[[List[str]], None]] = None,
    ) -> ExecutionResult:
        """Run tool on text.

        On any failure the caller keeps its current text; a STDIN result's
        stdout is only meaningful when succeeded is True.

        Raises:
            TempFileError: If a TEMP_FILE tool's scratch file cannot be written.
        """
        invocation = tool.build_invocation(target_path, text, project_root)
        argv = [executable_path] + list(invocation.args)
        stdin_mode = tool.input_mode is InputMode.STDIN

        result = ExecutionResult(
            tool=tool.identifier,
            succeeded=False,
            produced_temp_file=invocation.temp_file,
            args=list(invocation.args),
        )
        _trace(f"invoke: {argv} cwd={invocation.cwd} stdin={stdin_mode}")
        if on_start is not None:
            on_start(argv)

        try:
            proc = subprocess.run(
                argv,
                input=text.encode(ENCODING) if stdin_mode else None,
                stdin=None if stdin_mode else subprocess.DEVNULL,
                capture_output=True,
                cwd=invocation.cwd,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            result.error = f"timed out after {e.timeout} seconds"
            result.stdout = _decode(e.stdout)
            result.stderr = _decode(e.stderr)
            logger.debug("%s %s", tool.identifier, result.error)
            return result
        except (OSError, ValueError) as e:
            result.error = str(e)
            logger.debug("%s could not be launched: %s", tool.identifier, e)
            return result

        result.exit_status = proc.returncode
        result.stderr = _decode(proc.stderr)
        if stdin_mode:
            try:
                result.stdout = proc.stdout.decode(ENCODING)
            except UnicodeDecodeError as e:
                result.stdout = _decode(proc.stdout)
                result.error = f"output is not valid {ENCODING}: {e}"
                _trace(f"invoke: {tool.identifier} undecodable output")
                return result
        else:
            result.stdout = _decode(proc.stdout)

        result.succeeded = tool.classify_result(executable_path, proc.returncode)
        _trace(f"invoke: {tool.identifier} exit={proc.returncode} succeeded={result.succeeded}")
        return result

    def read_output(self, path: str) -> str:
        with open(path, "r", encoding=ENCODING, newline="") as f:
            return f.read()

    def discard(self, path: str) -> None:
        os.remove(path)


def format_command(executable_path: str, args: List[str]) -> str:
    """Render a command line for display."""
    return " ".join([executable_path] + [f'"{a}"' if " " in a else a for a in args])
