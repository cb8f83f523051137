# rectify/protocol.py
"""Shared types for the formatter pipeline.

A formatter tool is an external executable that rewrites source text. Each
supported tool is described by an object implementing FormatterTool: it knows
its executable name, how it receives input (standard input or a scratch file),
how to build its command line, and which exit statuses count as success.

Process spawning and scratch-file storage sit behind ProcessRunner, so the
pipeline can be driven by an in-memory fake in tests.

Usage:
    class MyTool:
        identifier = "mytool"
        executable_name = "mytool"
        input_mode = InputMode.STDIN

        def build_invocation(self, target_path, text, project_root=None):
            return Invocation(args=["--stdin-filepath", target_path])

        def classify_result(self, executable_path, exit_status):
            return exit_status == 0
"""

import enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, runtime_checkable


class InputMode(enum.Enum):
    """How a tool receives the text it formats."""

    STDIN = "stdin"
    """Text is piped to standard input; formatted text is read from standard output."""

    TEMP_FILE = "temp_file"
    """Text is written to a scratch file that the tool rewrites in place."""


@dataclass(frozen=True)
class Invocation:
    """Command line for one tool run.

    Attributes:
        args: Arguments passed after the executable path.
        cwd: Working directory override, or None to inherit.
        temp_file: Scratch file created for TEMP_FILE tools. The tool rewrites
            it in place and the pipeline reads the result back from it.
    """
    args: List[str]
    cwd: Optional[str] = None
    temp_file: Optional[str] = None


@dataclass
class ExecutionResult:
    """Outcome of a single tool run.

    exit_status is None when the process could not be launched or was killed
    after a timeout; error then carries the reason.
    """
    tool: str
    succeeded: bool
    exit_status: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    produced_temp_file: Optional[str] = None
    error: Optional[str] = None
    args: List[str] = field(default_factory=list)


@runtime_checkable
class FormatterTool(Protocol):
    """Protocol for the built-in formatter tools.

    Implementations are immutable and shared by every formatting request.
    """

    @property
    def identifier(self) -> str:
        """Key used in the per-language formatter configuration."""
        ...

    @property
    def executable_name(self) -> str:
        """Executable to look for; may differ from the identifier."""
        ...

    @property
    def input_mode(self) -> InputMode:
        """Calling convention used for this tool."""
        ...

    def build_invocation(
        self,
        target_path: str,
        text: str,
        project_root: Optional[str] = None,
    ) -> Invocation:
        """Build the command line for formatting text.

        TEMP_FILE tools create exactly one new scratch file holding text and
        return its path in Invocation.temp_file.

        Args:
            target_path: Path of the document being formatted.
            text: Current text to format.
            project_root: Project root, used for project-local tool config.

        Raises:
            TempFileError: If the scratch file cannot be written.
        """
        ...

    def classify_result(self, executable_path: str, exit_status: int) -> bool:
        """Return True if exit_status means the run succeeded."""
        ...


@runtime_checkable
class ProcessRunner(Protocol):
    """Process execution and scratch-file storage used by the pipeline."""

    def invoke(
        self,
        executable_path: str,
        tool: FormatterTool,
        target_path: str,
        text: str,
        project_root: Optional[str] = None,
        on_start: Optional[Callable[[List[str]], None]] = None,
    ) -> ExecutionResult:
        """Run tool against text and report the outcome.

        Launch failures are reported as unsuccessful results, not raised.
        on_start, when given, receives the full argv just before the process
        is spawned.

        Raises:
            TempFileError: If a TEMP_FILE tool's input cannot be written.
        """
        ...

    def read_output(self, path: str) -> str:
        """Read a scratch file back.

        Raises:
            OSError: If the file cannot be read.
            UnicodeDecodeError: If its content is not valid UTF-8.
        """
        ...

    def discard(self, path: str) -> None:
        """Delete a scratch file. Raises OSError on failure."""
        ...
