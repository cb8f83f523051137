# rectify/pipeline.py
"""Pipeline driver chaining formatter tools over one document.

For each configured identifier, in order, the driver looks the tool up in the
registry, resolves its executable and runs it. A successful run's output
becomes the input of the next tool; failures leave the text untouched and
never stop the pipeline. With stop_after_first set, the first success ends
the run.

Usage:
    from rectify.pipeline import FormatterPipeline
    from rectify.config import LanguagePipelineConfig

    pipeline = FormatterPipeline()
    result = pipeline.run("src/app.php", text,
                          LanguagePipelineConfig(formatters=["pint", "phpcbf"]))
    if result.succeeded:
        write(result.text)
"""

import logging
import os
from typing import Callable, List, Mapping, NamedTuple, Optional, Tuple

from .config import LanguagePipelineConfig
from .errors import ResultUnreadableError
from .invoker import SubprocessRunner, format_command
from .protocol import ExecutionResult, FormatterTool, InputMode, ProcessRunner
from .registry import ToolRegistry, create_registry
from .reporting import Reporter
from .resolver import resolve_executable, search_path_dirs
from .trace import trace as _trace_write

logger = logging.getLogger(__name__)

RESULT_PREVIEW_CHARS = 500

Resolver = Callable[[str, List[str], Optional[str]], Optional[str]]


def _trace(msg: str) -> None:
    _trace_write("Pipeline", msg)


class PipelineResult(NamedTuple):
    """Outcome of a pipeline run.

    text is None when no configured tool succeeded.
    """
    text: Optional[str] = None
    formatter: Optional[str] = None
    attempts: Tuple[ExecutionResult, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.text is not None


class _RunState:
    """Bookkeeping for one run."""

    def __init__(self, text: str):
        self.current_text = text
        self.last_success: Optional[FormatterTool] = None
        self.last_temp_file: Optional[str] = None
        # Set when a TEMP_FILE tool succeeded and its file has not been read yet.
        self.pending_temp_file: Optional[str] = None
        self.temp_files: List[str] = []
        self.attempts: List[ExecutionResult] = []


class FormatterPipeline:
    """Runs the configured formatter chain for a document.

    The pipeline holds no per-request state and can serve concurrent
    requests.

    Args:
        registry: Tool registry; defaults to the built-in tools.
        runner: Process runner; defaults to a SubprocessRunner.
        resolver: Executable resolver, called as
            resolver(executable_name, search_dirs, project_root).
    """

    def __init__(
        self,
        registry: Optional[ToolRegistry] = None,
        runner: Optional[ProcessRunner] = None,
        resolver: Resolver = resolve_executable,
    ):
        self.registry = registry or create_registry()
        self.runner = runner or SubprocessRunner()
        self.resolver = resolver

    def run(
        self,
        document_path: str,
        text: str,
        config: LanguagePipelineConfig,
        project_root: Optional[str] = None,
        reporter: Optional[Reporter] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> PipelineResult:
        """Format text through the configured tools.

        Args:
            document_path: Path of the document; used for tool hints, scratch
                file extensions and as a last-resort result source.
            text: Current document text.
            config: Pipeline for the document's language. Must name at least
                one formatter.
            project_root: Project root for project-local executables and
                tool config files.
            reporter: Debug reporter for this request.
            env: Environment holding PATH; defaults to os.environ.

        Returns:
            PipelineResult; its text is None when no tool succeeded.

        Raises:
            TempFileError: If a tool's scratch file could not be written.
            ResultUnreadableError: If a tool succeeded but its result could
                not be read back or is not valid UTF-8.
        """
        reporter = reporter or Reporter()
        search_dirs = search_path_dirs(env)
        state = _RunState(text)
        _trace(f"run: {document_path} formatters={config.formatters} "
               f"stop_after_first={config.stop_after_first}")

        try:
            for identifier in config.formatters:
                if self._attempt(identifier, document_path, project_root,
                                 search_dirs, state, reporter):
                    if config.stop_after_first:
                        break

            if state.last_success is None:
                _trace("run: no formatter succeeded")
                return PipelineResult(attempts=tuple(state.attempts))

            final_text = self._final_text(state, document_path, reporter)
        finally:
            self._cleanup(state)

        if reporter.debug:
            reporter.info(
                f"Rectify formatted result (first {RESULT_PREVIEW_CHARS} chars): "
                f"{final_text[:RESULT_PREVIEW_CHARS]}"
            )
        return PipelineResult(
            text=final_text,
            formatter=state.last_success.identifier,
            attempts=tuple(state.attempts),
        )

    def _attempt(
        self,
        identifier: str,
        document_path: str,
        project_root: Optional[str],
        search_dirs: List[str],
        state: _RunState,
        reporter: Reporter,
    ) -> bool:
        """Run one configured tool. Returns True if it succeeded."""
        tool = self.registry.lookup(identifier)
        if tool is None:
            reporter.warning(f"Unknown formatter: {identifier}")
            return False

        executable = self.resolver(tool.executable_name, search_dirs, project_root)
        if not executable:
            reporter.warning(f"Formatter not found: {identifier}")
            return False

        if state.pending_temp_file:
            # The previous success left its output on disk; the next tool
            # must see it.
            state.current_text = self._read_result(state.pending_temp_file, reporter)
            state.pending_temp_file = None

        def announce(argv: List[str]) -> None:
            reporter.info(f"Command: {format_command(argv[0], argv[1:])}")

        reporter.info(f"Rectify running: {identifier} ({executable})")
        result = self.runner.invoke(
            executable, tool, document_path, state.current_text, project_root,
            on_start=announce,
        )
        state.attempts.append(result)
        if result.produced_temp_file:
            state.temp_files.append(result.produced_temp_file)

        if (result.succeeded and tool.input_mode is InputMode.STDIN
                and not result.stdout and state.current_text):
            result.succeeded = False
            result.error = "produced no output"

        if tool.input_mode is InputMode.TEMP_FILE:
            reporter.info(
                f"{os.path.basename(executable)} exit status: {result.exit_status}, "
                f"stdout: {result.stdout or 'none'}, stderr: {result.stderr or 'none'}"
            )

        if not result.succeeded:
            self._report_failure(identifier, result, reporter)
            return False

        state.last_success = tool
        if tool.input_mode is InputMode.STDIN:
            state.current_text = result.stdout
        else:
            state.last_temp_file = result.produced_temp_file
            state.pending_temp_file = result.produced_temp_file
        reporter.info(f"{identifier} completed successfully")
        _trace(f"attempt: {identifier} succeeded")
        return True

    def _report_failure(
        self,
        identifier: str,
        result: ExecutionResult,
        reporter: Reporter,
    ) -> None:
        if result.exit_status is None:
            reporter.error(f"{identifier} failed: {result.error or 'could not be run'}")
        else:
            detail = result.error or result.stderr or result.stdout or "Unknown error"
            reporter.error(f"{identifier} failed with status {result.exit_status}: {detail}")
        _trace(f"attempt: {identifier} failed status={result.exit_status} error={result.error}")

    def _final_text(
        self,
        state: _RunState,
        document_path: str,
        reporter: Reporter,
    ) -> str:
        tool = state.last_success
        if tool.input_mode is InputMode.STDIN:
            return state.current_text

        if state.last_temp_file:
            return self._read_result(state.last_temp_file, reporter)

        logger.warning(
            "%s succeeded without a scratch file; reading %s instead",
            tool.identifier, document_path,
        )
        try:
            return self.runner.read_output(document_path)
        except (OSError, UnicodeDecodeError) as e:
            raise ResultUnreadableError(
                f"Failed to read original file {document_path}: {e}"
            ) from e

    def _read_result(self, path: str, reporter: Reporter) -> str:
        reporter.info(f"Reading formatted content from temp file: {path}")
        try:
            content = self.runner.read_output(path)
        except (OSError, UnicodeDecodeError) as e:
            raise ResultUnreadableError(
                f"Failed to read formatted temp file {path}: {e}"
            ) from e
        reporter.info(f"Read {len(content)} characters from temp file")
        return content

    def _cleanup(self, state: _RunState) -> None:
        for path in state.temp_files:
            try:
                self.runner.discard(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Could not delete temp file %s: %s", path, e)
        _trace(f"cleanup: removed {len(state.temp_files)} temp file(s)")
