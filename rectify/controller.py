# rectify/controller.py
"""Top-level controller tying configuration, reporting and the pipeline.

The controller owns the process-wide debug flag. Each request takes a
snapshot of it, reads its configuration fresh and runs the pipeline.

Usage:
    controller = FormatController(project_root="/path/to/project")
    controller.toggle_debug()
    outcome = controller.format_file("src/app.php")
    if outcome.status is FormatStatus.NO_SUCCESS:
        ...
"""

import enum
import logging
import os
from typing import Callable, NamedTuple, Optional

from .config import RectifyConfig, find_project_root, language_for_path, load_config
from .errors import DocumentEncodingError
from .invoker import SubprocessRunner
from .pipeline import FormatterPipeline
from .registry import ToolRegistry, create_registry
from .reporting import WARNING, ConsoleReporter, Reporter

logger = logging.getLogger(__name__)


class FormatStatus(enum.Enum):
    FORMATTED = "formatted"
    UNCHANGED = "unchanged"
    NOT_CONFIGURED = "not_configured"
    NO_SUCCESS = "no_success"


class FormatOutcome(NamedTuple):
    """Result of a formatting request.

    text holds the formatted text for FORMATTED and UNCHANGED, else None.
    """
    status: FormatStatus
    text: Optional[str] = None
    formatter: Optional[str] = None
    language: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.status is FormatStatus.FORMATTED


class FormatController:
    """Serves formatting requests for documents.

    Args:
        project_root: Fixed project root. When None, each document's root is
            found by walking up from the document.
        config_path: Explicit configuration file.
        registry: Tool registry shared by all requests.
        timeout: Per-tool timeout overriding the configured one.
        reporter_factory: Builds the reporter for a request from the current
            debug flag.
        debug: Initial debug mode.
    """

    def __init__(
        self,
        project_root: Optional[str] = None,
        config_path: Optional[str] = None,
        registry: Optional[ToolRegistry] = None,
        timeout: Optional[float] = None,
        reporter_factory: Callable[[bool], Reporter] = ConsoleReporter,
        debug: bool = False,
    ):
        self.project_root = os.path.abspath(project_root) if project_root else None
        self.config_path = config_path
        self.registry = registry or create_registry()
        self.timeout = timeout
        self.reporter_factory = reporter_factory
        self.debug_mode = debug

    def toggle_debug(self) -> bool:
        """Flip debug mode and announce the new state."""
        self.debug_mode = not self.debug_mode
        self.reporter_factory(self.debug_mode).notice(
            f"Rectify debug mode is now {'ON' if self.debug_mode else 'OFF'}"
        )
        return self.debug_mode

    def root_for(self, document_path: str) -> Optional[str]:
        if self.project_root:
            return self.project_root
        return find_project_root(document_path, default=os.getcwd())

    def load_config(self, project_root: Optional[str]) -> RectifyConfig:
        return load_config(project_root, self.config_path)

    def create_pipeline(self, config: RectifyConfig) -> FormatterPipeline:
        timeout = self.timeout if self.timeout is not None else config.timeout
        return FormatterPipeline(registry=self.registry, runner=SubprocessRunner(timeout))

    def format_text(
        self,
        document_path: str,
        text: str,
        language_id: Optional[str] = None,
    ) -> FormatOutcome:
        """Format a document's text without touching the document.

        Args:
            document_path: Path of the document.
            text: Current text.
            language_id: Language identifier; guessed from the extension
                when None.

        Raises:
            ConfigError: If the configuration cannot be loaded.
            TempFileError, ResultUnreadableError: If a result could not be
                produced or read back.
        """
        reporter = self.reporter_factory(self.debug_mode)
        language = language_id or language_for_path(document_path)
        root = self.root_for(document_path)
        config = self.load_config(root)

        pipeline_config = config.for_language(language) if language else None
        if pipeline_config is None or not pipeline_config.is_configured:
            logger.debug("No formatter configured for language: %s", language)
            return FormatOutcome(FormatStatus.NOT_CONFIGURED, language=language)

        result = self.create_pipeline(config).run(
            document_path,
            text,
            pipeline_config,
            project_root=root,
            reporter=reporter,
        )
        if not result.succeeded or (result.text == "" and text):
            reporter.warning("No formatters succeeded")
            return FormatOutcome(FormatStatus.NO_SUCCESS, language=language)

        status = FormatStatus.UNCHANGED if result.text == text else FormatStatus.FORMATTED
        return FormatOutcome(status, result.text, result.formatter, language)

    def format_file(
        self,
        document_path: str,
        language_id: Optional[str] = None,
        write: bool = True,
    ) -> FormatOutcome:
        """Format a file, saving it only when the text changed.

        Raises:
            OSError: If the file cannot be read or written.
            DocumentEncodingError: If the file is not valid UTF-8.
        """
        text = read_document(document_path)
        outcome = self.format_text(document_path, text, language_id)
        if outcome.changed and write:
            with open(document_path, "w", encoding="utf-8", newline="") as f:
                f.write(outcome.text)
            logger.debug("Wrote %s (formatted by %s)", document_path, outcome.formatter)
        return outcome


def notify_outcome(reporter: Reporter, document_path: str, outcome: FormatOutcome) -> None:
    """Surface an outcome that needs the user's attention."""
    if outcome.status is FormatStatus.NOT_CONFIGURED:
        reporter.notice(f"No formatter configured for language: {outcome.language}")
    elif outcome.status is FormatStatus.NO_SUCCESS:
        reporter.notice(f"No formatter succeeded for {document_path}", level=WARNING)


def read_document(document_path: str) -> str:
    """Read a document as UTF-8, keeping its line endings.

    Raises:
        OSError: If the file cannot be read.
        DocumentEncodingError: If the file is not valid UTF-8.
    """
    try:
        with open(document_path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise DocumentEncodingError(f"{document_path} is not valid UTF-8: {e}") from e
