# rectify/__init__.py
"""Formatter pipeline engine running external formatting tools over text.

A document's text is passed through an ordered list of formatter tools
(prettier, prettierd, pint, php-cs-fixer, phpcbf). Each tool is located on the
search path or in the project's vendor/bin or node_modules/.bin, run with its
own calling convention, and judged by its own exit-status rules. Output of one
tool feeds the next until one succeeds (or, with stop_after_first disabled,
until the list is exhausted).

Example:
    from rectify import FormatterPipeline, LanguagePipelineConfig

    pipeline = FormatterPipeline()
    result = pipeline.run(
        "src/app.js",
        "let x=1",
        LanguagePipelineConfig(formatters=["prettierd", "prettier"]),
    )
    if result.succeeded:
        print(result.text)

Example (with configuration files and debug reporting):
    from rectify import FormatController

    controller = FormatController()
    controller.toggle_debug()
    outcome = controller.format_file("src/app.php")
"""

from .config import LanguagePipelineConfig, RectifyConfig, load_config
from .controller import FormatController, FormatOutcome, FormatStatus
from .errors import (
    ConfigError,
    ConfigValidationError,
    DocumentEncodingError,
    RectifyError,
    ResultUnreadableError,
    TempFileError,
)
from .invoker import SubprocessRunner
from .pipeline import FormatterPipeline, PipelineResult
from .policy import is_success
from .protocol import ExecutionResult, FormatterTool, InputMode, Invocation, ProcessRunner
from .registry import ToolRegistry, create_registry
from .reporting import ConsoleReporter, Reporter
from .resolver import resolve_executable, search_path_dirs

__version__ = "0.3.0"

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConsoleReporter",
    "DocumentEncodingError",
    "ExecutionResult",
    "FormatController",
    "FormatOutcome",
    "FormatStatus",
    "FormatterPipeline",
    "FormatterTool",
    "InputMode",
    "Invocation",
    "LanguagePipelineConfig",
    "PipelineResult",
    "ProcessRunner",
    "RectifyConfig",
    "RectifyError",
    "Reporter",
    "ResultUnreadableError",
    "SubprocessRunner",
    "TempFileError",
    "ToolRegistry",
    "create_registry",
    "is_success",
    "load_config",
    "resolve_executable",
    "search_path_dirs",
]
