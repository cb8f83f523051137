# rectify/tools.py
"""Built-in formatter tools.

Each class describes one external formatter: its executable, its calling
convention and its command line. Instances hold no state and are shared by
all formatting requests.

STDIN tools:
    prettier   - prettier --stdin-filepath <document path>
    prettierd  - prettierd (no arguments)

TEMP_FILE tools (the text is written to a fresh scratch file first):
    pint          - pint --quiet [--config <root>/pint.json] <scratch name>
                    (run from the scratch file's directory)
    php_cs_fixer  - php-cs-fixer fix <scratch path> --quiet
    phpcbf        - phpcbf --standard=PSR12 <scratch path> -q
"""

import logging
import os
import tempfile
import time
import uuid
from typing import Optional, Tuple

from .errors import TempFileError
from .policy import is_success
from .protocol import InputMode, Invocation

logger = logging.getLogger(__name__)

# Scratch files take the document's extension, or this one if it has none.
DEFAULT_EXTENSION = ".php"

PINT_CONFIG_FILENAME = "pint.json"


def create_temp_file(content: str, extension: str, prefix: str) -> str:
    """Create a uniquely named scratch file holding content.

    The name combines prefix, the current time in milliseconds and a random
    suffix, so concurrent requests never share a file. The file is created
    exclusively and written without newline translation.

    Args:
        content: Text to write.
        extension: File extension including the dot (e.g., '.php').
        prefix: Tool-specific name prefix.

    Returns:
        Absolute path of the new file.

    Raises:
        TempFileError: If the file cannot be created or written.
    """
    name = f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}{extension}"
    path = os.path.join(tempfile.gettempdir(), name)
    try:
        with open(path, "x", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        if os.path.exists(path):
            try:
                os.remove(path)
            except OSError:
                logger.warning("Could not remove partial scratch file %s", path)
        raise TempFileError(f"Failed to write scratch file {path}: {e}") from e
    return path


class BaseTool:
    """Common behavior for the built-in tools."""

    identifier: str = ""
    executable_name: str = ""
    input_mode: InputMode = InputMode.STDIN

    def build_invocation(
        self,
        target_path: str,
        text: str,
        project_root: Optional[str] = None,
    ) -> Invocation:
        raise NotImplementedError

    def classify_result(self, executable_path: str, exit_status: int) -> bool:
        return is_success(executable_path, exit_status)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.identifier} ({self.input_mode.value})>"


class TempFileTool(BaseTool):
    """Base for tools that rewrite a scratch file in place."""

    input_mode = InputMode.TEMP_FILE

    @property
    def temp_prefix(self) -> str:
        return self.executable_name

    def write_scratch(self, target_path: str, text: str) -> str:
        extension = os.path.splitext(target_path)[1] or DEFAULT_EXTENSION
        return create_temp_file(text, extension, self.temp_prefix)


class PrettierTool(BaseTool):
    identifier = "prettier"
    executable_name = "prettier"
    input_mode = InputMode.STDIN

    def build_invocation(self, target_path, text, project_root=None):
        # The path only tells prettier which parser to use.
        return Invocation(args=["--stdin-filepath", target_path])


class PrettierdTool(BaseTool):
    identifier = "prettierd"
    executable_name = "prettierd"
    input_mode = InputMode.STDIN

    def build_invocation(self, target_path, text, project_root=None):
        return Invocation(args=[])


class PintTool(TempFileTool):
    """Laravel Pint.

    Pint is run from the scratch file's directory with the bare file name,
    and picks up the project's pint.json when one exists at the root.
    """

    identifier = "pint"
    executable_name = "pint"

    def config_path(self, project_root: Optional[str]) -> Optional[str]:
        if not project_root:
            return None
        candidate = os.path.join(project_root, PINT_CONFIG_FILENAME)
        return candidate if os.path.isfile(candidate) else None

    def build_invocation(self, target_path, text, project_root=None):
        temp_file = self.write_scratch(target_path, text)
        temp_dir, temp_name = os.path.split(temp_file)

        args = ["--quiet"]
        config = self.config_path(project_root)
        if config:
            args.extend(["--config", config])
        args.append(temp_name)
        return Invocation(args=args, cwd=temp_dir, temp_file=temp_file)


class PhpCsFixerTool(TempFileTool):
    identifier = "php_cs_fixer"
    executable_name = "php-cs-fixer"

    def build_invocation(self, target_path, text, project_root=None):
        temp_file = self.write_scratch(target_path, text)
        return Invocation(args=["fix", temp_file, "--quiet"], temp_file=temp_file)


class PhpcbfTool(TempFileTool):
    identifier = "phpcbf"
    executable_name = "phpcbf"

    def build_invocation(self, target_path, text, project_root=None):
        temp_file = self.write_scratch(target_path, text)
        return Invocation(args=["--standard=PSR12", temp_file, "-q"], temp_file=temp_file)


BUILTIN_TOOLS: Tuple[BaseTool, ...] = (
    PintTool(),
    PrettierTool(),
    PrettierdTool(),
    PhpCsFixerTool(),
    PhpcbfTool(),
)
