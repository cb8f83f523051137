# rectify/config.py
"""Configuration loading for rectify.

Per-language formatter pipelines are read from a JSON or YAML file:

    {
      "formatters": {
        "php": {"formatters": ["pint", "php_cs_fixer"], "stop_after_first": true},
        "javascript": {"formatters": ["prettierd", "prettier"]}
      },
      "timeout": 30
    }

Search order (first existing file wins):
1. Explicit path (argument, or the RECTIFY_CONFIG environment variable)
2. .rectify.json / .rectify.yaml / .rectify.yml in the project root
3. The same names in the user's home directory

No configuration file is an empty configuration, not an error.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError, ConfigValidationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "RECTIFY_CONFIG"
CONFIG_FILENAMES = (".rectify.json", ".rectify.yaml", ".rectify.yml")

# Files and directories marking a project root, checked walking upwards.
PROJECT_MARKERS = CONFIG_FILENAMES + ("composer.json", "package.json", ".git")

# File extension -> language identifier
EXTENSION_LANGUAGES: Dict[str, str] = {
    ".php": "php",
    ".js": "javascript",
    ".cjs": "javascript",
    ".mjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".json": "json",
    ".css": "css",
    ".scss": "scss",
    ".less": "less",
    ".html": "html",
    ".htm": "html",
    ".vue": "vue",
    ".md": "markdown",
    ".markdown": "markdown",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".graphql": "graphql",
}


@dataclass(frozen=True)
class LanguagePipelineConfig:
    """Formatter pipeline for one language.

    Attributes:
        formatters: Tool identifiers in attempt order. When stop_after_first
            is False this is also the order in which outputs chain.
        stop_after_first: Stop after the first tool that succeeds.
    """
    formatters: List[str] = field(default_factory=list)
    stop_after_first: bool = True

    @property
    def is_configured(self) -> bool:
        return bool(self.formatters)

    @classmethod
    def from_dict(cls, data: Any, language: str = "") -> "LanguagePipelineConfig":
        """Build and validate a pipeline from its configuration entry.

        A bare list is accepted as shorthand for {"formatters": [...]}.

        Raises:
            ConfigValidationError: If the entry is malformed.
        """
        where = f"formatters.{language}" if language else "formatters"
        if isinstance(data, list):
            data = {"formatters": data}
        if not isinstance(data, dict):
            raise ConfigValidationError([f"{where} must be an object or a list"])

        errors = []
        formatters = data.get("formatters", [])
        if not isinstance(formatters, list) or not all(isinstance(f, str) for f in formatters):
            errors.append(f"{where}.formatters must be a list of strings")

        stop_after_first = data.get("stop_after_first", True)
        if not isinstance(stop_after_first, bool):
            errors.append(f"{where}.stop_after_first must be a boolean")

        if errors:
            raise ConfigValidationError(errors)

        return cls(formatters=list(formatters), stop_after_first=stop_after_first)


@dataclass
class RectifyConfig:
    """Loaded rectify configuration.

    Attributes:
        languages: Language identifier -> pipeline.
        timeout: Seconds to wait for each tool, or None to wait indefinitely.
        source: Path the configuration was loaded from, if any.
    """
    languages: Dict[str, LanguagePipelineConfig] = field(default_factory=dict)
    timeout: Optional[float] = None
    source: Optional[str] = None

    def for_language(self, language_id: str) -> LanguagePipelineConfig:
        """Return the pipeline for a language; empty when not configured."""
        return self.languages.get(language_id) or LanguagePipelineConfig()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "RectifyConfig":
        """Build and validate a configuration from parsed file content.

        Raises:
            ConfigValidationError: If the structure is invalid.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError(["configuration must be an object"])

        errors: List[str] = []
        languages: Dict[str, LanguagePipelineConfig] = {}

        entries = data.get("formatters", {})
        if not isinstance(entries, dict):
            errors.append("formatters must map language identifiers to pipelines")
            entries = {}

        for language, entry in entries.items():
            try:
                languages[language] = LanguagePipelineConfig.from_dict(entry, language)
            except ConfigValidationError as e:
                errors.extend(e.errors)

        timeout = data.get("timeout")
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                errors.append("timeout must be a positive number of seconds")
                timeout = None

        if errors:
            raise ConfigValidationError(errors)

        return cls(languages=languages, timeout=timeout, source=source)


def _parse_file(path: Path) -> Dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    # An empty YAML document parses to None
    return data if data is not None else {}


def config_search_paths(
    project_root: Optional[str] = None,
    explicit_path: Optional[str] = None,
) -> List[Path]:
    """List candidate configuration files in priority order."""
    paths: List[Path] = []
    explicit = explicit_path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        paths.append(Path(explicit).expanduser())
    if project_root:
        paths.extend(Path(project_root) / name for name in CONFIG_FILENAMES)
    home = Path.home()
    paths.extend(home / name for name in CONFIG_FILENAMES)
    return paths


def load_config(
    project_root: Optional[str] = None,
    explicit_path: Optional[str] = None,
) -> RectifyConfig:
    """Load the first configuration file found.

    Args:
        project_root: Project root to look in.
        explicit_path: Path that takes priority over the search. Unlike the
            searched locations, it must exist.

    Raises:
        ConfigError: If the explicit file is missing, or the chosen file
            cannot be parsed.
        ConfigValidationError: If the chosen file is structurally invalid.
    """
    explicit = explicit_path or os.environ.get(CONFIG_ENV_VAR)
    if explicit and not Path(explicit).expanduser().is_file():
        raise ConfigError(f"Configuration file not found: {explicit}")

    for path in config_search_paths(project_root, explicit_path):
        if path.is_file():
            logger.debug("Loading configuration from %s", path)
            return RectifyConfig.from_dict(_parse_file(path), source=str(path))

    logger.debug("No configuration file found")
    return RectifyConfig()


def find_project_root(document_path: str, default: Optional[str] = None) -> Optional[str]:
    """Find the project root for a document.

    Walks up from the document's directory to the first directory holding one
    of PROJECT_MARKERS.

    Args:
        document_path: Path of the document.
        default: Returned when no marker is found.
    """
    start = Path(document_path).resolve().parent
    for directory in [start] + list(start.parents):
        if any((directory / marker).exists() for marker in PROJECT_MARKERS):
            return str(directory)
    return default


def language_for_path(path: str) -> Optional[str]:
    """Guess a language identifier from a file extension."""
    return EXTENSION_LANGUAGES.get(os.path.splitext(path)[1].lower())
