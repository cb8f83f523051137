# rectify/resolver.py
"""Executable discovery for formatter tools.

Search order, first match wins:
1. Each directory on the search path, in order
2. <project root>/vendor/bin        (Composer-installed tools)
3. <project root>/node_modules/.bin (npm-installed tools)

Only existence is checked. A match that turns out not to be executable fails
when it is launched, which the pipeline records as a failed attempt.
"""

import os
from typing import List, Mapping, Optional

# Project-local binary directories, relative to the project root.
PROJECT_BIN_DIRS = (
    os.path.join("vendor", "bin"),
    os.path.join("node_modules", ".bin"),
)


def search_path_dirs(env: Optional[Mapping[str, str]] = None) -> List[str]:
    """Split the PATH variable into directories.

    Args:
        env: Environment mapping; defaults to os.environ.

    Returns:
        Non-empty PATH entries in order.
    """
    if env is None:
        env = os.environ
    value = env.get("PATH", "")
    return [d for d in value.split(os.pathsep) if d]


def resolve_executable(
    executable_name: str,
    search_dirs: List[str],
    project_root: Optional[str] = None,
) -> Optional[str]:
    """Locate an executable by name.

    Args:
        executable_name: Bare executable name (e.g., 'php-cs-fixer').
        search_dirs: Search path directories, checked first and in order.
        project_root: Project root; when None the project-local
            directories are skipped.

    Returns:
        Absolute path of the first existing file, or None if not found.
    """
    for directory in search_dirs:
        candidate = os.path.join(directory, executable_name)
        if os.path.isfile(candidate):
            return os.path.abspath(candidate)

    if project_root:
        for bin_dir in PROJECT_BIN_DIRS:
            candidate = os.path.join(project_root, bin_dir, executable_name)
            if os.path.isfile(candidate):
                return os.path.abspath(candidate)

    return None
