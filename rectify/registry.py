# rectify/registry.py
"""Tool registry mapping formatter identifiers to tool descriptors.

The registry is built once at startup and only read afterwards, so it can be
shared by concurrent formatting requests.

Usage:
    from rectify.registry import create_registry

    registry = create_registry()
    tool = registry.lookup("pint")      # PintTool, or None if unknown

    # Extra tools are added by registering another FormatterTool
    registry.register(MyTool())
"""

from typing import Any, Dict, Iterable, List, Optional

from .protocol import FormatterTool
from .resolver import resolve_executable
from .tools import BUILTIN_TOOLS


class ToolRegistry:
    """Catalog of formatter tools keyed by identifier."""

    def __init__(self, tools: Optional[Iterable[FormatterTool]] = None):
        self._tools: Dict[str, FormatterTool] = {}
        for tool in tools or ():
            self.register(tool)

    def register(self, tool: FormatterTool) -> None:
        """Register a tool, replacing any tool with the same identifier.

        Raises:
            TypeError: If tool does not implement FormatterTool.
        """
        if not isinstance(tool, FormatterTool):
            raise TypeError(f"{tool!r} does not implement FormatterTool")
        self._tools[tool.identifier] = tool

    def lookup(self, identifier: str) -> Optional[FormatterTool]:
        """Return the tool registered under identifier, or None."""
        return self._tools.get(identifier)

    def list_identifiers(self) -> List[str]:
        """List registered identifiers in registration order."""
        return list(self._tools.keys())

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def describe(
        self,
        search_dirs: List[str],
        project_root: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Describe every registered tool and where its executable resolves.

        Args:
            search_dirs: Directories from the search path.
            project_root: Project root for vendor/bin and node_modules/.bin.

        Returns:
            List of dicts with identifier, executable, input_mode and path
            (None when the executable was not found), sorted by identifier.
        """
        info = []
        for identifier, tool in self._tools.items():
            info.append({
                "identifier": identifier,
                "executable": tool.executable_name,
                "input_mode": tool.input_mode.value,
                "path": resolve_executable(tool.executable_name, search_dirs, project_root),
            })
        return sorted(info, key=lambda x: x["identifier"])


def create_registry() -> ToolRegistry:
    """Factory function to create a registry holding the built-in tools."""
    return ToolRegistry(BUILTIN_TOOLS)
