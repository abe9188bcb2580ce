from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Sequence

ToolExecutor = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class Tool:
    """A named, independently invokable unit of server functionality.

    `parameters` is a JSON-Schema-like mapping that is only advertised to
    clients; validating input is the job of `execute`.
    """

    name: str
    description: str
    parameters: Dict[str, Any]
    execute: ToolExecutor = field(repr=False, compare=False)

    def descriptor(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


class ToolRegistry:
    """Ordered, read-only collection of tools keyed by name.

    Built once from a fixed list. Duplicate names are rejected so that a
    lookup can never be ambiguous.
    """

    def __init__(self, tools: Sequence[Tool] = ()) -> None:
        self._tools: List[Tool] = []
        self._by_name: Dict[str, Tool] = {}
        for tool in tools:
            if not isinstance(tool.name, str) or not tool.name:
                raise ValueError("Tool name must be a non-empty string")
            if tool.name in self._by_name:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools.append(tool)
            self._by_name[tool.name] = tool

    def get(self, name: Any) -> Optional[Tool]:
        if not isinstance(name, str):
            return None
        return self._by_name.get(name)

    def names(self) -> List[str]:
        return [t.name for t in self._tools]

    def list_descriptors(self) -> List[Dict[str, Any]]:
        """Public view of every tool in registration order (no executor)."""
        return [t.descriptor() for t in self._tools]

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._by_name
