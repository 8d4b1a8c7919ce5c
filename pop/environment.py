from typing import Any, Dict, Optional

from .position import Position


class Environment:
    """Represents a scope mapping variable names to runtime values."""
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    def get(self, name: str) -> Optional[Any]:
        if name in self.values:
            return self.values[name]
        if self.parent:
            return self.parent.get(name)
        return None

    def set(self, name: str, value: Any):
        # Assignment always binds in this scope, never in a parent
        self.values[name] = value


class Context:
    """A frame in the evaluation call chain, used only to render tracebacks."""
    def __init__(self, display_name: str, parent: Optional['Context'] = None,
                 parent_entry_pos: Optional[Position] = None):
        self.display_name = display_name
        self.parent = parent
        self.parent_entry_pos = parent_entry_pos

    def __repr__(self) -> str:
        return f"<context {self.display_name}>"
