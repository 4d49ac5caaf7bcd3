"""Actions exposed by the gateway."""

from .registry import ActionRegistry, ActionResult, ActionSpec
from .search import SearchAction

__all__ = [
    "ActionRegistry",
    "ActionResult",
    "ActionSpec",
    "SearchAction",
    "build_registry",
]


def build_registry(database) -> ActionRegistry:
    """Registry with every action the gateway ships."""
    registry = ActionRegistry()
    registry.register(SearchAction(database).spec())
    return registry
