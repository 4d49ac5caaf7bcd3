"""Registry of actions exposed as protocol tools."""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List

from gateway.exceptions import ActionNotFoundError
from gateway.observability import get_logger

logger = get_logger(__name__)


@dataclass
class ActionResult:
    """Content blocks returned by an action."""
    content: List[Dict[str, Any]] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "ActionResult":
        return cls(content=[{"type": "text", "text": text}], is_error=is_error)

    def to_dict(self) -> Dict[str, Any]:
        return {"content": self.content, "isError": self.is_error}


ActionHandler = Callable[[Dict[str, Any]], Awaitable[ActionResult]]


@dataclass
class ActionSpec:
    """A named action with its JSON input schema."""
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: ActionHandler

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ActionRegistry:
    """Maps action names to handlers."""

    def __init__(self):
        self._actions: Dict[str, ActionSpec] = {}

    def register(self, spec: ActionSpec) -> None:
        if spec.name in self._actions:
            raise ValueError(f"Action already registered: {spec.name}")
        self._actions[spec.name] = spec
        logger.debug("Action registered", action=spec.name)

    def get(self, name: str) -> ActionSpec:
        try:
            return self._actions[name]
        except KeyError:
            raise ActionNotFoundError(name) from None

    def list(self) -> List[Dict[str, Any]]:
        return [spec.describe() for spec in self._actions.values()]

    def names(self) -> List[str]:
        return list(self._actions)

    async def call(self, name: str, arguments: Dict[str, Any]) -> ActionResult:
        """Run an action by name.

        Raises:
            ActionNotFoundError: if no action has that name
        """
        spec = self.get(name)
        logger.info("Calling action", action=name, argument_keys=sorted(arguments))
        return await spec.handler(arguments)

    def __contains__(self, name: str) -> bool:
        return name in self._actions

    def __len__(self) -> int:
        return len(self._actions)
