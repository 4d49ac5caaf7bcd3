"""The search action."""

from typing import Any, Dict

from gateway.actions.registry import ActionResult, ActionSpec
from gateway.db import DatabaseClient
from gateway.exceptions import InvalidParamsError
from gateway.observability import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100

STUB_TEXT = "Search for '{query}' is not connected to a database yet."

SEARCH_INPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {"type": "string", "description": "Text to search for"},
        "limit": {
            "type": "integer",
            "description": "Maximum number of results",
            "minimum": 1,
            "maximum": MAX_LIMIT,
            "default": DEFAULT_LIMIT,
        },
    },
    "required": ["query"],
}


class SearchAction:
    """Answers search requests with placeholder text.

    The database client is held but never queried.
    """

    name = "search"
    description = "Search the connected database"

    def __init__(self, database: DatabaseClient):
        self.database = database

    def spec(self) -> ActionSpec:
        return ActionSpec(
            name=self.name,
            description=self.description,
            input_schema=SEARCH_INPUT_SCHEMA,
            handler=self.run,
        )

    async def run(self, arguments: Dict[str, Any]) -> ActionResult:
        query = arguments.get("query")
        if not isinstance(query, str) or not query.strip():
            raise InvalidParamsError("'query' must be a non-empty string")

        limit = arguments.get("limit", DEFAULT_LIMIT)
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_LIMIT:
            raise InvalidParamsError(f"'limit' must be an integer between 1 and {MAX_LIMIT}")

        logger.info(
            "Search requested",
            query=query,
            limit=limit,
            database_configured=self.database.is_configured,
        )
        return ActionResult.text(STUB_TEXT.format(query=query.strip()))
