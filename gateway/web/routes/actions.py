"""REST mirror of the protocol tools."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from gateway.actions import ActionRegistry
from gateway.exceptions import ActionNotFoundError, InvalidParamsError
from gateway.observability import get_logger
from gateway.web.dependencies import get_registry
from gateway.web.models import (
    ActionCallRequest,
    ActionCallResponse,
    ActionError,
    ActionListResponse,
)

logger = get_logger(__name__)

router = APIRouter()


def _failure(code: str, message: str, action: Optional[str] = None) -> ActionCallResponse:
    return ActionCallResponse(ok=False, action=action, error=ActionError(code=code, message=message))


def _coerce(value: str, schema: Dict[str, Any]) -> Any:
    """Query strings carry text only; integers are recovered where the schema asks for them."""
    if schema.get("type") == "integer" and value.isdigit():
        return int(value)
    return value


async def run_action(registry: ActionRegistry, name: str, arguments: Dict[str, Any]) -> ActionCallResponse:
    try:
        result = await registry.call(name, arguments)
    except ActionNotFoundError as e:
        return _failure("not_found", str(e), name)
    except InvalidParamsError as e:
        return _failure("invalid_params", e.message, name)
    except Exception as e:
        logger.error("Action failed", action=name, error=str(e), exc_info=True)
        return _failure("internal_error", f"{type(e).__name__}: {e}", name)

    return ActionCallResponse(ok=not result.is_error, action=name, result=result.to_dict())


@router.api_route("/list", methods=["GET", "POST"], response_model=ActionListResponse)
async def list_actions(registry: ActionRegistry = Depends(get_registry)):
    """List available actions."""
    return ActionListResponse(actions=registry.list())


@router.get("/call", response_model=ActionCallResponse)
async def call_action_from_query(request: Request, registry: ActionRegistry = Depends(get_registry)):
    """Call an action with ``name`` and its arguments as query parameters."""
    params = dict(request.query_params)
    name = params.pop("name", None)
    if not name:
        return _failure("invalid_request", "Query parameter 'name' is required")

    try:
        properties = registry.get(name).input_schema.get("properties", {})
    except ActionNotFoundError as e:
        return _failure("not_found", str(e), name)

    arguments = {key: _coerce(value, properties.get(key, {})) for key, value in params.items()}
    return await run_action(registry, name, arguments)


@router.post("/call", response_model=ActionCallResponse)
async def call_action(request: Request, registry: ActionRegistry = Depends(get_registry)):
    """Call an action described by a JSON body."""
    try:
        body = ActionCallRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        logger.warning("Rejected action call", error=str(e))
        return _failure("invalid_request", "Body must be {\"name\": ..., \"arguments\": {...}}")

    return await run_action(registry, body.name, body.arguments)
