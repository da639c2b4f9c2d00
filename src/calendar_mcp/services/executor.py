from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..api.errors import ToolCallError
from ..api.models import ToolArguments
from ..api.registry import OperationSpec, get_operation
from ..api.results import text_result
from ..data import DataStore

logger = logging.getLogger(__name__)


def _format_validation_error(name: str, exc: ValidationError) -> str:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}" for error in exc.errors()
    )
    return f"Invalid arguments for {name}: {problems}"


def validate_arguments(spec: OperationSpec, arguments: Optional[Dict[str, Any]]) -> ToolArguments:
    try:
        return spec.arguments.model_validate(arguments or {})
    except ValidationError as exc:
        raise ToolCallError.invalid_request(_format_validation_error(spec.name, exc)) from exc


def normalize_arguments(spec: OperationSpec, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate and return the JSON-safe arguments exactly as the caller set them."""

    return validate_arguments(spec, arguments).model_dump(mode="json", exclude_unset=True)


class OperationExecutor:
    """Runs a named data operation against the store and formats its text result."""

    def __init__(self, store: DataStore) -> None:
        self.store = store

    def execute(self, name: str, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        spec = get_operation(name)
        if spec.is_control:
            raise ToolCallError.method_not_found(f"Unknown operation: {name}")
        validated = validate_arguments(spec, arguments)
        try:
            text = spec.handler(self.store, validated)
        except ToolCallError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Operation %s failed", name)
            raise ToolCallError.internal_error(f"Error executing {name}: {exc}") from exc
        logger.debug("Operation %s executed", name)
        return text_result(text)
