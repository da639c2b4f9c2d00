from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

import orjson

from .errors import ToolCallError
from .models import ToolArguments

JsonSchema = Dict[str, Any]
Handler = Callable[..., str]
Summary = Callable[[Dict[str, Any]], str]


@dataclass(frozen=True)
class OperationSpec:
    name: str
    description: str
    arguments: Type[ToolArguments]
    read_only: bool
    category: str
    tags: tuple[str, ...]
    handler: Optional[Handler] = None
    summary: Optional[Summary] = None

    @property
    def is_control(self) -> bool:
        """Control tools are answered by the gateway itself, not the data store."""

        return self.handler is None

    @property
    def parameter_schema(self) -> JsonSchema:
        schema = self.arguments.model_json_schema()
        schema.pop("title", None)
        return schema

    def as_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameter_schema,
            },
        }


REGISTRY: Dict[str, OperationSpec] = {}


def _register(spec: OperationSpec) -> None:
    if spec.name in REGISTRY:
        raise ValueError(f"Operation '{spec.name}' is already registered.")
    REGISTRY[spec.name] = spec


def register_operation(
    name: str,
    *,
    description: str,
    arguments: Type[ToolArguments],
    read_only: bool,
    category: str,
    summary: Optional[Summary] = None,
    tags: Optional[Iterable[str]] = None,
) -> Callable[[Handler], Handler]:
    def decorator(func: Handler) -> Handler:
        _register(
            OperationSpec(
                name=name,
                description=description,
                arguments=arguments,
                read_only=read_only,
                category=category,
                tags=tuple(tags or ()),
                handler=func,
                summary=summary,
            )
        )
        return func

    return decorator


def register_control(name: str, *, description: str, arguments: Type[ToolArguments]) -> None:
    _register(
        OperationSpec(
            name=name,
            description=description,
            arguments=arguments,
            read_only=True,
            category="control",
            tags=("control",),
        )
    )


def get_operations() -> List[OperationSpec]:
    return list(REGISTRY.values())


def get_operation(name: str) -> OperationSpec:
    spec = REGISTRY.get(name)
    if spec is None:
        raise ToolCallError.method_not_found(f"Unknown operation: {name}")
    return spec


def is_read_only(name: str) -> bool:
    return get_operation(name).read_only


def describe_write(name: str, arguments: Dict[str, Any]) -> str:
    """Render the human-readable line shown when asking to confirm a write."""

    spec = REGISTRY.get(name)
    if spec is not None and spec.summary is not None:
        return spec.summary(arguments)
    rendered = orjson.dumps(arguments, option=orjson.OPT_INDENT_2).decode("utf-8")
    return f"Execute operation: {name} with parameters: {rendered}"
