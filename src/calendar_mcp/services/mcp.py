from __future__ import annotations

import logging
from inspect import Parameter, Signature
from typing import Annotated, Any, Callable, Dict, List, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import FunctionTool
from pydantic import Field

from ..api import OperationSpec, ToolCallError, get_operations
from ..api.results import result_text
from .gateway import ToolGateway, get_gateway

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Calendar, list, and item tools. Write operations are not applied immediately: they return an "
    "operation ID that must be confirmed with confirm_operation (by ID, confirm true/false, or a plain "
    '"yes"/"no" reply). Use get_context to see recent activity and IDs you can refer to.'
)


def _signature_for(spec: OperationSpec) -> tuple[Signature, Dict[str, Any]]:
    parameters: List[Parameter] = []
    annotations: Dict[str, Any] = {}
    for field_name, info in spec.arguments.model_fields.items():
        annotation: Any = info.annotation
        if info.description:
            annotation = Annotated[annotation, Field(description=info.description)]
        default = Parameter.empty if info.is_required() else info.default
        annotations[field_name] = annotation
        parameters.append(Parameter(field_name, Parameter.KEYWORD_ONLY, annotation=annotation, default=default))
    return Signature(parameters), annotations


def _tool_function(gateway: ToolGateway, spec: OperationSpec) -> Callable[..., str]:
    signature, annotations = _signature_for(spec)

    def _tool_wrapper(**kwargs: Any) -> str:
        # Optional parameters arrive as None when omitted; they must stay unset.
        arguments = {key: value for key, value in kwargs.items() if value is not None}
        try:
            result = gateway.call(spec.name, arguments)
        except ToolCallError as exc:
            logger.warning("Tool %s rejected: %s", spec.name, exc)
            raise ToolError(str(exc)) from exc
        return result_text(result) or ""

    _tool_wrapper.__name__ = spec.name
    _tool_wrapper.__doc__ = spec.description
    _tool_wrapper.__signature__ = signature  # type: ignore[attr-defined]
    annotations["return"] = str
    _tool_wrapper.__annotations__ = annotations
    return _tool_wrapper


def build_mcp_server(gateway: Optional[ToolGateway] = None) -> FastMCP:
    gateway = gateway or get_gateway()
    server = FastMCP(name="calendar-mcp-server", instructions=INSTRUCTIONS)
    for spec in get_operations():
        logger.debug("Registering MCP tool: %s", spec.name)
        tool = FunctionTool.from_function(
            _tool_function(gateway, spec),
            name=spec.name,
            description=spec.description,
            tags={spec.category, *spec.tags},
        )
        server.add_tool(tool)
    return server


def run_mcp_server(transport: str = "stdio", host: str = "127.0.0.1", port: int = 8765) -> None:
    gateway = get_gateway()
    server = build_mcp_server(gateway)
    gateway.start_background_sweeps()
    try:
        if transport == "stdio":
            server.run("stdio")
        else:
            server.run("streamable-http", host=host, port=port)
    finally:
        gateway.shutdown()
