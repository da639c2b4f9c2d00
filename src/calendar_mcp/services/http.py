from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..api import ErrorCode, OperationSpec, ToolCallError, get_operations
from ..api.results import result_text
from .gateway import ToolGateway, get_gateway

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.METHOD_NOT_FOUND: 404,
    ErrorCode.INTERNAL_ERROR: 500,
}


class ToolCallRequest(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict)
    session_id: Optional[str] = None


def _serialize_operation(spec: OperationSpec) -> dict:
    return {
        "name": spec.name,
        "description": spec.description,
        "category": spec.category,
        "read_only": spec.read_only,
        "tags": list(spec.tags),
        "parameters": spec.parameter_schema,
    }


def create_app(gateway: Optional[ToolGateway] = None) -> FastAPI:
    gateway = gateway or get_gateway()
    app = FastAPI(title="Calendar MCP Local API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/tools")
    async def list_tools() -> JSONResponse:
        tools = [_serialize_operation(spec) for spec in get_operations()]
        return JSONResponse({"tools": tools})

    @app.post("/api/tools/{tool_name}")
    def invoke_tool(tool_name: str, request: ToolCallRequest) -> JSONResponse:
        try:
            result = gateway.call(tool_name, request.arguments, session_id=request.session_id)
        except ToolCallError as exc:
            logger.warning("Tool %s failed: %s", tool_name, exc)
            raise HTTPException(
                status_code=STATUS_BY_CODE[exc.code],
                detail={"code": exc.code.value, "message": exc.message},
            ) from exc
        logger.debug("Tool %s executed successfully", tool_name)
        return JSONResponse({"name": tool_name, "text": result_text(result), "result": result})

    return app


def run_local_server(host: str = "127.0.0.1", port: int = 8000) -> None:
    import asyncio

    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    gateway = get_gateway()
    config = Config()
    config.bind = [f"{host}:{port}"]
    gateway.start_background_sweeps()
    try:
        asyncio.run(serve(create_app(gateway), config))
    finally:
        gateway.shutdown()
