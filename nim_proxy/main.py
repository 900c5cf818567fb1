import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nim_proxy import __version__
from nim_proxy.api.endpoints import router as api_router
from nim_proxy.api.services.error_handling import ErrorResponseBuilder
from nim_proxy.core.config import Config
from nim_proxy.core.logging import configure_root_logging, logger
from nim_proxy.core.nim_client import NIMClient


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid request body" + (f" ({'; '.join(parts)})" if parts else "")


def create_app(
    config: Config | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Explicit configuration; loaded from the environment when omitted
        transport: Optional httpx transport for the upstream client
    """
    config = config or Config.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.nim_client = NIMClient.from_config(config, transport=transport)
        logger.info(f"NIM Proxy ready | Upstream: {config.nvidia_base_url}")
        if not config.is_api_key_configured():
            logger.warning("NVIDIA_API_KEY is not set; chat completions will fail")
        try:
            yield
        finally:
            await app.state.nim_client.aclose()

    app = FastAPI(title="NIM Proxy", version=__version__, lifespan=lifespan)
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return ErrorResponseBuilder.invalid_request(_validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return ErrorResponseBuilder.http_error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        return ErrorResponseBuilder.internal_error()

    app.include_router(api_router)
    return app


def app_factory() -> FastAPI:
    """Entry point used by uvicorn's ``factory=True`` mode."""
    config = Config.from_env()
    configure_root_logging(config.log_level)
    return create_app(config)


def main() -> None:
    if len(sys.argv) > 1 and sys.argv[1] == "--help":
        print(f"NIM Proxy v{__version__}")
        print("")
        print("Usage: python -m nim_proxy.main")
        print("       or: nimp start")
        print("")
        print("Required environment variables:")
        print("  NVIDIA_API_KEY - Your NVIDIA NIM API key")
        print("")
        print("Optional environment variables:")
        print("  NVIDIA_BASE_URL - Upstream base URL (default: https://integrate.api.nvidia.com/v1)")
        print("  HOST - Server host (default: 0.0.0.0)")
        print("  PORT - Server port (default: 3000)")
        print("  LOG_LEVEL - Logging level (default: INFO)")
        print("  REQUEST_TIMEOUT - Request timeout in seconds (default: 120)")
        sys.exit(0)

    config = Config.from_env()
    log_level = configure_root_logging(config.log_level)

    print(f"🚀 NIM Proxy v{__version__}")
    print(f"   API Key : {config.api_key_hash}")
    print(f"   Base URL: {config.nvidia_base_url}")
    print(f"   Server  : http://{config.host}:{config.port}")
    print("   📡 API endpoint: /v1/chat/completions")
    print("   🔗 Models endpoint: /v1/models")
    print("   ❤️  Health check: /health")
    print("")

    uvicorn.run(
        "nim_proxy.main:app_factory",
        factory=True,
        host=config.host,
        port=config.port,
        log_level=log_level.lower(),
        access_log=log_level == "DEBUG",
        reload=False,
    )


if __name__ == "__main__":
    main()
