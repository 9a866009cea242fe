from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi_mcp import FastApiMCP
from pydantic import BaseModel

from . import __version__
from .config import Settings, get_settings
from .exceptions import CountryIntelError, get_error_response, get_status_code
from .models import (
    CompareInput,
    HealthResponse,
    LookupInput,
    NeighborsInput,
    OperationDescriptor,
    RegionInput,
    SearchInput,
)
from .services.http_pool import HTTPClientPool, close_http_pool
from .services.operations import CATALOG, OPERATIONS, CountryIntelService, invoke
from .utils.dependencies import require_payment
from .utils.logging_security import SecureLogger, log_secure

settings: Settings = get_settings()

logger = logging.getLogger("country-intel")
logging.basicConfig(level=settings.log_level.upper())

AGENT_DESCRIPTION = (
    "Country & region intelligence - ISO codes, currencies, languages, borders, "
    "timezones, and more. 1 free + 5 paid endpoints via x402 micropayments."
)

service = CountryIntelService()


def get_service() -> CountryIntelService:
    """Get the global service instance shared by all operation routes."""
    return service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    logger.info("Initializing HTTP client pool...")
    HTTPClientPool()
    logger.info(
        "country-intel ready: %d operations, upstream %s, payments %s",
        len(CATALOG),
        settings.restcountries_base_url,
        "enabled" if settings.payments_enabled else "disabled",
    )

    yield

    await close_http_pool()


app = FastAPI(title="country-intel API", version=__version__, description=AGENT_DESCRIPTION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins if settings.allowed_origins else (
        ["http://localhost:5173", "http://localhost:3000"] if settings.dev_mode else []
    ),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


@app.middleware("http")
async def secure_logging_middleware(request: Request, call_next):
    """Assign a request ID and log the request and its outcome without credentials."""
    request_id = SecureLogger.generate_request_id()
    request.state.request_id = request_id
    start_time = time.perf_counter()

    request_log = SecureLogger.format_request_log(
        request, request_id, include_headers=logger.isEnabledFor(logging.DEBUG)
    )
    log_secure("info", "Request received", request_log, request_id)

    try:
        response = await call_next(request)
    except Exception as e:
        log_secure("error", "Request failed", SecureLogger.format_error_log(request_id, e), request_id)
        raise

    duration_ms = (time.perf_counter() - start_time) * 1000
    log_secure(
        "info",
        "Request completed",
        SecureLogger.format_response_log(request_id, response.status_code, duration_ms),
        request_id,
    )
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(CountryIntelError)
async def country_intel_error_handler(request: Request, exc: CountryIntelError) -> JSONResponse:
    logger.warning("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(status_code=get_status_code(exc), content=get_error_response(exc))


async def _run(key: str, params: BaseModel | None = None) -> Dict[str, Any]:
    result = await invoke(key, params, service=get_service())
    return {"output": result.model_dump()}


# ====================
# Operation routes
# ====================

@app.post(
    "/api/entrypoints/overview/invoke",
    operation_id="overview",
    summary=OPERATIONS["overview"].description,
    tags=["Country Data"],
)
async def overview_endpoint() -> Dict[str, Any]:
    return await _run("overview")


@app.post(
    "/api/entrypoints/lookup/invoke",
    operation_id="lookup",
    summary=OPERATIONS["lookup"].description,
    tags=["Country Data"],
    dependencies=[Depends(require_payment(OPERATIONS["lookup"]))],
)
async def lookup_endpoint(request: LookupInput) -> Dict[str, Any]:
    return await _run("lookup", request)


@app.post(
    "/api/entrypoints/search/invoke",
    operation_id="search",
    summary=OPERATIONS["search"].description,
    tags=["Country Data"],
    dependencies=[Depends(require_payment(OPERATIONS["search"]))],
)
async def search_endpoint(request: SearchInput) -> Dict[str, Any]:
    return await _run("search", request)


@app.post(
    "/api/entrypoints/region/invoke",
    operation_id="region",
    summary=OPERATIONS["region"].description,
    tags=["Country Data"],
    dependencies=[Depends(require_payment(OPERATIONS["region"]))],
)
async def region_endpoint(request: RegionInput) -> Dict[str, Any]:
    return await _run("region", request)


@app.post(
    "/api/entrypoints/neighbors/invoke",
    operation_id="neighbors",
    summary=OPERATIONS["neighbors"].description,
    tags=["Country Data"],
    dependencies=[Depends(require_payment(OPERATIONS["neighbors"]))],
)
async def neighbors_endpoint(request: NeighborsInput) -> Dict[str, Any]:
    return await _run("neighbors", request)


@app.post(
    "/api/entrypoints/compare/invoke",
    operation_id="compare",
    summary=OPERATIONS["compare"].description,
    tags=["Country Data"],
    dependencies=[Depends(require_payment(OPERATIONS["compare"]))],
)
async def compare_endpoint(request: CompareInput) -> Dict[str, Any]:
    return await _run("compare", request)


# ====================
# Service metadata
# ====================

@app.get("/api/entrypoints", response_model=list[OperationDescriptor])
async def list_entrypoints() -> list[OperationDescriptor]:
    return [
        OperationDescriptor(
            key=op.key,
            description=op.description,
            price=op.price,
            priceUsd=op.price_usd,
            inputSchema=op.input_model.model_json_schema(),
        )
        for op in CATALOG
    ]


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.environment or "development",
        upstream=settings.restcountries_base_url,
        paymentsEnabled=settings.payments_enabled,
        operations=[op.key for op in CATALOG],
        httpPool=HTTPClientPool.get_stats(),
    )


@app.get("/.well-known/erc8004.json")
@app.get("/.well-known/agent-registration.json")
async def agent_registration() -> Dict[str, Any]:
    base_url = settings.agent_url.rstrip("/")
    return {
        "type": "https://eips.ethereum.org/EIPS/eip-8004#registration-v1",
        "name": settings.agent_name,
        "description": AGENT_DESCRIPTION,
        "services": [
            {"name": "web", "endpoint": base_url},
            {"name": "entrypoints", "endpoint": f"{base_url}/api/entrypoints"},
        ],
        "x402Support": settings.payments_enabled,
        "active": True,
        "registrations": [],
        "supportedTrust": ["reputation"],
    }


@app.get("/")
async def root():
    return {"status": "ok", "name": settings.agent_name, "version": __version__}


if not settings.disable_mcp:
    # Mounted after the routes so the OpenAPI schema already holds every operation.
    mcp = FastApiMCP(
        app,
        name="country-intel MCP Server",
        description=AGENT_DESCRIPTION,
        include_operations=[op.key for op in CATALOG],
    )
    mcp.mount()
    logger.info("MCP server mounted at /mcp endpoint")
