"""
Order Bridge - FastAPI application.

Receives completed-payment confirmations from the storefront checkout and
creates the matching paid order in Shopify.
"""
import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .capture import get_capture_lookup
from .config import get_settings
from .errors import BridgeError, InvalidAddress, InvalidRequest
from .models import BridgeResponse, ConfirmationPayload, HealthResponse
from .service import OrderBridgeService
from .submitters import get_order_submitter


def setup_logging():
    """Configure logging with file and console handlers."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    # Console handler (always)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (if configured)
    if settings.log_path:
        try:
            log_path = Path(settings.log_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            root_logger.info("Logging to file: %s", log_path)
        except OSError as e:
            root_logger.error("Failed to set up file logging: %s", e)

    return logging.getLogger(__name__)


settings = get_settings()
logger = setup_logging()


@lru_cache()
def get_bridge_service() -> OrderBridgeService:
    """Build the bridge service from configuration (once per process)."""
    return OrderBridgeService(
        settings,
        submitter=get_order_submitter(settings),
        capture_lookup=get_capture_lookup(settings),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Order bridge starting up")
    logger.info("Configuration: %s", settings.get_config_summary())

    for problem in settings.validate_required_config():
        logger.warning("Configuration problem: %s", problem)

    yield

    logger.info("Order bridge shutting down")


app = FastAPI(
    title="Order Bridge",
    description="Creates paid Shopify orders from captured payments",
    version=settings.version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(BridgeError)
async def bridge_error_handler(request: Request, exc: BridgeError):
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.kind, request.url.path, exc.message)
    else:
        logger.warning("%s on %s: %s", exc.kind, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]

    if any("address" in error["loc"] or error["loc"][-1:] == ["email"] for error in errors):
        error = InvalidAddress("Address is malformed", details=errors)
    else:
        error = InvalidRequest("Request body is malformed", details=errors)

    logger.warning("%s on %s: %s", error.kind, request.url.path, errors)
    return JSONResponse(status_code=error.status_code, content=error.to_response())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Server error in %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": "InternalError", "message": "Server error"},
    )


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health", response_model=HealthResponse)
def health_check():
    """Liveness probe."""
    return HealthResponse()


@app.post(
    "/orders/from-payment",
    response_model=BridgeResponse,
    response_model_exclude_none=True,
)
def order_from_payment(
    payload: ConfirmationPayload,
    service: OrderBridgeService = Depends(get_bridge_service),
):
    """
    Create a paid Shopify order for a captured payment.

    The line prices are reconciled so the order total matches the captured amount.
    """
    logger.debug("Incoming payload: %s", payload.model_dump_json())
    return service.process(payload)
