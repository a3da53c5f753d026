"""FastAPI application entrypoint. No business logic; only wiring, middleware and error rendering."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cleantask.api.v1 import router as v1_router
from cleantask.core.config import settings
from cleantask.core.errors import AuthenticationError, CleanTaskError, ValidationError
from cleantask.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CleanTask API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Wildcard origins only in dev; prod must list them explicitly.
cors_origins = (
    settings.CORS_ORIGINS
    if settings.APP_ENV == "dev"
    else [o for o in settings.CORS_ORIGINS if o != "*"]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CleanTaskError)
async def handle_app_error(request: Request, exc: CleanTaskError) -> JSONResponse:
    """Render taxonomy errors as {"error", "code"} with the mapped status code."""
    logger.warning(
        "%s %s -> %s category=%s code=%s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.category,
        exc.code,
    )
    body: dict[str, object] = {"error": exc.message, "code": exc.code}
    headers = None
    if isinstance(exc, ValidationError):
        body["details"] = exc.details
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or mistyped request fields are a 400 naming each field."""
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        details.append(f"{field}: {err.get('msg', 'invalid value')}")
    logger.warning(
        "%s %s -> 400 category=validation_error code=invalid_request",
        request.method,
        request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(
            {"error": "Invalid request", "code": "invalid_request", "details": details}
        ),
    )


app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "CleanTask API"}
