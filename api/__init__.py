import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from . import connection, checkout, payment, refund, webhooks, image, analytics
from utils.cors import FunctionCORSMiddleware
from utils.errors import AppError, InvalidRequest
from utils.log_config import configure_logging
from utils.settings import get_settings

configure_logging()
logger = logging.getLogger(__name__)

app = fastapi.FastAPI(title="Nirchal storefront functions")

app.add_middleware(
    FunctionCORSMiddleware,
    exempt_paths=image.SELF_CORS_PATHS,
    allow_origins=get_settings().cors_allow_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Razorpay-Signature"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %d %s: %s", request.method, request.url.path, exc.status_code, type(exc).__name__, exc.detail)
    else:
        logger.info("%s %s -> %d %s: %s", request.method, request.url.path, exc.status_code, type(exc).__name__, exc.detail or exc.public_message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


def describe_validation_errors(errors) -> str:
    """pydanticの検証エラーを呼び出し元向けの短い文にまとめる"""
    missing = []
    invalid = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        if error.get("type") == "missing":
            missing.append(field)
        else:
            invalid.append(f"{field} ({error.get('msg', 'invalid')})")
    parts = []
    if missing:
        parts.append("Missing required fields: " + ", ".join(missing))
    if invalid:
        parts.append("Invalid fields: " + "; ".join(invalid))
    return ". ".join(parts) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return await app_error_handler(request, InvalidRequest(describe_validation_errors(exc.errors())))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # 未定義のルートや許可されていないメソッドもアプリ共通の形で返す
    logger.info("%s %s -> %d", request.method, request.url.path, exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


app.include_router(connection.router)
app.include_router(checkout.router)
app.include_router(payment.router)
app.include_router(refund.router)
app.include_router(webhooks.router)
app.include_router(image.router)
app.include_router(analytics.router)
