import uvicorn
from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.config import settings
from portal.core.exceptions import PortalError
from portal.core.logging_config import setup_logging, get_logger
from portal.core.rate_limit import limiter, rate_limit_exceeded_handler
from portal.database.session import get_db
from portal.routes import api_key_router, auth_router, permission_router, role_router
from portal.utils.response_utils import ResponseWrapper

# Setup logging as early as possible
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Authentication, roles and API keys for the customer portal",
    version=settings.APP_VERSION,
)

# Per-IP throttling
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Set up CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGIN_LIST,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ResponseWrapper.error(exc.status_code, exc.message, exc.data),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "The requested resource does not exist"
    else:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=ResponseWrapper.error(exc.status_code, message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query"))
    message = f"Invalid {field}: {first.get('msg')}" if field else "Invalid request body"
    details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ResponseWrapper.error(status.HTTP_400_BAD_REQUEST, message, {"errors": details}),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ResponseWrapper.error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
    )


# Include routers
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(permission_router, prefix=settings.API_PREFIX)
app.include_router(role_router, prefix=settings.API_PREFIX)
app.include_router(api_key_router, prefix=settings.API_PREFIX)


@app.get(f"{settings.API_PREFIX}/health")
@limiter.exempt
async def health_check(db: Session = Depends(get_db)):
    """Liveness plus a database round trip"""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check database query failed: {e}")
        database = "unavailable"

    content = ResponseWrapper.success(
        data={"status": "ok" if database == "ok" else "degraded", "database": database,
              "version": settings.APP_VERSION},
    )
    if database != "ok":
        content["errCode"] = status.HTTP_503_SERVICE_UNAVAILABLE
        content["msg"] = "Database unavailable"
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=content)
    return content


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
