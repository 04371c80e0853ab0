import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from registrar.core.config import LOG_LEVEL
from registrar.core.errors import RegistrarError, TransactionAbortedError
from registrar.core.logging_middleware import LoggingMiddleware
from registrar.db.init_db import init_db
from registrar.routers.auth import router as auth_router
from registrar.routers.contracts import router as contracts_router
from registrar.routers.enrollments import router as enrollments_router
from registrar.routers.reenrollments import router as reenrollments_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Registrar")

# Middleware
app.add_middleware(LoggingMiddleware)


@app.exception_handler(RegistrarError)
async def registrar_error_handler(request: Request, exc: RegistrarError):
    logger.warning(
        "%s %s failed: %s (%s)",
        request.method,
        request.url.path,
        exc.message,
        type(exc).__name__,
    )
    headers = {"Retry-After": "5"} if isinstance(exc, TransactionAbortedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "type": type(exc).__name__},
        headers=headers,
    )


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(enrollments_router, prefix="/enrollments", tags=["enrollments"])
app.include_router(reenrollments_router, prefix="/reenrollments", tags=["reenrollments"])
app.include_router(contracts_router, prefix="/contracts", tags=["contracts"])
