import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from schoolms.core.config import LOG_LEVEL
from schoolms.core.errors import DatabaseConnectionError
from schoolms.core.logging_middleware import LoggingMiddleware
from schoolms.db.init_db import init_db
from schoolms.routers.admin import router as admin_router
from schoolms.routers.auth import router as auth_router
from schoolms.routers.student import router as student_router
from schoolms.routers.teacher import router as teacher_router

logging.basicConfig(level=LOG_LEVEL)

logger = logging.getLogger(__name__)

app = FastAPI(title="School Management System")

# Middleware
app.add_middleware(LoggingMiddleware)


@app.exception_handler(DatabaseConnectionError)
async def database_unavailable(request: Request, exc: DatabaseConnectionError):
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database unavailable, please try again later"},
    )


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Login gate + one router per role dashboard
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])
app.include_router(teacher_router, prefix="/teacher", tags=["teacher"])
app.include_router(student_router, prefix="/student", tags=["student"])
