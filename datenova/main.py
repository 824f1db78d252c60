from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from datenova.api.v1.api import api_router
from datenova.core.config import settings
from datenova.core.errors import CRMError
from datenova.core.logging import RequestIdMiddleware, setup_logging
from datenova.db.session import init_db
from datenova.services.toasts import Toast, friendly_error_message, toasts
from datenova.storage.local_provider import LocalStorageProvider, get_storage

logger = structlog.get_logger(__name__)


def log_toast(toast: Toast) -> None:
    logger.info("toast", kind=toast.type, title=toast.title, message=toast.message)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.AUTO_CREATE_DB:
        init_db()
    unsubscribe = toasts.subscribe(log_toast)
    logger.info("startup", project=settings.PROJECT_NAME, version=settings.VERSION)
    yield
    unsubscribe()
    logger.info("shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(CRMError)
async def crm_error_handler(request: Request, exc: CRMError):
    """Domain errors become {"detail", "toast"} bodies and an error toast."""
    toast = toasts.handle_remote_error(exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": friendly_error_message(exc), "toast": toast.model_dump()},
    )


# Include API routes separately
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/storage/{bucket}/{path:path}", include_in_schema=False)
def serve_file(bucket: str, path: str, storage: LocalStorageProvider = Depends(get_storage)):
    """Public URLs handed out by the local storage provider."""
    try:
        target = storage.local_path(bucket, path)
    except CRMError:
        raise HTTPException(status_code=404, detail="Archivo no encontrado")
    if not target.is_file():
        raise HTTPException(status_code=404, detail="Archivo no encontrado")
    return FileResponse(target)
