from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from section_planner.api.routes import catalog, export, health, roster, scheduling
from section_planner.core.config import get_settings
from section_planner.core.exceptions import AppError
from section_planner.core.logging import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging(level=settings.log_level)
    logger.info("%s starting | afternoon_block=%s", settings.project_name, settings.afternoon_block)
    yield


async def app_error_handler(request: Request, exc: AppError):
    logger.warning("Request %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )

app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(catalog.router, prefix=f"{settings.api_prefix}/catalog", tags=["catalog"])
app.include_router(scheduling.router, prefix=f"{settings.api_prefix}/schedule", tags=["schedule"])
app.include_router(roster.router, prefix=settings.api_prefix, tags=["roster"])
app.include_router(export.router, prefix=f"{settings.api_prefix}/export", tags=["export"])
