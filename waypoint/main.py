import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from waypoint.endpoints.router import api_router
from waypoint.database.session import engine
from waypoint.database.base import Base
from waypoint.config.settings import settings
from waypoint.utils.db_utils import create_default_admin
from waypoint.utils.exceptions import WaypointError
from waypoint.utils.logging import setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API Router
app.include_router(api_router)

@app.exception_handler(WaypointError)
async def handle_waypoint_error(request: Request, exc: WaypointError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, extra={"metadata": exc.metadata})
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.category, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

@app.on_event("startup")
def startup_event():
    # Create tables if they don't exist
    Base.metadata.create_all(bind=engine)
    create_default_admin()

@app.get("/api")
def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}
