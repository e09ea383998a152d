from fastapi import APIRouter
from waypoint.endpoints.v1 import (
    auth_api,
    users_api,
    projects_api,
    tasks_api,
    sprints_api
)

api_router = APIRouter(prefix="/api")

api_router.include_router(auth_api.router)
api_router.include_router(users_api.router)
api_router.include_router(projects_api.router)
api_router.include_router(tasks_api.router)
api_router.include_router(sprints_api.router)
