"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    activities,
    auth,
    projects,
    submissions,
    tasks,
    users,
)
from app.schemas.common import ErrorResponse

# Error envelope documented for every route
api_router = APIRouter(
    responses={
        code: {"model": ErrorResponse}
        for code in (400, 401, 403, 404, 409, 500)
    },
)

# Authentication (no token required for register/login)
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

# User directory
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"],
)

# Projects, membership, progress and files
api_router.include_router(
    projects.router,
    prefix="/projects",
    tags=["Projects"],
)

# Tasks
api_router.include_router(
    tasks.router,
    prefix="/tasks",
    tags=["Tasks"],
)

# Submissions and reviews
api_router.include_router(
    submissions.router,
    prefix="/submissions",
    tags=["Submissions"],
)

# Activity feed
api_router.include_router(
    activities.router,
    prefix="/activities",
    tags=["Activities"],
)
