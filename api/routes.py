"""
Main API router for the application
"""
from fastapi import APIRouter

from api.endpoints import analytics, jira, tempo

# Create main API router
api_router = APIRouter()

api_router.include_router(
    analytics.router,
    tags=["analysis"]
)

api_router.include_router(
    tempo.router,
    tags=["tempo"]
)

api_router.include_router(
    jira.router,
    prefix="/jira",
    tags=["jira"]
)
