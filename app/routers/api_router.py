from fastapi import APIRouter
from app.routers import analytics, goals, projects, reports, scope

# Centralized API router hub
# Routers are aggregated here, main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(scope.router, tags=["Scope"])
api_router.include_router(goals.router, tags=["Goals"])
api_router.include_router(projects.router, tags=["Projects"])
api_router.include_router(analytics.router, tags=["Analytics"])
api_router.include_router(reports.router, tags=["Report Overrides"])
