"""
Assignment routes aggregator - imports from separate modules for better organization.
"""
from fastapi import APIRouter

from application.features.assignments.routes.assignment_query_routes import router as query_router

router = APIRouter()

router.include_router(query_router, tags=["Assignment Queries"])
