"""
Assignment routes - centralized imports
"""
from application.features.assignments.routes.assignment_query_routes import router as query_router

__all__ = [
    "query_router",
]
