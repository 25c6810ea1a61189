from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from application.core.config import get_settings
from application.core.logging_config import setup_logging
from application.features.assignments.router import router as assignments_router

settings = get_settings()
setup_logging(settings.log_level)

application = FastAPI(title=settings.project_name)

origins = ["*"]

application.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

application.include_router(assignments_router, tags=["Assignments"], prefix="/assignments")
