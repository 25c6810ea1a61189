"""
Assignment read operations - centralized imports
"""
from application.features.assignments.crud.assignment_queries import (
    get_assignments,
    get_grades,
    get_submissions,
    get_user_flags,
    get_user_mappings,
)
from application.features.assignments.crud.file_storage import FileStorage
from application.features.assignments.crud.record_store import RecordStore

__all__ = [
    "get_assignments",
    "get_grades",
    "get_submissions",
    "get_user_flags",
    "get_user_mappings",
    "FileStorage",
    "RecordStore",
]
