from typing import Dict
from fastapi import Depends

from application.database.mssql_connection import get_db_connection
from application.features.assignments.crud.file_storage import FileStorage
from application.features.assignments.crud.record_store import RecordStore
from application.features.auth.permissions import RoleCapabilityChecker, require_user_access


def get_record_store(conn = Depends(get_db_connection)) -> RecordStore:
    return RecordStore(conn)


def get_file_storage(conn = Depends(get_db_connection)) -> FileStorage:
    return FileStorage(conn)


def get_authorization_checker(
    user_data: Dict = Depends(require_user_access),
    store: RecordStore = Depends(get_record_store),
) -> RoleCapabilityChecker:
    """Capability checker for the caller, loaded with their active course enrolments."""
    return RoleCapabilityChecker(user_data, lambda: store.get_user_course_roles(user_data.get("user_id")))
