"""
Assignment query routes - batched, permission-filtered GET operations
"""
import logging
import re
from typing import Dict, List
from fastapi import Depends, HTTPException, APIRouter, Query

from application.features.assignments.schemas import (
    CoursesResponse,
    GradesResponse,
    SubmissionsResponse,
    UserFlagsResponse,
    UserMappingsResponse,
)
from application.features.assignments.crud import (
    FileStorage,
    RecordStore,
    get_assignments,
    get_grades,
    get_submissions,
    get_user_flags,
    get_user_mappings,
)
from application.features.assignments.dependencies import (
    get_authorization_checker,
    get_file_storage,
    get_record_store,
)
from application.features.auth.permissions import AuthorizationChecker, require_user_access

logger = logging.getLogger(__name__)

router = APIRouter()

CAPABILITY_PATTERN = re.compile(r"^[a-z][a-z0-9_]*/[a-z0-9_]+:[a-z0-9_]+$")

# Batched queries bind the id list twice; SQL Server allows 2100 parameters per statement
MAX_ASSIGNMENT_IDS = 1000


def _check_batch_size(assignmentids: List[int]):
    if len(assignmentids) > MAX_ASSIGNMENT_IDS:
        raise HTTPException(
            status_code=422,
            detail=f"At most {MAX_ASSIGNMENT_IDS} assignment ids per request, got {len(assignmentids)}",
        )


def _run_query(operation, *args, **kwargs):
    """Per-item problems come back as warnings; anything raised here fails the request."""
    try:
        return operation(*args, **kwargs)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"{operation.__name__} failed: {e}")
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")


@router.get("/", response_model=CoursesResponse)
def fetch_assignments(
    courseids: List[int] = Query([], description="0 or more course ids"),
    capabilities: List[str] = Query([], description="capabilities used to filter courses"),
    user_data: Dict = Depends(require_user_access),
    store: RecordStore = Depends(get_record_store),
    checker: AuthorizationChecker = Depends(get_authorization_checker),
):
    """Retrieve the assignments the caller can view, grouped by enrolled course"""
    invalid = [capability for capability in capabilities if not CAPABILITY_PATTERN.match(capability)]
    if invalid:
        raise HTTPException(status_code=422, detail=f"Invalid capability names: {invalid}")

    return _run_query(get_assignments, store, checker, user_data.get("user_id"), courseids, capabilities)


@router.get("/grades", response_model=GradesResponse)
def fetch_grades(
    assignmentids: List[int] = Query(..., description="1 or more assignment ids"),
    since: int = Query(0, description="only return records where timemodified >= since"),
    store: RecordStore = Depends(get_record_store),
    checker: AuthorizationChecker = Depends(get_authorization_checker),
):
    """Retrieve latest-attempt grades for the requested assignments"""
    _check_batch_size(assignmentids)
    return _run_query(get_grades, store, checker, assignmentids, since=since)


@router.get("/submissions", response_model=SubmissionsResponse)
def fetch_submissions(
    assignmentids: List[int] = Query(..., description="1 or more assignment ids"),
    status: str = Query("", pattern="^[A-Za-z]*$", description="only return submissions with this status"),
    since: int = Query(0, description="submitted since"),
    before: int = Query(0, description="submitted before, 0 for no upper bound"),
    store: RecordStore = Depends(get_record_store),
    file_storage: FileStorage = Depends(get_file_storage),
    checker: AuthorizationChecker = Depends(get_authorization_checker),
):
    """Retrieve latest-attempt submissions, with plugin files and text, for the requested assignments"""
    _check_batch_size(assignmentids)
    return _run_query(
        get_submissions, store, checker, file_storage, assignmentids,
        status=status, since=since, before=before,
    )


@router.get("/user-flags", response_model=UserFlagsResponse)
def fetch_user_flags(
    assignmentids: List[int] = Query(..., description="1 or more assignment ids"),
    store: RecordStore = Depends(get_record_store),
    checker: AuthorizationChecker = Depends(get_authorization_checker),
):
    """Retrieve per-user grading flags for the requested assignments"""
    _check_batch_size(assignmentids)
    return _run_query(get_user_flags, store, checker, assignmentids)


@router.get("/user-mappings", response_model=UserMappingsResponse)
def fetch_user_mappings(
    assignmentids: List[int] = Query(..., description="1 or more assignment ids"),
    store: RecordStore = Depends(get_record_store),
    checker: AuthorizationChecker = Depends(get_authorization_checker),
):
    """Retrieve blind-marking user mappings for the requested assignments"""
    _check_batch_size(assignmentids)
    return _run_query(get_user_mappings, store, checker, assignmentids)
