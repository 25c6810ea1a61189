"""
Batch permission-filtered lookup shared by the grades, submissions,
user flag and user mapping endpoints.

Requested assignment ids are resolved to their course modules, ids whose
module fails the capability check are dropped with a no-access warning, the
remaining ids are fetched in one batched query, and the ordered rows are
split into one group per assignment. Allowed ids that produced no rows get a
not-found warning.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, Iterator, List, Sequence, Tuple, TypeVar

from application.features.assignments.schemas import (
    CourseModule,
    ItemWarning,
    WarningCode,
    WarningItem,
)
from application.features.auth.permissions import AuthorizationChecker, Denied

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_ACCESS_MESSAGE = "No access rights in module context"


@dataclass
class ResultGroup(Generic[T]):
    parent_id: int
    records: List[T] = field(default_factory=list)


@dataclass
class LookupResult(Generic[T]):
    groups: List[ResultGroup[T]] = field(default_factory=list)
    warnings: List[ItemWarning] = field(default_factory=list)


def unique_ids(ids: Iterable[int]) -> List[int]:
    """Drop repeated ids, keeping the first occurrence's position."""
    return list(dict.fromkeys(ids))


def make_warning(item: WarningItem, itemid: int, code: WarningCode, message: str) -> ItemWarning:
    return ItemWarning(item=item, itemid=itemid, warningcode=code, message=message)


def group_by_parent(rows: Iterable[Tuple[int, T]]) -> Iterator[ResultGroup[T]]:
    """
    Split (parent_id, record) pairs, already ordered by parent id, into
    groups in a single pass. A group is emitted as soon as the parent id
    changes.
    """
    current = None
    for parent_id, record in rows:
        if current is None or parent_id != current.parent_id:
            if current is not None:
                yield current
            current = ResultGroup(parent_id=parent_id)
        current.records.append(record)
    if current is not None:
        yield current


def batch_lookup(
    requested_ids: Sequence[int],
    resolve_containers: Callable[[List[int]], Iterable[CourseModule]],
    checker: AuthorizationChecker,
    capability: str,
    fetch_records: Callable[[List[int]], Iterable[Tuple[int, T]]],
    not_found_message: str,
) -> LookupResult[T]:
    """
    Run the lookup for one endpoint.

    :param requested_ids: assignment ids from the request, repeats allowed
    :param resolve_containers: returns the course modules for the given assignment ids
    :param checker: capability checks for the caller
    :param capability: capability required in each module's course
    :param fetch_records: returns (assignment id, record) pairs ordered by assignment id then record id
    :param not_found_message: message of the code 3 warning for allowed ids without rows
    :return: groups in query order plus the accumulated warnings
    """
    result = LookupResult()
    requested = unique_ids(requested_ids)
    if not requested:
        return result

    # Ids without a course module never reach the allowed set and are not warned about.
    allowed = set()
    for container in resolve_containers(requested):
        decision = checker.require_capability(capability, container.course)
        if isinstance(decision, Denied):
            logger.info(
                f"Assignment {container.instance} (cm {container.id}) excluded: {decision.reason}"
            )
            result.warnings.append(
                make_warning(WarningItem.ASSIGNMENT, container.id, WarningCode.NO_ACCESS, NO_ACCESS_MESSAGE)
            )
            continue
        allowed.add(container.instance)

    missing = [assignment_id for assignment_id in requested if assignment_id in allowed]
    if missing:
        logger.debug(f"Fetching records for assignments {sorted(missing)}")
        for group in group_by_parent(fetch_records(sorted(missing))):
            result.groups.append(group)
            if group.parent_id in missing:
                missing.remove(group.parent_id)

    for assignment_id in missing:
        logger.info(f"Assignment {assignment_id}: {not_found_message}")
        result.warnings.append(
            make_warning(WarningItem.ASSIGNMENT, assignment_id, WarningCode.NOT_FOUND, not_found_message)
        )

    return result
