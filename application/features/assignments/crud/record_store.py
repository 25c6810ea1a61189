"""
SQL access for the assignment read endpoints.

All queries use qmark parameters and plain joins so they run on SQL Server
through pyodbc and on any other DB-API driver with the same paramstyle.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterator, List, Optional, Set

from application.database.mssql_crud_helpers import fetch_all, iter_records, placeholders
from application.features.assignments.schemas import AssignmentConfig, CourseModule

logger = logging.getLogger(__name__)

MODULE_NAME = "assign"

ASSIGNMENT_FIELDS = (
    "a.nosubmissions", "a.submissiondrafts", "a.sendnotifications", "a.sendlatenotifications",
    "a.duedate", "a.allowsubmissionsfromdate", "a.grade", "a.timemodified", "a.completionsubmit",
    "a.cutoffdate", "a.teamsubmission", "a.requireallteammemberssubmit",
    "a.teamsubmissiongroupingid", "a.blindmarking", "a.revealidentities", "a.attemptreopenmethod",
    "a.maxattempts", "a.markingworkflow", "a.markingallocation", "a.requiresubmissionstatement",
)


class RecordStore:
    """Read-only queries over one open connection."""

    def __init__(self, conn):
        self.conn = conn

    # Authorization scope

    def get_course_modules(self, assignment_ids: List[int]) -> List[CourseModule]:
        """Course modules of kind 'assign' whose instance is one of the given ids."""
        if not assignment_ids:
            return []
        query = f"""
        SELECT cm.id, cm.course, cm.instance
        FROM course_modules cm
        JOIN modules md ON md.id = cm.module
        WHERE md.name = ? AND cm.instance IN {placeholders(assignment_ids)}
        ORDER BY cm.id
        """
        rows = fetch_all(self.conn, query, [MODULE_NAME, *assignment_ids])
        return [CourseModule(**row) for row in rows]

    def get_user_course_roles(self, user_id: Optional[int]) -> Dict[int, Set[str]]:
        """Map course id -> role names for the user's active enrolments."""
        if user_id is None:
            return {}
        query = """
        SELECT ue.courseid, ue.role
        FROM user_enrolments ue
        WHERE ue.userid = ? AND ue.status = 0
        """
        course_roles = defaultdict(set)
        for row in fetch_all(self.conn, query, (user_id,)):
            course_roles[row["courseid"]].add(row["role"])
        return dict(course_roles)

    def get_enrolled_courses(self, user_id: Optional[int]) -> List[Dict]:
        if user_id is None:
            return []
        query = """
        SELECT DISTINCT c.id, c.fullname, c.shortname, c.timemodified, c.sortorder
        FROM courses c
        JOIN user_enrolments ue ON ue.courseid = c.id
        WHERE ue.userid = ? AND ue.status = 0
        ORDER BY c.sortorder, c.id
        """
        return fetch_all(self.conn, query, (user_id,))

    # Child records, ordered by (assignment, id)

    def iter_grades(self, assignment_ids: List[int], since: int = 0) -> Iterator[Dict]:
        """Latest-attempt grades per (assignment, user) modified at or after `since`."""
        in_sql = placeholders(assignment_ids)
        query = f"""
        SELECT ag.id, ag.assignment, ag.userid, ag.timecreated, ag.timemodified,
            ag.grader, ag.grade
        FROM assign_grades ag
        JOIN (
            SELECT mxg.assignment, mxg.userid, MAX(mxg.attemptnumber) AS maxattempt
            FROM assign_grades mxg
            WHERE mxg.assignment IN {in_sql}
            GROUP BY mxg.assignment, mxg.userid
        ) gmx ON ag.assignment = gmx.assignment AND ag.userid = gmx.userid
        WHERE ag.assignment IN {in_sql}
            AND ag.timemodified >= ?
            AND ag.attemptnumber = gmx.maxattempt
        ORDER BY ag.assignment, ag.id
        """
        return iter_records(self.conn, query, [*assignment_ids, *assignment_ids, since])

    def get_submissions(
        self,
        assignment_ids: List[int],
        status: str = "",
        since: int = 0,
        before: int = 0,
    ) -> List[Dict]:
        """
        Latest-attempt submissions per (assignment, user).

        A non-empty status must match exactly. A non-zero `before` bounds
        timemodified to [since, before]; otherwise only `since` applies.
        """
        in_sql = placeholders(assignment_ids)
        params = [*assignment_ids, *assignment_ids]
        query = f"""
        SELECT mas.id, mas.assignment, mas.userid, mas.timecreated, mas.timemodified,
            mas.status, mas.groupid
        FROM assign_submission mas
        JOIN (
            SELECT mxs.assignment, mxs.userid, MAX(mxs.attemptnumber) AS maxattempt
            FROM assign_submission mxs
            WHERE mxs.assignment IN {in_sql}
            GROUP BY mxs.assignment, mxs.userid
        ) smx ON mas.assignment = smx.assignment AND mas.userid = smx.userid
        WHERE mas.assignment IN {in_sql}
            AND mas.attemptnumber = smx.maxattempt
        """
        if status:
            query += " AND mas.status = ?"
            params.append(status)
        if before:
            query += " AND mas.timemodified BETWEEN ? AND ?"
            params.extend([since, before])
        else:
            query += " AND mas.timemodified >= ?"
            params.append(since)
        query += " ORDER BY mas.assignment, mas.id"
        # Fully fetched: plugin payloads need further queries on this connection.
        return fetch_all(self.conn, query, params)

    def iter_user_flags(self, assignment_ids: List[int]) -> Iterator[Dict]:
        query = f"""
        SELECT auf.id, auf.assignment, auf.userid, auf.locked, auf.mailed,
            auf.extensionduedate, auf.workflowstate, auf.allocatedmarker
        FROM assign_user_flags auf
        WHERE auf.assignment IN {placeholders(assignment_ids)}
        ORDER BY auf.assignment, auf.id
        """
        return iter_records(self.conn, query, assignment_ids)

    def iter_user_mappings(self, assignment_ids: List[int]) -> Iterator[Dict]:
        query = f"""
        SELECT aum.id, aum.assignment, aum.userid
        FROM assign_user_mapping aum
        WHERE aum.assignment IN {placeholders(assignment_ids)}
        ORDER BY aum.assignment, aum.id
        """
        return iter_records(self.conn, query, assignment_ids)

    # Assignment metadata

    def get_assignment_modules(self, course_ids: List[int]) -> List[Dict]:
        """Assignment settings joined with their course module, ordered by (course, cm id)."""
        if not course_ids:
            return []
        query = f"""
        SELECT cm.id AS cmid, cm.course, a.id AS assignmentid, a.name, {", ".join(ASSIGNMENT_FIELDS)}
        FROM course_modules cm
        JOIN modules md ON md.id = cm.module
        JOIN assign a ON a.id = cm.instance
        WHERE md.name = ? AND cm.course IN {placeholders(course_ids)}
        ORDER BY cm.course, cm.id
        """
        return fetch_all(self.conn, query, [MODULE_NAME, *course_ids])

    def get_plugin_configs(self, assignment_ids: List[int]) -> List[AssignmentConfig]:
        if not assignment_ids:
            return []
        query = f"""
        SELECT apc.id, apc.assignment, apc.plugin, apc.subtype, apc.name, apc.value
        FROM assign_plugin_config apc
        WHERE apc.assignment IN {placeholders(assignment_ids)}
        ORDER BY apc.assignment, apc.id
        """
        return [AssignmentConfig(**row) for row in fetch_all(self.conn, query, assignment_ids)]

    def get_onlinetext(self, submission_id: int) -> Optional[Dict]:
        query = """
        SELECT ot.onlinetext, ot.onlineformat
        FROM assignsubmission_onlinetext ot
        WHERE ot.submission = ?
        """
        rows = fetch_all(self.conn, query, (submission_id,))
        return rows[0] if rows else None
