import logging
from typing import Dict, List

from application.features.assignments.crud.file_storage import FileStorage
from application.features.assignments.crud.record_store import RecordStore
from application.features.assignments.crud.submission_plugins import (
    SubmissionPlugin,
    get_enabled_submission_plugins,
)
from application.features.assignments.pipeline import (
    NO_ACCESS_MESSAGE,
    batch_lookup,
    group_by_parent,
    make_warning,
    unique_ids,
)
from application.features.assignments.schemas import (
    Assignment,
    AssignmentGrades,
    AssignmentSubmissions,
    AssignmentUserFlags,
    AssignmentUserMappings,
    Course,
    CourseModule,
    CoursesResponse,
    EditorFieldInfo,
    FileAreaInfo,
    Grade,
    GradesResponse,
    Submission,
    SubmissionFileInfo,
    SubmissionPluginInfo,
    SubmissionsResponse,
    UserFlag,
    UserFlagsResponse,
    UserMapping,
    UserMappingsResponse,
    WarningCode,
    WarningItem,
)
from application.features.auth.permissions import (
    CAP_GRADE,
    CAP_REVEAL_IDENTITIES,
    CAP_VIEW,
    AuthorizationChecker,
    Denied,
)

logger = logging.getLogger(__name__)

NOT_ENROLLED_MESSAGE = "User is not enrolled or does not have requested capability"
NO_COURSE_ACCESS_MESSAGE = "No access rights in course context"


'''
*** GET GRADES ENDPOINT ***
Latest-attempt grades for each requested assignment
'''
def get_grades(
    store: RecordStore,
    checker: AuthorizationChecker,
    assignment_ids: List[int],
    since: int = 0,
) -> GradesResponse:
    def fetch(ids):
        for row in store.iter_grades(ids, since):
            yield row["assignment"], Grade(
                id=row["id"],
                userid=row["userid"],
                timecreated=row["timecreated"],
                timemodified=row["timemodified"],
                grader=row["grader"],
                grade="" if row["grade"] is None else str(row["grade"]),
            )

    result = batch_lookup(
        assignment_ids, store.get_course_modules, checker, CAP_GRADE, fetch, "No grades found"
    )
    return GradesResponse(
        assignments=[
            AssignmentGrades(assignmentid=group.parent_id, grades=group.records)
            for group in result.groups
        ],
        warnings=result.warnings,
    )


'''
*** GET SUBMISSIONS ENDPOINT ***
Latest-attempt submissions with their plugin payloads
'''
def build_plugin_info(
    plugin: SubmissionPlugin,
    submission_id: int,
    context_id: int,
    store: RecordStore,
    file_storage: FileStorage,
) -> SubmissionPluginInfo:
    fileareas = []
    for filearea in plugin.get_file_areas():
        files = file_storage.get_area_files(context_id, plugin.component, filearea, submission_id)
        fileareas.append(FileAreaInfo(
            area=filearea,
            files=[SubmissionFileInfo(filepath=f.full_path) for f in files] or None,
        ))

    editorfields = []
    fields = plugin.get_editor_fields()
    if fields:
        record = plugin.load_editor_record(store, submission_id)
        editorfields = [
            EditorFieldInfo(
                name=name,
                description=description,
                text=plugin.get_editor_text(record, name),
                format=plugin.get_editor_format(record, name),
            )
            for name, description in fields.items()
        ]

    return SubmissionPluginInfo(
        type=plugin.type,
        name=plugin.name,
        fileareas=fileareas or None,
        editorfields=editorfields or None,
    )


def get_submissions(
    store: RecordStore,
    checker: AuthorizationChecker,
    file_storage: FileStorage,
    assignment_ids: List[int],
    status: str = "",
    since: int = 0,
    before: int = 0,
) -> SubmissionsResponse:
    modules: Dict[int, CourseModule] = {}

    def resolve(ids):
        containers = store.get_course_modules(ids)
        modules.update({cm.instance: cm for cm in containers})
        return containers

    def fetch(ids):
        rows = store.get_submissions(ids, status=status, since=since, before=before)
        configs = store.get_plugin_configs(unique_ids(row["assignment"] for row in rows))
        plugins = {
            group.parent_id: get_enabled_submission_plugins(group.records)
            for group in group_by_parent((config.assignment, config) for config in configs)
        }
        for row in rows:
            assignment_id = row["assignment"]
            yield assignment_id, Submission(
                id=row["id"],
                userid=row["userid"],
                timecreated=row["timecreated"],
                timemodified=row["timemodified"],
                status=row["status"],
                groupid=row["groupid"],
                plugins=[
                    build_plugin_info(plugin, row["id"], modules[assignment_id].id, store, file_storage)
                    for plugin in plugins.get(assignment_id, [])
                ],
            )

    result = batch_lookup(assignment_ids, resolve, checker, CAP_GRADE, fetch, "No submissions found")
    return SubmissionsResponse(
        assignments=[
            AssignmentSubmissions(assignmentid=group.parent_id, submissions=group.records)
            for group in result.groups
        ],
        warnings=result.warnings,
    )


'''
*** GET USER FLAGS ENDPOINT ***
'''
def get_user_flags(
    store: RecordStore,
    checker: AuthorizationChecker,
    assignment_ids: List[int],
) -> UserFlagsResponse:
    def fetch(ids):
        for row in store.iter_user_flags(ids):
            yield row["assignment"], UserFlag(
                id=row["id"],
                userid=row["userid"],
                locked=row["locked"],
                mailed=row["mailed"],
                extensionduedate=row["extensionduedate"],
                workflowstate=row["workflowstate"],
                allocatedmarker=row["allocatedmarker"],
            )

    result = batch_lookup(
        assignment_ids, store.get_course_modules, checker, CAP_GRADE, fetch, "No user flags found"
    )
    return UserFlagsResponse(
        assignments=[
            AssignmentUserFlags(assignmentid=group.parent_id, userflags=group.records)
            for group in result.groups
        ],
        warnings=result.warnings,
    )


'''
*** GET USER MAPPINGS ENDPOINT ***
Blind-marking participant mappings; needs the reveal identities capability
'''
def get_user_mappings(
    store: RecordStore,
    checker: AuthorizationChecker,
    assignment_ids: List[int],
) -> UserMappingsResponse:
    def fetch(ids):
        for row in store.iter_user_mappings(ids):
            yield row["assignment"], UserMapping(id=row["id"], userid=row["userid"])

    result = batch_lookup(
        assignment_ids, store.get_course_modules, checker, CAP_REVEAL_IDENTITIES, fetch, "No mappings found"
    )
    return UserMappingsResponse(
        assignments=[
            AssignmentUserMappings(assignmentid=group.parent_id, mappings=group.records)
            for group in result.groups
        ],
        warnings=result.warnings,
    )


'''
*** GET ASSIGNMENTS ENDPOINT ***
Assignments the caller can view, grouped by enrolled course
'''
def get_assignments(
    store: RecordStore,
    checker: AuthorizationChecker,
    user_id: int,
    course_ids: List[int],
    capabilities: List[str],
) -> CoursesResponse:
    response = CoursesResponse()
    requested = unique_ids(course_ids)
    enrolled = store.get_enrolled_courses(user_id)
    enrolled_ids = {course["id"] for course in enrolled}

    for course_id in requested:
        if course_id not in enrolled_ids:
            response.warnings.append(
                make_warning(WarningItem.COURSE, course_id, WarningCode.NOT_ENROLLED, NOT_ENROLLED_MESSAGE)
            )

    courses = []
    for course in enrolled:
        if requested and course["id"] not in requested:
            continue
        decision = checker.validate_context(course["id"])
        if isinstance(decision, Denied):
            logger.info(f"Course {course['id']} excluded: {decision.reason}")
            response.warnings.append(
                make_warning(WarningItem.COURSE, course["id"], WarningCode.NO_ACCESS, NO_COURSE_ACCESS_MESSAGE)
            )
            continue
        if capabilities and not checker.has_all_capabilities(capabilities, course["id"]):
            continue
        courses.append(course)

    modules = store.get_assignment_modules([course["id"] for course in courses])
    modules_by_course = {
        group.parent_id: group.records
        for group in group_by_parent((module["course"], module) for module in modules)
    }

    for course in courses:
        visible = []
        for module in modules_by_course.get(course["id"], []):
            decision = checker.require_capability(CAP_VIEW, course["id"])
            if isinstance(decision, Denied):
                logger.info(f"Module {module['cmid']} excluded: {decision.reason}")
                response.warnings.append(
                    make_warning(WarningItem.MODULE, module["cmid"], WarningCode.NO_ACCESS, NO_ACCESS_MESSAGE)
                )
                continue
            visible.append(module)

        configs = store.get_plugin_configs([module["assignmentid"] for module in visible])
        configs_by_assignment = {
            group.parent_id: group.records
            for group in group_by_parent((config.assignment, config) for config in configs)
        }

        response.courses.append(Course(
            id=course["id"],
            fullname=course["fullname"],
            shortname=course["shortname"],
            timemodified=course["timemodified"],
            assignments=[
                Assignment(
                    **{key: value for key, value in module.items() if key not in ("assignmentid", "cmid")},
                    id=module["assignmentid"],
                    cmid=module["cmid"],
                    configs=configs_by_assignment.get(module["assignmentid"], []),
                )
                for module in visible
            ],
        ))

    return response
