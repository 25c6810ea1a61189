from enum import Enum
from pydantic import BaseModel
from typing import Optional, List


class WarningItem(str, Enum):
    ASSIGNMENT = "assignment"
    COURSE = "course"
    MODULE = "module"


class WarningCode(str, Enum):
    NO_ACCESS = "1"
    NOT_ENROLLED = "2"
    NOT_FOUND = "3"


class ItemWarning(BaseModel):
    """Non-fatal, per-item outcome returned next to the results."""
    item: WarningItem
    itemid: int
    warningcode: WarningCode
    message: str


class CourseModule(BaseModel):
    """Course module row that scopes permissions for one assignment instance."""
    id: int
    course: int
    instance: int


# Grades
class Grade(BaseModel):
    id: int
    userid: int
    timecreated: int
    timemodified: int
    grader: int
    grade: str


class AssignmentGrades(BaseModel):
    assignmentid: int
    grades: List[Grade] = []


class GradesResponse(BaseModel):
    assignments: List[AssignmentGrades] = []
    warnings: List[ItemWarning] = []


# Submissions
class SubmissionFileInfo(BaseModel):
    filepath: str


class FileAreaInfo(BaseModel):
    area: str
    files: Optional[List[SubmissionFileInfo]] = None


class EditorFieldInfo(BaseModel):
    name: str
    description: str
    text: str
    format: int


class SubmissionPluginInfo(BaseModel):
    type: str
    name: str
    fileareas: Optional[List[FileAreaInfo]] = None
    editorfields: Optional[List[EditorFieldInfo]] = None


class Submission(BaseModel):
    id: int
    userid: int
    timecreated: int
    timemodified: int
    status: str
    groupid: int
    plugins: List[SubmissionPluginInfo] = []


class AssignmentSubmissions(BaseModel):
    assignmentid: int
    submissions: List[Submission] = []


class SubmissionsResponse(BaseModel):
    assignments: List[AssignmentSubmissions] = []
    warnings: List[ItemWarning] = []


# User flags
class UserFlag(BaseModel):
    id: int
    userid: int
    locked: int
    mailed: int
    extensionduedate: int
    workflowstate: Optional[str] = None
    allocatedmarker: int


class AssignmentUserFlags(BaseModel):
    assignmentid: int
    userflags: List[UserFlag] = []


class UserFlagsResponse(BaseModel):
    assignments: List[AssignmentUserFlags] = []
    warnings: List[ItemWarning] = []


# User mappings (blind marking)
class UserMapping(BaseModel):
    id: int
    userid: int


class AssignmentUserMappings(BaseModel):
    assignmentid: int
    mappings: List[UserMapping] = []


class UserMappingsResponse(BaseModel):
    assignments: List[AssignmentUserMappings] = []
    warnings: List[ItemWarning] = []


# Assignments by course
class AssignmentConfig(BaseModel):
    id: int
    assignment: int
    plugin: str
    subtype: str
    name: str
    value: Optional[str] = None


class Assignment(BaseModel):
    id: int
    cmid: int
    course: int
    name: str
    nosubmissions: int
    submissiondrafts: int
    sendnotifications: int
    sendlatenotifications: int
    duedate: int
    allowsubmissionsfromdate: int
    grade: int
    timemodified: int
    completionsubmit: int
    cutoffdate: int
    teamsubmission: int
    requireallteammemberssubmit: int
    teamsubmissiongroupingid: int
    blindmarking: int
    revealidentities: int
    attemptreopenmethod: str
    maxattempts: int
    markingworkflow: int
    markingallocation: int
    requiresubmissionstatement: int
    configs: List[AssignmentConfig] = []


class Course(BaseModel):
    id: int
    fullname: str
    shortname: str
    timemodified: int
    assignments: List[Assignment] = []


class CoursesResponse(BaseModel):
    courses: List[Course] = []
    warnings: List[ItemWarning] = []
