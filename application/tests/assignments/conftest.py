import os
import sqlite3

import pytest

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-assignment-read-api-0123456789")

from fastapi.testclient import TestClient

from application.app import application
from application.database.mssql_connection import get_db_connection
from application.features.auth.jwt_handler import create_jwt_token

SCHEMA = """
CREATE TABLE modules (id INTEGER PRIMARY KEY, name TEXT NOT NULL);
CREATE TABLE courses (
    id INTEGER PRIMARY KEY, fullname TEXT, shortname TEXT, sortorder INTEGER, timemodified INTEGER
);
CREATE TABLE course_modules (
    id INTEGER PRIMARY KEY, course INTEGER, module INTEGER, instance INTEGER
);
CREATE TABLE user_enrolments (
    id INTEGER PRIMARY KEY, userid INTEGER, courseid INTEGER, role TEXT, status INTEGER DEFAULT 0
);
CREATE TABLE assign (
    id INTEGER PRIMARY KEY, course INTEGER, name TEXT,
    nosubmissions INTEGER DEFAULT 0, submissiondrafts INTEGER DEFAULT 0,
    sendnotifications INTEGER DEFAULT 0, sendlatenotifications INTEGER DEFAULT 0,
    duedate INTEGER DEFAULT 0, allowsubmissionsfromdate INTEGER DEFAULT 0, grade INTEGER DEFAULT 100,
    timemodified INTEGER DEFAULT 0, completionsubmit INTEGER DEFAULT 0, cutoffdate INTEGER DEFAULT 0,
    teamsubmission INTEGER DEFAULT 0, requireallteammemberssubmit INTEGER DEFAULT 0,
    teamsubmissiongroupingid INTEGER DEFAULT 0, blindmarking INTEGER DEFAULT 0,
    revealidentities INTEGER DEFAULT 0, attemptreopenmethod TEXT DEFAULT 'none',
    maxattempts INTEGER DEFAULT -1, markingworkflow INTEGER DEFAULT 0,
    markingallocation INTEGER DEFAULT 0, requiresubmissionstatement INTEGER DEFAULT 0
);
CREATE TABLE assign_plugin_config (
    id INTEGER PRIMARY KEY, assignment INTEGER, plugin TEXT, subtype TEXT, name TEXT, value TEXT
);
CREATE TABLE assign_grades (
    id INTEGER PRIMARY KEY, assignment INTEGER, userid INTEGER, timecreated INTEGER,
    timemodified INTEGER, grader INTEGER, grade REAL, attemptnumber INTEGER
);
CREATE TABLE assign_submission (
    id INTEGER PRIMARY KEY, assignment INTEGER, userid INTEGER, timecreated INTEGER,
    timemodified INTEGER, status TEXT, groupid INTEGER DEFAULT 0, attemptnumber INTEGER
);
CREATE TABLE assign_user_flags (
    id INTEGER PRIMARY KEY, assignment INTEGER, userid INTEGER, locked INTEGER, mailed INTEGER,
    extensionduedate INTEGER, workflowstate TEXT, allocatedmarker INTEGER
);
CREATE TABLE assign_user_mapping (id INTEGER PRIMARY KEY, assignment INTEGER, userid INTEGER);
CREATE TABLE files (
    id INTEGER PRIMARY KEY, contextid INTEGER, component TEXT, filearea TEXT, itemid INTEGER,
    filepath TEXT, filename TEXT, timemodified INTEGER
);
CREATE TABLE assignsubmission_onlinetext (
    id INTEGER PRIMARY KEY, assignment INTEGER, submission INTEGER, onlinetext TEXT, onlineformat INTEGER
);
"""

# Users
ADVISOR_ID = 1    # Advisor in course 10, Peer Tutor in course 20, suspended in course 30
STUDENT_ID = 2    # Student in course 10
ADMIN_ID = 3      # site admin, no enrolments

SEED = """
INSERT INTO modules (id, name) VALUES (1, 'assign'), (2, 'quiz');

INSERT INTO courses (id, fullname, shortname, sortorder, timemodified) VALUES
    (10, 'Biology 101', 'BIO101', 2, 1000),
    (20, 'Chemistry 101', 'CHEM101', 1, 1100),
    (30, 'Physics 101', 'PHYS101', 3, 1200);

INSERT INTO course_modules (id, course, module, instance) VALUES
    (100, 10, 1, 5),
    (101, 10, 1, 6),
    (102, 20, 1, 7),
    (109, 30, 1, 9),
    (200, 10, 2, 8);

INSERT INTO user_enrolments (id, userid, courseid, role, status) VALUES
    (1, 1, 10, 'Advisor', 0),
    (2, 1, 20, 'Peer Tutor', 0),
    (3, 1, 30, 'Advisor', 1),
    (4, 2, 10, 'Student', 0);

INSERT INTO assign (id, course, name, duedate, blindmarking, attemptreopenmethod, maxattempts) VALUES
    (5, 10, 'Cell structure essay', 5000, 1, 'manual', 3),
    (6, 10, 'Lab report', 6000, 0, 'none', -1),
    (7, 20, 'Titration worksheet', 7000, 0, 'none', -1),
    (9, 30, 'Kinematics problems', 9000, 0, 'none', -1);

INSERT INTO assign_plugin_config (id, assignment, plugin, subtype, name, value) VALUES
    (1, 5, 'file', 'assignsubmission', 'enabled', '1'),
    (2, 5, 'file', 'assignsubmission', 'maxfilesubmissions', '3'),
    (3, 5, 'onlinetext', 'assignsubmission', 'enabled', '1'),
    (4, 7, 'onlinetext', 'assignsubmission', 'enabled', '0'),
    (5, 7, 'comments', 'assignfeedback', 'enabled', '1');

INSERT INTO assign_grades (id, assignment, userid, timecreated, timemodified, grader, grade, attemptnumber) VALUES
    (1, 5, 42, 900, 1000, 1, 50, 0),
    (2, 5, 43, 1400, 1500, 1, 60, 0),
    (3, 5, 42, 1900, 2000, 1, 75.5, 1),
    (4, 7, 42, 1100, 1200, 1, 80, 0),
    (5, 9, 42, 1300, 1300, 1, 90, 0);

INSERT INTO assign_submission (id, assignment, userid, timecreated, timemodified, status, groupid, attemptnumber) VALUES
    (10, 5, 42, 900, 1000, 'reopened', 0, 0),
    (11, 5, 42, 1900, 2000, 'submitted', 0, 1),
    (12, 7, 43, 1400, 1500, 'draft', 0, 0);

INSERT INTO files (id, contextid, component, filearea, itemid, filepath, filename, timemodified) VALUES
    (1, 100, 'assignsubmission_file', 'submission_files', 11, '/', '.', 1),
    (2, 100, 'assignsubmission_file', 'submission_files', 11, '/', 'essay.pdf', 5),
    (3, 100, 'assignsubmission_file', 'submission_files', 11, '/drafts/', 'notes.txt', 3),
    (4, 100, 'assignsubmission_file', 'submission_files', 10, '/', 'old.pdf', 1);

INSERT INTO assignsubmission_onlinetext (id, assignment, submission, onlinetext, onlineformat) VALUES
    (1, 5, 11, '<p>Mitochondria are the powerhouse of the cell.</p>', 1);

INSERT INTO assign_user_flags (id, assignment, userid, locked, mailed, extensionduedate, workflowstate, allocatedmarker) VALUES
    (1, 5, 42, 0, 1, 0, 'inmarking', 1),
    (2, 5, 43, 1, 0, 5500, NULL, 0);

INSERT INTO assign_user_mapping (id, assignment, userid) VALUES
    (1, 5, 42),
    (2, 5, 43),
    (3, 7, 44);
"""


@pytest.fixture
def db_conn():
    # Path operations run in the framework threadpool
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    conn.executescript(SCHEMA)
    conn.executescript(SEED)
    yield conn
    conn.close()


@pytest.fixture
def client(db_conn):
    def override_get_db_connection():
        yield db_conn

    application.dependency_overrides[get_db_connection] = override_get_db_connection
    yield TestClient(application)
    application.dependency_overrides.clear()


def auth_headers(user_id: int, role_names):
    token = create_jwt_token({"user_id": user_id, "role_names": list(role_names)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_headers():
    return auth_headers


@pytest.fixture
def advisor_headers():
    return auth_headers(ADVISOR_ID, ["Advisor"])


@pytest.fixture
def student_headers():
    return auth_headers(STUDENT_ID, ["Student"])


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_ID, ["Admin"])
