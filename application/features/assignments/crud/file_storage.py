"""
Lookups against the platform's file metadata table. File contents live in
the platform's blob store and are never read here.
"""
from dataclasses import dataclass
from typing import List

from application.database.mssql_crud_helpers import fetch_all

DIRECTORY_FILENAME = "."


@dataclass(frozen=True)
class StoredFile:
    filepath: str
    filename: str

    @property
    def full_path(self) -> str:
        return self.filepath + self.filename


class FileStorage:
    def __init__(self, conn):
        self.conn = conn

    def get_area_files(self, context_id: int, component: str, filearea: str, item_id: int) -> List[StoredFile]:
        """Files of one area and item, oldest first, directory entries excluded."""
        query = """
        SELECT f.filepath, f.filename
        FROM files f
        WHERE f.contextid = ? AND f.component = ? AND f.filearea = ? AND f.itemid = ?
            AND f.filename <> ?
        ORDER BY f.timemodified, f.id
        """
        rows = fetch_all(self.conn, query, (context_id, component, filearea, item_id, DIRECTORY_FILENAME))
        return [StoredFile(**row) for row in rows]
