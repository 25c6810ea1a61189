"""
Submission plugins known to the read API. Each plugin describes the file
areas and rich-text editor fields it stores per submission.
"""
from abc import ABC
from typing import Dict, List, Optional

from application.features.assignments.crud.record_store import RecordStore
from application.features.assignments.schemas import AssignmentConfig

SUBMISSION_SUBTYPE = "assignsubmission"
FORMAT_HTML = 1


class SubmissionPlugin(ABC):
    """Base plugin: no file areas, no editor fields."""

    type: str = ""
    name: str = ""
    subtype: str = SUBMISSION_SUBTYPE

    @property
    def component(self) -> str:
        return f"{self.subtype}_{self.type}"

    def get_file_areas(self) -> Dict[str, str]:
        return {}

    def get_editor_fields(self) -> Dict[str, str]:
        return {}

    def load_editor_record(self, store: RecordStore, submission_id: int) -> Optional[Dict]:
        """Row backing the editor fields of one submission, read once per submission."""
        return None

    def get_editor_text(self, record: Optional[Dict], name: str) -> str:
        return ""

    def get_editor_format(self, record: Optional[Dict], name: str) -> int:
        return FORMAT_HTML


class FileSubmissionPlugin(SubmissionPlugin):
    type = "file"
    name = "File submissions"

    def get_file_areas(self) -> Dict[str, str]:
        return {"submission_files": self.name}


class OnlineTextSubmissionPlugin(SubmissionPlugin):
    type = "onlinetext"
    name = "Online text"

    def get_file_areas(self) -> Dict[str, str]:
        return {"submissions_onlinetext": self.name}

    def get_editor_fields(self) -> Dict[str, str]:
        return {"onlinetext": "Online text submissions"}

    def load_editor_record(self, store: RecordStore, submission_id: int) -> Optional[Dict]:
        return store.get_onlinetext(submission_id)

    def get_editor_text(self, record: Optional[Dict], name: str) -> str:
        if name != "onlinetext" or not record:
            return ""
        return record["onlinetext"] or ""

    def get_editor_format(self, record: Optional[Dict], name: str) -> int:
        if name == "onlinetext" and record and record["onlineformat"] is not None:
            return int(record["onlineformat"])
        return FORMAT_HTML


# Display order of plugins in responses
SUBMISSION_PLUGINS = (FileSubmissionPlugin(), OnlineTextSubmissionPlugin())


def get_enabled_submission_plugins(configs: List[AssignmentConfig]) -> List[SubmissionPlugin]:
    """Plugins whose 'enabled' config is '1' in the given assignment configs."""
    enabled = {
        config.plugin
        for config in configs
        if config.subtype == SUBMISSION_SUBTYPE and config.name == "enabled" and config.value == "1"
    }
    return [plugin for plugin in SUBMISSION_PLUGINS if plugin.type in enabled]
