import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING

from infra.storage.errors import DatastreamNotFoundError, RepositoryError

if TYPE_CHECKING:
    from infra.storage.object_storage import ObjectStorage


CONTROL_GROUPS = ("M", "X", "E", "R")


class Datastream:
    """A named, typed content stream attached to a repository object.

    Content set with set_content_from_file() is staged, not stored, until the
    owning object ingests the datastream.
    """
    def __init__(
        self,
        obj: 'ObjectStorage',
        dsid: str,
        control_group: str = "M",
        label: Optional[str] = None,
        mimetype: Optional[str] = None,
        filename: Optional[str] = None,
        size: Optional[int] = None,
        created: Optional[str] = None,
        modified: Optional[str] = None,
    ):
        if control_group not in CONTROL_GROUPS:
            raise ValueError(f"Unknown control group {control_group!r} (expected one of {CONTROL_GROUPS})")

        self.obj = obj
        self.id = dsid
        self.control_group = control_group
        self.label = label or dsid
        self.mimetype = mimetype or "application/octet-stream"
        self.filename = filename
        self.size = size
        self.created = created
        self.modified = modified

        self._staged_file: Optional[Path] = None
        self._staged_copy = True

    @property
    def content_path(self) -> Optional[Path]:
        if not self.filename:
            return None
        return self.obj.datastream_dir / self.filename

    @property
    def has_content(self) -> bool:
        path = self.content_path
        return path is not None and path.exists()

    @property
    def is_staged(self) -> bool:
        return self._staged_file is not None

    def get_content(self, local_path: Path) -> Path:
        """Copy stored content to local_path."""
        if not self.has_content:
            raise DatastreamNotFoundError(self.obj.pid, self.id)

        local_path = Path(local_path)
        local_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.content_path, local_path)
        return local_path

    def read_bytes(self) -> bytes:
        if not self.has_content:
            raise DatastreamNotFoundError(self.obj.pid, self.id)
        return self.content_path.read_bytes()

    def set_content_from_file(self, path: Path, copy: bool = True):
        """Stage content for the next ingest; copy=False moves the file instead."""
        path = Path(path)
        if not path.exists():
            raise RepositoryError(f"Cannot set {self.id} content: {path} does not exist")
        self._staged_file = path
        self._staged_copy = copy

    def commit_staged_content(self) -> None:
        """Store staged content under the object's datastream directory."""
        if self._staged_file is None:
            if self.has_content:
                return
            raise RepositoryError(f"Datastream {self.id} on {self.obj.pid} has no content")

        self.obj.datastream_dir.mkdir(parents=True, exist_ok=True)
        filename = f"{self.id}{self._staged_file.suffix}"
        target = self.obj.datastream_dir / filename
        temp_target = target.with_name(f".{filename}.tmp")

        previous = self.content_path
        try:
            if self._staged_copy:
                shutil.copyfile(self._staged_file, temp_target)
            else:
                shutil.move(str(self._staged_file), str(temp_target))
            temp_target.replace(target)
        except Exception:
            if temp_target.exists():
                temp_target.unlink()
            raise

        if previous is not None and previous != target and previous.exists():
            previous.unlink()

        now = datetime.now().isoformat()
        self.filename = filename
        self.size = target.stat().st_size
        self.created = self.created or now
        self.modified = now
        self._staged_file = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "control_group": self.control_group,
            "label": self.label,
            "mimetype": self.mimetype,
            "filename": self.filename,
            "size": self.size,
            "created": self.created,
            "modified": self.modified,
        }

    @classmethod
    def from_record(cls, obj: 'ObjectStorage', dsid: str, record: Dict[str, Any]) -> 'Datastream':
        return cls(
            obj,
            dsid,
            control_group=record.get("control_group", "M"),
            label=record.get("label"),
            mimetype=record.get("mimetype"),
            filename=record.get("filename"),
            size=record.get("size"),
            created=record.get("created"),
            modified=record.get("modified"),
        )

    def __repr__(self) -> str:
        return f"Datastream({self.obj.pid}/{self.id}, {self.mimetype})"
