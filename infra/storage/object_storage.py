import json
import os
import re
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from infra.storage.datastream import Datastream
from infra.storage.errors import ObjectNotFoundError, RepositoryError
from infra.storage.relationships import JsonRelationshipStore


def safe_identifier(identifier: str) -> str:
    """Filesystem-safe form of a pid or dsid ("islandora:12" -> "islandora_12")."""
    return re.sub(r'[^A-Za-z0-9]', '_', identifier)


class ObjectStorage:
    """One repository object: manifest, datastream content and RELS-EXT.

    Layout:
        {objects_dir}/{safe pid}/object.json
        {objects_dir}/{safe pid}/rels-ext.json
        {objects_dir}/{safe pid}/datastreams/{DSID}{ext}
        {objects_dir}/{safe pid}/logs/{stage}.jsonl
    """
    MANIFEST_FILENAME = "object.json"
    RELS_FILENAME = "rels-ext.json"

    def __init__(self, pid: str, objects_dir: Path):
        self._pid = pid
        self._object_dir = Path(objects_dir) / safe_identifier(pid)

        self._manifest_lock = threading.RLock()
        self._relationships = JsonRelationshipStore(self._object_dir / self.RELS_FILENAME)
        self._loggers: Dict[str, Any] = {}

    @property
    def pid(self) -> str:
        return self._pid

    @property
    def object_dir(self) -> Path:
        return self._object_dir

    @property
    def datastream_dir(self) -> Path:
        return self._object_dir / "datastreams"

    @property
    def log_dir(self) -> Path:
        return self._object_dir / "logs"

    @property
    def manifest_file(self) -> Path:
        return self._object_dir / self.MANIFEST_FILENAME

    @property
    def exists(self) -> bool:
        return self.manifest_file.exists()

    @property
    def relationships(self) -> JsonRelationshipStore:
        return self._relationships

    def logger(self, stage: str):
        """Get the JSONL logger for a stage of this object, creating lazily."""
        if stage not in self._loggers:
            from infra.pipeline.logger import create_logger
            log_level = "DEBUG" if os.environ.get("DEBUG", "").lower() in ("true", "1", "yes") else "INFO"
            self._loggers[stage] = create_logger(
                self.pid,
                stage,
                log_dir=self.log_dir,
                level=log_level,
            )
        return self._loggers[stage]

    def close_loggers(self):
        for logger in self._loggers.values():
            logger.close()
        self._loggers.clear()

    def _load_manifest_unsafe(self) -> Dict[str, Any]:
        if not self.manifest_file.exists():
            raise ObjectNotFoundError(self.pid)

        with open(self.manifest_file, 'r') as f:
            return json.load(f)

    def _save_manifest_unsafe(self, manifest: Dict[str, Any]):
        self._object_dir.mkdir(parents=True, exist_ok=True)
        temp_file = self.manifest_file.with_suffix('.json.tmp')
        with open(temp_file, 'w') as f:
            json.dump(manifest, f, indent=2)
        temp_file.replace(self.manifest_file)

    def load_manifest(self) -> Dict[str, Any]:
        with self._manifest_lock:
            return self._load_manifest_unsafe()

    def create(self, label: Optional[str] = None, models: Optional[List[str]] = None):
        with self._manifest_lock:
            if self.exists:
                existing = self._load_manifest_unsafe()
                raise RepositoryError(
                    f"Cannot create {self.pid}: {self.object_dir} already holds {existing.get('pid')}"
                )
            self._save_manifest_unsafe({
                "pid": self.pid,
                "label": label or self.pid,
                "models": models or [],
                "created": datetime.now().isoformat(),
                "datastreams": {},
            })

    @property
    def label(self) -> str:
        return self.load_manifest().get("label", self.pid)

    @property
    def models(self) -> List[str]:
        return self.load_manifest().get("models", [])

    def datastream(self, dsid: str) -> Optional[Datastream]:
        record = self.load_manifest()["datastreams"].get(dsid)
        if record is None:
            return None
        return Datastream.from_record(self, dsid, record)

    def __contains__(self, dsid: str) -> bool:
        return self.datastream(dsid) is not None

    def list_datastreams(self) -> List[Datastream]:
        records = self.load_manifest()["datastreams"]
        return [Datastream.from_record(self, dsid, record) for dsid, record in sorted(records.items())]

    def construct_datastream(self, dsid: str, control_group: str = "M") -> Datastream:
        """New, not yet ingested datastream bound to this object."""
        if not re.match(r'^[A-Za-z][A-Za-z0-9._-]*$', dsid):
            raise ValueError(f"Invalid datastream id: {dsid!r}")
        return Datastream(self, dsid, control_group=control_group)

    def ingest_datastream(self, datastream: Datastream) -> Datastream:
        if datastream.obj is not self:
            raise RepositoryError(f"{datastream!r} belongs to a different object")

        with self._manifest_lock:
            manifest = self._load_manifest_unsafe()
            datastream.commit_staged_content()
            manifest["datastreams"][datastream.id] = datastream.to_record()
            self._save_manifest_unsafe(manifest)
        return datastream

    def purge_datastream(self, dsid: str) -> bool:
        with self._manifest_lock:
            manifest = self._load_manifest_unsafe()
            record = manifest["datastreams"].pop(dsid, None)
            if record is None:
                return False

            datastream = Datastream.from_record(self, dsid, record)
            if datastream.has_content:
                datastream.content_path.unlink()
            self._save_manifest_unsafe(manifest)
            return True

    def write_datastream(
        self,
        dsid: str,
        file_path: Path,
        mimetype: str,
        label: Optional[str] = None,
        control_group: str = "M",
        copy: bool = True,
    ) -> Datastream:
        """Create or replace a datastream from a local file, then delete that file.

        Repository errors propagate; nothing here reports success on failure.
        """
        file_path = Path(file_path)
        datastream = self.datastream(dsid) or self.construct_datastream(dsid, control_group=control_group)
        datastream.set_content_from_file(file_path, copy=copy)
        datastream.label = label or dsid
        datastream.mimetype = mimetype
        self.ingest_datastream(datastream)

        if file_path.exists():
            file_path.unlink()

        return datastream

    def __repr__(self) -> str:
        return f"ObjectStorage({self.pid})"
