import json
import shutil
import threading
from pathlib import Path
from typing import Dict, List, Optional

from infra.storage.errors import ObjectNotFoundError, RepositoryError
from infra.storage.object_storage import ObjectStorage, safe_identifier


class Repository:
    """Filesystem repository rooted at storage_root; objects live under objects/."""
    OBJECTS_DIRNAME = "objects"

    def __init__(self, storage_root: Optional[Path] = None):
        if storage_root is None:
            from infra.config import get_storage_root
            storage_root = get_storage_root()

        self.storage_root = Path(storage_root).expanduser()
        self.objects_dir = self.storage_root / self.OBJECTS_DIRNAME
        self.objects_dir.mkdir(parents=True, exist_ok=True)

        self._object_cache: Dict[str, ObjectStorage] = {}
        self._cache_lock = threading.Lock()

    def _storage_for(self, pid: str) -> ObjectStorage:
        with self._cache_lock:
            if pid not in self._object_cache:
                self._object_cache[pid] = ObjectStorage(pid, self.objects_dir)
            return self._object_cache[pid]

    def has_object(self, pid: str) -> bool:
        return self._storage_for(pid).exists

    def get_object(self, pid: str) -> ObjectStorage:
        obj = self._storage_for(pid)
        if not obj.exists:
            raise ObjectNotFoundError(pid)

        recorded_pid = obj.load_manifest().get("pid")
        if recorded_pid != pid:
            raise RepositoryError(
                f"{obj.object_dir} holds {recorded_pid}, not {pid}"
            )
        return obj

    def ingest_object(
        self,
        pid: str,
        label: Optional[str] = None,
        models: Optional[List[str]] = None
    ) -> ObjectStorage:
        if ':' not in pid:
            raise ValueError(f"Invalid pid {pid!r}: expected namespace:id")

        obj = self._storage_for(pid)
        obj.create(label=label, models=models)
        return obj

    def list_pids(self) -> List[str]:
        pids = []

        for item in self.objects_dir.iterdir():
            if not item.is_dir() or item.name.startswith('.'):
                continue

            manifest_file = item / ObjectStorage.MANIFEST_FILENAME
            if not manifest_file.exists():
                continue

            try:
                with open(manifest_file, 'r') as f:
                    pid = json.load(f).get("pid")
            except (OSError, json.JSONDecodeError):
                continue

            if pid and safe_identifier(pid) == item.name:
                pids.append(pid)

        return sorted(pids)

    def purge_object(self, pid: str) -> bool:
        obj = self._storage_for(pid)
        if not obj.exists:
            return False

        obj.close_loggers()
        shutil.rmtree(obj.object_dir)
        with self._cache_lock:
            self._object_cache.pop(pid, None)
        return True
