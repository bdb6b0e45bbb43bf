import mimetypes
from pathlib import Path
from typing import Optional

from infra.pipeline.logger import PipelineLogger
from infra.storage import ObjectStorage, RepositoryError, safe_identifier

from ..schemas import PageImage


MIME_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/tiff": ".tif",
    "image/png": ".png",
    "image/jp2": ".jp2",
    "image/gif": ".gif",
}


def extension_for_mimetype(mimetype: Optional[str]) -> str:
    if not mimetype:
        return ".bin"

    mimetype = mimetype.split(";")[0].strip().lower()
    if mimetype in MIME_EXTENSIONS:
        return MIME_EXTENSIONS[mimetype]
    return mimetypes.guess_extension(mimetype) or ".bin"


def scratch_name(pid: str, dsid: str, mimetype: Optional[str]) -> str:
    return f"{safe_identifier(pid)}_{safe_identifier(dsid)}{extension_for_mimetype(mimetype)}"


class SourceAcquirer:
    def __init__(self, scratch_dir: Path):
        self.scratch_dir = Path(scratch_dir)

    def acquire(
        self,
        obj: ObjectStorage,
        dsid: str,
        logger: PipelineLogger,
        scratch_dir: Optional[Path] = None
    ) -> Optional[PageImage]:
        """Copy a datastream's bytes into the scratch directory (or scratch_dir).

        Returns None (after logging) when the datastream is missing or the
        copy fails; callers treat that as fatal for the run.
        """
        datastream = obj.datastream(dsid)
        if datastream is None:
            logger.error(f"Source datastream {dsid} missing on {obj.pid}", dsid=dsid)
            return None

        local_path = Path(scratch_dir or self.scratch_dir) / scratch_name(obj.pid, dsid, datastream.mimetype)

        try:
            datastream.get_content(local_path)
        except (OSError, RepositoryError) as e:
            logger.error(
                f"Could not fetch {dsid} from {obj.pid}",
                dsid=dsid,
                error=str(e)
            )
            if local_path.exists():
                local_path.unlink()
            return None

        if not local_path.exists():
            logger.error(f"Fetched {dsid} but {local_path} is not readable", dsid=dsid)
            return None

        logger.debug(f"Fetched {dsid} to {local_path}", dsid=dsid)
        return PageImage(path=local_path.resolve())
