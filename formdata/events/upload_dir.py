"""Upload directory lifespan event."""

import shutil
import tempfile
from pathlib import Path

from formdata.core.lifespan import BaseEvent
from formdata.core.logger import LogIcon, logger
from formdata.core.settings import settings as st
from formdata.multipart.materializer import TEMP_PREFIX, use_upload_dir


def prepare_upload_dir(tmp_dir: str | None) -> Path | None:
    """Create a private upload directory for this process under ``tmp_dir``.

    None leaves uploads disabled. Other processes sharing ``tmp_dir`` get their
    own directory, so removing this one never touches their files.
    """
    if not tmp_dir:
        logger.warning("No upload directory configured, uploads will fail", icon=LogIcon.STORAGE)
        return None
    base = Path(tmp_dir)
    base.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix=TEMP_PREFIX, dir=base))


def remove_upload_dir(path: Path) -> None:
    """Remove a process upload directory with whatever is left in it."""
    shutil.rmtree(path, ignore_errors=True)


class UploadDirEvent(BaseEvent[Path | None]):
    """Gives the process its own upload directory and removes it on shutdown."""

    name = "upload_dir"

    async def startup(self) -> Path | None:
        path = prepare_upload_dir(st.UPLOAD_TMP_DIR)
        if path is not None:
            use_upload_dir(path)
            logger.info("Upload directory ready", icon=LogIcon.STORAGE, path=str(path))
        return path

    async def shutdown(self, instance: Path | None) -> None:
        if instance is None:
            return
        use_upload_dir(None)
        remove_upload_dir(instance)
        logger.info("Removed upload directory", icon=LogIcon.CLEANUP, path=str(instance))
