"""Validate uploaded files and persist accepted ones to temporary storage.

Each file part is checked against an ordered rule table, the first failing rule
decides its ``UploadError``. Accepted files are written to a fresh temporary
file owned by the request's ``UploadScope`` and removed when the scope closes.
"""

import os
import tempfile
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType

from formdata.core.logger import LogIcon, logger
from formdata.core.settings import Settings
from formdata.core.settings import settings as st
from formdata.models.form import FieldMap, FileMap, FileUpload, FormDataSet, Part, UploadError
from formdata.multipart.assembler import assemble_fields, assemble_files
from formdata.multipart.parser import parse_form_data
from formdata.multipart.sizes import parse_size

TEMP_PREFIX = "formdata-upload-"

# Per-process upload directory, set by the upload_dir lifespan event
_process_upload_dir: str | None = None


def use_upload_dir(path: str | Path | None) -> None:
    """Route uploads of this process into ``path``. None falls back to settings."""
    global _process_upload_dir
    _process_upload_dir = str(path) if path is not None else None


def current_upload_dir(settings: Settings | None = None) -> str | None:
    """Directory uploads are written to: the process directory, else the configured one."""
    if settings is None and _process_upload_dir is not None:
        return _process_upload_dir
    return (settings or st).UPLOAD_TMP_DIR


@dataclass(frozen=True, slots=True)
class UploadLimits:
    """Server-side upload configuration for one request."""

    max_filesize: int | None
    tmp_dir: str | None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "UploadLimits":
        return cls(
            max_filesize=parse_size((settings or st).UPLOAD_MAX_FILESIZE),
            tmp_dir=current_upload_dir(settings),
        )


class UploadScope:
    """Owns the temporary files of one request and removes them on exit."""

    def __init__(self) -> None:
        self._stack = ExitStack()
        self._paths: list[str] = []

    @property
    def paths(self) -> list[str]:
        return list(self._paths)

    def register(self, path: str) -> None:
        """Schedule removal of ``path`` for when the scope closes."""
        self._paths.append(path)
        self._stack.callback(_remove_quietly, path)

    def close(self) -> None:
        self._stack.close()
        self._paths.clear()

    def __enter__(self) -> "UploadScope":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _remove_quietly(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as ex:
        logger.warning("Could not remove upload", icon=LogIcon.CLEANUP, path=path, error=str(ex))


@dataclass(frozen=True, slots=True)
class UploadRule:
    """A check that fails the upload with ``error`` when ``violated`` holds."""

    error: UploadError
    violated: Callable[[FileUpload, int | None, UploadLimits], bool]


UPLOAD_RULES: tuple[UploadRule, ...] = (
    UploadRule(
        UploadError.INI_SIZE,
        lambda file, _, limits: limits.max_filesize is not None and file.size > limits.max_filesize,
    ),
    UploadRule(
        UploadError.FORM_SIZE,
        lambda file, declared, _: declared is not None and file.size > declared,
    ),
    UploadRule(
        UploadError.NO_FILE,
        lambda file, _, __: file.declared_name == "" and file.size == 0,
    ),
    UploadRule(
        UploadError.NO_TMP_DIR,
        lambda _, __, limits: not limits.tmp_dir or not os.path.isdir(limits.tmp_dir),
    ),
)


def check_upload(file: FileUpload, max_declared_size: int | None, limits: UploadLimits) -> UploadError:
    """Return the error of the first violated rule, or OK."""
    for rule in UPLOAD_RULES:
        if rule.violated(file, max_declared_size, limits):
            return rule.error
    return UploadError.OK


def _persist(body: bytes, tmp_dir: str, scope: UploadScope) -> str | None:
    try:
        fd, path = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=tmp_dir)
    except OSError as ex:
        logger.error("Could not create upload file", icon=LogIcon.ERROR, tmp_dir=tmp_dir, error=str(ex))
        return None

    scope.register(path)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(body)
    except OSError as ex:
        logger.error("Could not write upload file", icon=LogIcon.ERROR, path=path, error=str(ex))
        return None
    return path


def process_file(
    part: Part,
    max_declared_size: int | None = None,
    *,
    scope: UploadScope,
    limits: UploadLimits | None = None,
) -> FileUpload:
    """Attach a ``FileUpload`` to a file part, persisting it when every check passes."""
    limits = limits or UploadLimits.from_settings()
    file = FileUpload(
        declared_name=part.filename or "",
        declared_type=part.content_type.main_value or "",
        size=len(part.body),
    )
    part.file = file

    file.error = check_upload(file, max_declared_size, limits)
    if file.error is UploadError.OK:
        path = _persist(part.body, limits.tmp_dir, scope)
        if path is None:
            file.error = UploadError.CANT_WRITE
        else:
            file.storage_path = path

    log = logger.info if file.ok else logger.warning
    log(
        "Processed upload",
        icon=LogIcon.UPLOAD,
        field=part.name,
        declared_name=file.declared_name,
        size=file.size,
        error=file.error.name,
    )
    return file


def declared_max_size(fields: FieldMap) -> int | None:
    """Client-declared size limit from the ``MAX_FILE_SIZE`` field, if usable."""
    value = fields.get(st.MAX_FILE_SIZE_FIELD)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return int(value) if value.isdecimal() else None


def process_files(
    parts: FormDataSet,
    *,
    scope: UploadScope,
    limits: UploadLimits | None = None,
    fields: FieldMap | None = None,
) -> None:
    """Process every part that declares a ``filename``.

    ``fields`` is the already assembled field map, built from ``parts`` when not given.
    """
    limits = limits or UploadLimits.from_settings()
    if fields is None:
        fields = assemble_fields(parts)
    max_declared_size = declared_max_size(fields)
    for part in parts:
        if part.is_file:
            process_file(part, max_declared_size, scope=scope, limits=limits)


def parse_multipart(
    body: bytes,
    *,
    scope: UploadScope,
    limits: UploadLimits | None = None,
    boundary: str | None = None,
) -> tuple[FieldMap, FileMap]:
    """Run the whole pipeline and return the field and file maps."""
    parts = parse_form_data(body, boundary)
    fields = assemble_fields(parts)
    process_files(parts, scope=scope, limits=limits, fields=fields)
    return fields, assemble_files(parts)

