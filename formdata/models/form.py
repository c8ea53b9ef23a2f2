"""Form data models produced by the multipart parser."""

from dataclasses import dataclass, field
from enum import IntEnum

from pydantic import BaseModel


class UploadError(IntEnum):
    """Upload outcome codes, numbered like the runtime's native upload errors."""

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7


class FileUpload(BaseModel):
    """One candidate file from a multipart body."""

    declared_name: str
    declared_type: str = ""
    size: int = 0
    storage_path: str | None = None
    error: UploadError = UploadError.OK

    @property
    def ok(self) -> bool:
        return self.error is UploadError.OK


@dataclass(slots=True)
class HeaderValue:
    """Parsed value of a semicolon-delimited header such as Content-Disposition."""

    main_value: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> str | None:
        """Return one field: ``main_value`` by that name, otherwise an attribute."""
        if name == "main_value":
            return self.main_value
        return self.attributes.get(name)

    def __bool__(self) -> bool:
        return self.main_value is not None or bool(self.attributes)


@dataclass(slots=True)
class Part:
    """One multipart segment."""

    headers: dict[str, HeaderValue] = field(default_factory=dict)
    body: bytes = b""
    file: FileUpload | None = None

    @property
    def disposition(self) -> HeaderValue:
        return self.headers.get("Content-Disposition") or HeaderValue()

    @property
    def content_type(self) -> HeaderValue:
        return self.headers.get("Content-Type") or HeaderValue()

    @property
    def name(self) -> str | None:
        return self.disposition.get("name")

    @property
    def filename(self) -> str | None:
        return self.disposition.get("filename")

    @property
    def is_file(self) -> bool:
        return self.filename is not None


FormDataSet = list[Part]
FieldMap = dict[str, str | list[str]]
FileMap = dict[str, FileUpload | list[FileUpload]]
