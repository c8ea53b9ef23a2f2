"""Core models for request/response handling."""

from enum import StrEnum
from typing import Any

from formdata.models.form import FieldMap, FileMap, FileUpload


class InputKind(StrEnum):
    """Request body classification, by declared content type."""

    URLENCODED = "application/x-www-form-urlencoded"
    MULTIPART = "multipart/form-data"
    JSON = "application/json"
    UNKNOWN = "unknown"

    @classmethod
    def from_content_type(cls, main_value: str | None) -> "InputKind":
        try:
            return cls((main_value or "").lower())
        except ValueError:
            return cls.UNKNOWN


class FormInput:
    """Parsed request input injected into handlers: fields and uploaded files."""

    __slots__ = ("fields", "files")

    def __init__(self, fields: dict[str, Any] | None = None, files: FileMap | None = None) -> None:
        self.fields: FieldMap | dict[str, Any] = fields or {}
        self.files: FileMap = files or {}

    def __bool__(self) -> bool:
        return bool(self.fields or self.files)

    def __repr__(self) -> str:
        return f"FormInput(fields={self.fields!r}, files={self.files!r})"

    def get(self, name: str, default: Any = None) -> Any:
        """Get a field value by name."""
        return self.fields.get(name, default)

    def file(self, name: str) -> FileUpload | list[FileUpload] | None:
        """Get an upload (or list of uploads) by field name."""
        return self.files.get(name)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        files = {
            name: [item.model_dump(mode="json") for item in upload]
            if isinstance(upload, list)
            else upload.model_dump(mode="json")
            for name, upload in self.files.items()
        }
        return {"fields": self.fields, "files": files}
