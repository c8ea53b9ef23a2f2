"""Build field and file maps from parsed parts.

Names containing ``[]`` collect their values into a list under the name with
``[]`` removed. Only one level is supported: ``a[b][]`` becomes the key
``a[b]``.
"""

from collections.abc import Iterable
from typing import TypeVar

from formdata.core.logger import LogIcon, logger
from formdata.core.settings import settings as st
from formdata.models.form import FieldMap, FileMap, FormDataSet

ARRAY_MARKER = "[]"

T = TypeVar("T")


def _collect(target: dict[str, T | list[T]], name: str, value: T) -> None:
    if ARRAY_MARKER not in name:
        target[name] = value
        return

    key = name.replace(ARRAY_MARKER, "")
    current = target.get(key)
    if isinstance(current, list):
        current.append(value)
    else:
        target[key] = [value]


def build_field_map(pairs: Iterable[tuple[str, str]]) -> FieldMap:
    """Build a field map from ``(name, value)`` pairs, in order."""
    fields: FieldMap = {}
    for name, value in pairs:
        _collect(fields, name, value)
    return fields


def assemble_fields(parts: FormDataSet, charset: str | None = None) -> FieldMap:
    """Field map of every part without a ``filename`` attribute."""
    charset = charset or st.FORM_CHARSET
    pairs = []
    for part in parts:
        if part.is_file:
            continue
        if part.name is None:
            logger.warning("Skipping field part without a name", icon=LogIcon.WARNING)
            continue
        pairs.append((part.name, part.body.decode(charset, "replace")))
    return build_field_map(pairs)


def assemble_files(parts: FormDataSet) -> FileMap:
    """File map of every part that carries a processed upload."""
    files: FileMap = {}
    for part in parts:
        if part.file is None:
            continue
        if part.name is None:
            logger.warning("Skipping file part without a name", icon=LogIcon.WARNING)
            continue
        _collect(files, part.name, part.file)
    return files
