"""Split a raw multipart/form-data body into structured parts."""

import re

from formdata.core.logger import LogIcon, logger
from formdata.core.settings import settings as st
from formdata.models.form import FormDataSet, Part
from formdata.multipart.errors import BoundaryNotFoundError
from formdata.multipart.headers import parse_header_line

_LINE_BREAK = re.compile(rb"\r?\n")
_BLANK_LINE = re.compile(rb"\r?\n\r?\n")
_HEADER_TERMINATOR = b"\r\n\r\n"
# space, tab, line breaks, NUL and vertical tab; form feed is kept
_TRIM = b" \t\n\r\x00\x0b"


def find_boundary(body: bytes) -> str | None:
    """Return the boundary declared by the first line of the body."""
    first_line = _LINE_BREAK.split(body, maxsplit=1)[0].strip(_TRIM)
    if not first_line.startswith(b"--") or len(first_line) == 2:
        return None
    return first_line[2:].decode("latin-1")


def split_parts(body: bytes, boundary: str) -> list[bytes]:
    """Cut the body on ``--<boundary>`` into raw, still unparsed segments.

    The segment after the closing ``--<boundary>--`` marker is always dropped.
    """
    delimiter = b"--" + boundary.encode("latin-1")
    segments = [segment for segment in body.split(delimiter) if segment.strip(_TRIM)]
    return segments[:-1]


def parse_part(raw: bytes, charset: str | None = None) -> Part:
    """Parse one raw segment into headers and body.

    Raises MalformedHeaderError for a header line without ``:``.
    """
    charset = charset or st.FORM_CHARSET
    head, body = _BLANK_LINE.split(raw.strip(_TRIM) + _HEADER_TERMINATOR, maxsplit=1)

    part = Part(body=body.strip(_TRIM))
    for line in _LINE_BREAK.split(head):
        name, value = parse_header_line(line.decode(charset, "replace"))
        part.headers[name] = value

    return part


def parse_form_data(body: bytes, boundary: str | None = None) -> FormDataSet:
    """Parse a whole multipart body into parts, in body order.

    The boundary is detected from the body when not given. Any parse error
    aborts the whole body.
    """
    boundary = boundary or find_boundary(body)
    if boundary is None:
        raise BoundaryNotFoundError("Multipart body does not start with a boundary line")

    parts = [parse_part(raw) for raw in split_parts(body, boundary)]
    logger.debug("Parsed multipart body", icon=LogIcon.PARSE, parts=len(parts), size=len(body))
    return parts
