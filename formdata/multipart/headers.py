"""Grammar for ``value; key=value; key="value"`` header values."""

from beartype import beartype

from formdata.models.form import HeaderValue
from formdata.multipart.errors import MalformedHeaderError


def _unquote(value: str) -> str:
    # one layer only, no escape handling
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def parse_header_value(value: str | None) -> HeaderValue:
    """Parse a Content-Disposition or Content-Type header value.

    Bare pieces become the main value (the last one wins), ``key=value`` pieces
    become attributes (later keys overwrite earlier ones). Quoted ``;`` and
    ``=`` are not honoured.
    """
    result = HeaderValue()
    if not value:
        return result

    for piece in value.split(";"):
        piece = piece.strip()
        if not piece:
            continue
        key, sep, raw = piece.partition("=")
        if not sep:
            result.main_value = piece
            continue
        result.attributes[key.strip()] = _unquote(raw.strip())

    return result


def parse_header_field(value: str | None, name: str) -> str | None:
    """Return a single field of a header value, or None if absent."""
    return parse_header_value(value).get(name)


@beartype
def parse_header_line(line: str) -> tuple[str, HeaderValue]:
    """Split ``Name: value`` and parse the value. The name is kept as sent."""
    name, sep, raw = line.partition(":")
    if not sep:
        raise MalformedHeaderError(line)
    return name, parse_header_value(raw)
