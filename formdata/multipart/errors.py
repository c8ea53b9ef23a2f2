"""Parse-level failures of the multipart parser.

Upload problems are never raised, they are recorded on ``FileUpload.error``.
"""


class MultipartError(ValueError):
    """Base class for all multipart parse errors."""


class BoundaryNotFoundError(MultipartError):
    """The body does not start with a ``--<boundary>`` line."""


class MalformedHeaderError(MultipartError):
    """A part header line has no ``name: value`` separator."""

    def __init__(self, line: str) -> None:
        super().__init__(f"Malformed part header line: {line!r}")
        self.line = line
