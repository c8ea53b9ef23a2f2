"""Test fixtures for formdata-api unit tests."""

from dataclasses import dataclass, field

import pytest

from formdata.core.lifespan import State
from formdata.multipart.materializer import UploadLimits, UploadScope


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request."""

    _data: dict = field(default_factory=dict)

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key.lower(), default)

    def set(self, key: str, value: str) -> None:
        self._data[key.lower()] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]


@dataclass
class MockRequest:
    """Mock Request object for Robyn."""

    body: bytes | str = b""
    headers: MockHeaders = field(default_factory=MockHeaders)
    method: str = "GET"
    path: str = "/"
    form_data: dict = field(default_factory=dict)


# -----------------------------------------------------------------------------
# Multipart helpers
# -----------------------------------------------------------------------------


def build_multipart(boundary: str, *parts: tuple[str, bytes]) -> bytes:
    """Build a multipart body from ``(header block, body)`` pairs."""
    chunks = []
    for headers, body in parts:
        chunks.append(f"--{boundary}\r\n{headers}\r\n\r\n".encode() + body + b"\r\n")
    chunks.append(f"--{boundary}--\r\n".encode())
    return b"".join(chunks)


def field_part(name: str, value: bytes) -> tuple[str, bytes]:
    return f'Content-Disposition: form-data; name="{name}"', value


def file_part(name: str, filename: str, content: bytes, content_type: str = "text/plain") -> tuple[str, bytes]:
    return (
        f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\nContent-Type: {content_type}',
        content,
    )


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_state() -> State:
    """Create a test state container."""
    return State()


@pytest.fixture
def global_dependencies(test_state: State) -> dict:
    """Setup global dependencies for tests."""
    yield {"state": test_state}
    test_state.clear()


@pytest.fixture
def upload_scope():
    """Upload scope closed at the end of the test."""
    with UploadScope() as scope:
        yield scope


@pytest.fixture
def limits(tmp_path) -> UploadLimits:
    """Generous limits writing into a per-test directory."""
    return UploadLimits(max_filesize=1024 * 1024, tmp_dir=str(tmp_path))


@pytest.fixture
def make_mock_request():
    """Factory fixture to create mock requests."""

    def _make(
        body: bytes | str = b"",
        method: str = "PUT",
        content_type: str | None = None,
        form_data: dict | None = None,
    ) -> MockRequest:
        headers = MockHeaders()
        if content_type:
            headers.set("content-type", content_type)
        return MockRequest(body=body, headers=headers, method=method, form_data=form_data or {})

    return _make
