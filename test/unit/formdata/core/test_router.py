"""Tests for custom router with form input parsing and response handling."""

import inspect

import orjson
import pytest
from pydantic import BaseModel
from robyn import Response

from conftest import build_multipart, field_part, file_part
from formdata.core.router import (
    FORM_INPUT_ENDPOINTS,
    _create_method_wrapper,
    decode_json_fields,
    parse_endpoint_signature,
    parse_request_form,
    parse_request_input,
    parse_response,
    to_bytes,
)
from formdata.models.core import FormInput
from formdata.models.form import UploadError
from formdata.multipart.errors import BoundaryNotFoundError


# -----------------------------------------------------------------------------
# Test Models
# -----------------------------------------------------------------------------


class SampleModel(BaseModel):
    """Sample Pydantic model for testing."""

    name: str
    value: int


# -----------------------------------------------------------------------------
# parse_endpoint_signature Tests
# -----------------------------------------------------------------------------


class TestParseEndpointSignature:
    """Tests for parse_endpoint_signature function."""

    def test_form_input_annotation(self) -> None:
        """Verify FormInput annotations are detected."""

        async def handler(form: FormInput) -> None:
            pass

        assert parse_endpoint_signature(inspect.signature(handler)) == {"form"}

    def test_no_form_parameters(self) -> None:
        """Verify handlers without FormInput params return an empty set."""

        async def handler(request, global_dependencies, body: dict) -> None:
            pass

        assert parse_endpoint_signature(inspect.signature(handler)) == set()


# -----------------------------------------------------------------------------
# Body helpers Tests
# -----------------------------------------------------------------------------


class TestBodyHelpers:
    """Tests for to_bytes and decode_json_fields."""

    @pytest.mark.parametrize(
        ("data", "expected"),
        [(None, b""), ("héllo", "héllo".encode()), (b"raw", b"raw"), ([104, 105], b"hi")],
    )
    def test_to_bytes(self, data, expected: bytes) -> None:
        assert to_bytes(data) == expected

    @pytest.mark.parametrize(
        ("body", "expected"),
        [
            (b'{"a": 1}', {"a": 1}),
            (b'["x", "y"]', {"0": "x", "1": "y"}),
            (b'"text"', {"0": "text"}),
            (b"0", {}),
            (b"null", {}),
            (b"", {}),
            (b"{not json", {}),
        ],
    )
    def test_decode_json_fields(self, body: bytes, expected: dict) -> None:
        """Verify JSON bodies are cast into field maps."""
        assert decode_json_fields(body) == expected


# -----------------------------------------------------------------------------
# parse_request_input Tests
# -----------------------------------------------------------------------------


class TestParseRequestInput:
    """Tests for method and content type dispatch."""

    def test_put_urlencoded(self, upload_scope) -> None:
        """Verify urlencoded bodies are percent-decoded with array names."""
        form = parse_request_input(
            "PUT",
            "application/x-www-form-urlencoded",
            b"a=1&b%5B%5D=2&b%5B%5D=3&c=x+y%26z&empty=",
            scope=upload_scope,
        )

        assert form.fields == {"a": "1", "b": ["2", "3"], "c": "x y&z", "empty": ""}
        assert form.files == {}

    def test_patch_multipart(self, upload_scope, limits) -> None:
        """Verify multipart bodies go through the parser and materializer."""
        body = build_multipart("XYZ", field_part("field1", b"hello"), file_part("upload", "a.txt", b"hi"))

        form = parse_request_input(
            "PATCH", "Multipart/Form-Data; boundary=XYZ", body, scope=upload_scope, limits=limits
        )

        assert form.fields == {"field1": "hello"}
        assert form.files["upload"].error is UploadError.OK
        assert upload_scope.paths == [form.files["upload"].storage_path]

    def test_delete_json(self, upload_scope) -> None:
        """Verify JSON bodies become fields."""
        form = parse_request_input("DELETE", "application/json", b'{"id": 7}', scope=upload_scope)
        assert form.fields == {"id": 7}

    @pytest.mark.parametrize("content_type", [None, "", "text/plain"])
    def test_put_without_known_content_type(self, content_type, upload_scope) -> None:
        """Verify missing or unknown content types give empty input."""
        form = parse_request_input("PUT", content_type, b"a=1", scope=upload_scope)
        assert not form

    def test_get_ignores_body(self, upload_scope) -> None:
        """Verify methods without a body give empty input."""
        form = parse_request_input("GET", "application/x-www-form-urlencoded", b"a=1", scope=upload_scope)
        assert not form

    def test_post_uses_preparsed_fields(self, upload_scope) -> None:
        """Verify POST reads the runtime's pre-parsed fields."""
        form = parse_request_input(
            "post",
            "application/x-www-form-urlencoded",
            b"ignored=1",
            scope=upload_scope,
            preparsed_fields={"a": "1"},
        )
        assert form.fields == {"a": "1"}

    def test_post_json_merged_under_preparsed(self, upload_scope) -> None:
        """Verify JSON keys are added without overriding pre-parsed ones."""
        form = parse_request_input(
            "POST",
            "application/json; charset=utf-8",
            b'{"a": "json", "b": "json"}',
            scope=upload_scope,
            preparsed_fields={"a": "form"},
        )
        assert form.fields == {"a": "form", "b": "json"}

    def test_post_multipart(self, upload_scope, limits) -> None:
        """Verify multipart POST bodies still classify uploads."""
        body = build_multipart("XYZ", file_part("upload", "", b""))

        form = parse_request_input("POST", "multipart/form-data; boundary=XYZ", body, scope=upload_scope, limits=limits)

        assert form.files["upload"].error is UploadError.NO_FILE

    def test_malformed_multipart_raises(self, upload_scope) -> None:
        """Verify parse errors reach the caller."""
        with pytest.raises(BoundaryNotFoundError):
            parse_request_input("PUT", "multipart/form-data; boundary=XYZ", b"a=1", scope=upload_scope)


# -----------------------------------------------------------------------------
# parse_request_form Tests
# -----------------------------------------------------------------------------


class TestParseRequestForm:
    """Tests for FormInput injection."""

    def test_injects_form_input(self, make_mock_request, upload_scope) -> None:
        """Verify parsed input is set on every FormInput parameter."""
        request = make_mock_request(body="a=1", content_type="application/x-www-form-urlencoded")
        kwargs = {}

        error = parse_request_form({"form"}, request, kwargs, upload_scope)

        assert error is None
        assert isinstance(kwargs["form"], FormInput)
        assert kwargs["form"].fields == {"a": "1"}

    def test_no_form_params(self, make_mock_request, upload_scope) -> None:
        """Verify nothing happens without FormInput parameters."""
        kwargs = {}
        assert parse_request_form(set(), make_mock_request(), kwargs, upload_scope) is None
        assert kwargs == {}

    def test_malformed_multipart_returns_400(self, make_mock_request, upload_scope) -> None:
        """Verify parse errors become a 400 response."""
        request = make_mock_request(body=b"no boundary", content_type="multipart/form-data")
        kwargs = {}

        error = parse_request_form({"form"}, request, kwargs, upload_scope)

        assert isinstance(error, Response)
        assert error.status_code == 400
        assert "invalid_multipart" in error.description
        assert "form" not in kwargs


# -----------------------------------------------------------------------------
# Route registration Tests
# -----------------------------------------------------------------------------


class TestRouteRegistration:
    """Tests for the method wrapper used by Router."""

    def test_stacked_decorators_register_each_method(self) -> None:
        """Verify stacked route decorators each wrap the original handler."""
        registered: list[tuple[str, str, object]] = []

        def make_method(method: str):
            def original(endpoint: str):
                def decorator(handler):
                    registered.append((method, endpoint, handler))
                    return handler

                return decorator

            return _create_method_wrapper(original, "/forms")

        post, put = make_method("POST"), make_method("PUT")

        @post("/stacked")
        @put("/stacked")
        async def handler(form: FormInput) -> FormInput:
            return form

        try:
            assert inspect.iscoroutinefunction(handler)
            assert [(method, endpoint) for method, endpoint, _ in registered] == [("PUT", "/stacked"), ("POST", "/stacked")]
            for _, _, wrapped in registered:
                assert wrapped.__wrapped__ is handler
                assert "form" not in inspect.signature(wrapped).parameters
            assert "/forms/stacked" in FORM_INPUT_ENDPOINTS
        finally:
            FORM_INPUT_ENDPOINTS.discard("/forms/stacked")


# -----------------------------------------------------------------------------
# parse_response Tests
# -----------------------------------------------------------------------------


class TestParseResponse:
    """Tests for parse_response function."""

    def test_response_passthrough(self) -> None:
        """Verify Response objects pass through unchanged."""
        original = Response(status_code=201, headers={}, description="created")
        assert parse_response(original) is original

    def test_pydantic_model_to_json(self) -> None:
        """Verify Pydantic models are serialized to JSON."""
        result = parse_response(SampleModel(name="test", value=123))

        assert result.status_code == 200
        assert "test" in result.description
        assert "123" in result.description

    def test_form_input_to_json(self) -> None:
        """Verify FormInput is rendered with its fields and files."""
        result = parse_response(FormInput(fields={"a": ["1", "2"]}))

        assert result.status_code == 200
        assert orjson.loads(result.description) == {"fields": {"a": ["1", "2"]}, "files": {}}

    def test_other_to_string(self) -> None:
        """Verify other types are converted to string."""
        result = parse_response("plain text")
        assert result.status_code == 200
        assert result.description == "plain text"
