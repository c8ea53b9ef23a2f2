"""Router with automatic form input parsing and response handling."""

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any
from urllib.parse import parse_qsl

import orjson
from asgi_correlation_id import correlation_id
from pydantic import BaseModel
from robyn import Request, Response, SubRouter, status_codes
from robyn.robyn import HttpMethod

from formdata.core.logger import LogIcon, logger
from formdata.core.settings import settings as st
from formdata.models.core import FormInput, InputKind
from formdata.multipart.assembler import build_field_map
from formdata.multipart.errors import MultipartError
from formdata.multipart.headers import parse_header_field
from formdata.multipart.materializer import UploadLimits, UploadScope, parse_multipart

FORM_INPUT_ENDPOINTS: set[str] = set()
MANUALLY_PARSED_METHODS = frozenset({"PUT", "PATCH", "DELETE"})
REQUEST_ID_HEADER = "x-request-id"


def parse_endpoint_signature(sig: inspect.Signature) -> set[str]:
    """Names of the parameters annotated with FormInput."""
    return {name for name, param in sig.parameters.items() if param.annotation is FormInput}


def to_bytes(data: str | bytes | bytearray | list[int] | None, charset: str = "utf-8") -> bytes:
    match data:
        case None:
            return b""
        case str():
            return data.encode(charset)
        case _:
            return bytes(data)


def decode_json_fields(body: bytes) -> dict[str, Any]:
    """Decode a JSON body into a field map, casting non-objects like an array cast would."""
    if not body.strip():
        return {}
    try:
        value = orjson.loads(body)
    except orjson.JSONDecodeError as ex:
        logger.warning("Ignoring invalid JSON body", icon=LogIcon.JSON, error=str(ex))
        return {}

    match value:
        case dict():
            return value
        case list():
            return {str(index): item for index, item in enumerate(value)}
        case _ if not value:
            return {}
        case _:
            return {"0": value}


def parse_request_input(
    method: str,
    content_type: str | None,
    body: bytes,
    *,
    scope: UploadScope,
    preparsed_fields: dict[str, Any] | None = None,
    limits: UploadLimits | None = None,
) -> FormInput:
    """Select a parsing branch from the HTTP method and declared content type.

    POST starts from the runtime's pre-parsed fields; PUT, PATCH and DELETE
    bodies are parsed here. Raises MultipartError for malformed multipart bodies.
    """
    method = method.upper()
    kind = InputKind.from_content_type(parse_header_field(content_type, "main_value"))

    if method == "POST":
        fields = dict(preparsed_fields or {})
        match kind:
            case InputKind.JSON:
                # pre-parsed fields win over JSON keys
                return FormInput(fields={**decode_json_fields(body), **fields})
            case InputKind.MULTIPART:
                fields, files = parse_multipart(body, scope=scope, limits=limits)
                return FormInput(fields=fields, files=files)
            case _:
                return FormInput(fields=fields)

    if method not in MANUALLY_PARSED_METHODS or not content_type:
        return FormInput()

    match kind:
        case InputKind.URLENCODED:
            pairs = parse_qsl(body.decode(st.FORM_CHARSET, "replace"), keep_blank_values=True)
            return FormInput(fields=build_field_map(pairs))
        case InputKind.MULTIPART:
            fields, files = parse_multipart(body, scope=scope, limits=limits)
            return FormInput(fields=fields, files=files)
        case InputKind.JSON:
            return FormInput(fields=decode_json_fields(body))
        case _:
            logger.info("Unsupported content type, no input parsed", icon=LogIcon.FORBIDDEN, content_type=content_type)
            return FormInput()


def parse_request_form(
    form_params: set[str],
    request: Request,
    kwargs: dict[str, Any],
    scope: UploadScope,
) -> Response | None:
    """Parse the request body into FormInput kwargs."""
    if not form_params:
        return None

    try:
        form = parse_request_input(
            request.method,
            request.headers.get("content-type"),
            to_bytes(request.body),
            scope=scope,
            preparsed_fields=getattr(request, "form_data", None),
        )
    except MultipartError as ex:
        logger.warning("Rejected malformed multipart body", icon=LogIcon.FORBIDDEN, error=str(ex))
        return Response(
            status_code=status_codes.HTTP_400_BAD_REQUEST,
            headers={"content-type": "application/json"},
            description=orjson.dumps({"error": "invalid_multipart", "detail": str(ex)}).decode(),
        )

    for param_name in form_params:
        kwargs[param_name] = form

    return None


def parse_response(result: Any) -> Response:
    """Convert handler result to Response."""
    match result:
        case Response():
            return result
        case BaseModel():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=result.model_dump_json(indent=4),
            )
        case FormInput():
            return parse_response(result.to_dict())
        case dict():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=orjson.dumps(result).decode(),
            )
        case _:
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={},
                description=str(result),
            )


HTTP_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.PATCH,
    HttpMethod.HEAD,
    HttpMethod.OPTIONS,
)


def _create_method_wrapper(original_method: Callable, router_prefix: str = "") -> Callable:
    @wraps(original_method)
    def method_wrapper(*args, **kwargs) -> Callable:
        endpoint = args[0] if args else kwargs.get("endpoint", "")
        decorator = original_method(*args, **kwargs)

        def handler_decorator(handler: Callable) -> Callable:
            sig = inspect.signature(handler)
            form_params = parse_endpoint_signature(sig)
            has_request_param = "request" in sig.parameters

            if form_params:
                full_path = f"{router_prefix}{endpoint}".replace("//", "/")
                FORM_INPUT_ENDPOINTS.add(full_path)

            @wraps(handler)
            async def wrapped_handler(request: Request, **h_kwargs):
                token = correlation_id.set(request.headers.get(REQUEST_ID_HEADER))
                try:
                    # Uploads live until the handler's response is built
                    with UploadScope() as scope:
                        if form_params and (error := parse_request_form(form_params, request, h_kwargs, scope)):
                            return error

                        # Pass request to handler only if it declared it
                        if has_request_param:
                            h_kwargs["request"] = request

                        result = await handler(**h_kwargs)
                        return parse_response(result)
                finally:
                    correlation_id.reset(token)

            # Build signature: always include request for Robyn injection
            new_params = [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
            for name, param in sig.parameters.items():
                if name == "request" or name in form_params:
                    continue
                new_params.append(param)

            wrapped_handler.__signature__ = sig.replace(parameters=new_params)  # type: ignore[attr-defined]
            decorator(wrapped_handler)
            # Hand back the plain handler so route decorators can be stacked
            return handler

        return handler_decorator

    return method_wrapper


class Router(SubRouter):
    """Enhanced SubRouter with automatic form parsing and response handling."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._prefix = kwargs.get("prefix", "")
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        """Wrap HTTP methods with parsing logic."""
        for method in HTTP_METHODS:
            method_name = str(method).split(".")[-1].lower()
            if hasattr(self, method_name):
                original_method = getattr(self, method_name)
                wrapped_method = _create_method_wrapper(original_method, self._prefix)
                setattr(self, method_name, wrapped_method)
