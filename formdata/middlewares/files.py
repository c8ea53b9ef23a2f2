"""OpenAPI patching for endpoints that take form input."""

import orjson
from robyn import Response

from formdata.core.logger import LogIcon, logger
from formdata.core.router import FORM_INPUT_ENDPOINTS
from formdata.core.settings import settings as st
from formdata.middlewares.base import BaseMiddleware

FORM_CONTENT_SCHEMA = {
    "type": "object",
    "additionalProperties": {
        "oneOf": [
            {"type": "string"},
            {"type": "string", "format": "binary"},
        ]
    },
    "properties": {
        st.MAX_FILE_SIZE_FIELD: {
            "type": "integer",
            "description": "Client-side upload size hint in bytes",
        }
    },
}


def form_request_body() -> dict:
    """OpenAPI requestBody accepting multipart and urlencoded form input."""
    return {
        "content": {
            "multipart/form-data": {"schema": FORM_CONTENT_SCHEMA},
            "application/x-www-form-urlencoded": {"schema": {"type": "object", "additionalProperties": {"type": "string"}}},
            "application/json": {"schema": {"type": "object"}},
        },
        "required": False,
    }


class FormInputOpenAPIMiddleware(BaseMiddleware):
    """Patches OpenAPI responses to describe the form input of form endpoints."""

    endpoints = frozenset(["/openapi.json"])

    def after(self, response: Response) -> Response:
        if not FORM_INPUT_ENDPOINTS:
            return response

        try:
            spec = orjson.loads(response.description)
        except orjson.JSONDecodeError:
            logger.warning("OpenAPI response is not JSON, left unpatched", icon=LogIcon.WARNING)
            return response

        paths = spec.get("paths", {})
        for endpoint in FORM_INPUT_ENDPOINTS:
            for operation in paths.get(endpoint, {}).values():
                if isinstance(operation, dict):
                    operation["requestBody"] = form_request_body()

        response.description = orjson.dumps(spec).decode()
        return response
