"""Request id middleware: every request carries an ``x-request-id`` header."""

from uuid import uuid4

from robyn import Request

from formdata.core.router import REQUEST_ID_HEADER
from formdata.middlewares.base import BaseMiddleware


class RequestIdMiddleware(BaseMiddleware):
    """Adds a generated request id when the client sent none."""

    def before(self, request: Request) -> Request:
        if not request.headers.get(REQUEST_ID_HEADER):
            request.headers.set(REQUEST_ID_HEADER, uuid4().hex)
        return request
