"""Base middleware architecture for Robyn applications."""

from collections.abc import Callable

from robyn import Request, Response, Robyn

from formdata.core.logger import LogIcon, logger


def passthrough(hook: Callable) -> Callable:
    """Mark a hook as the default no-op so it is not registered."""
    hook.__passthrough__ = True  # type: ignore[attr-defined]
    return hook


def _is_passthrough(hook: Callable) -> bool:
    return getattr(hook, "__passthrough__", False)


class BaseMiddleware:
    """Base class for middlewares with before/after hooks.

    An empty ``endpoints`` set applies the middleware to every route.
    """

    endpoints: frozenset[str] = frozenset()

    def __init__(self, endpoints: frozenset[str] | list[str] | None = None) -> None:
        if endpoints is not None:
            self.endpoints = frozenset(endpoints)

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if _is_passthrough(cls.before) and _is_passthrough(cls.after):
            raise TypeError(f"{cls.__name__} must implement at least one of before/after")

    @passthrough
    def before(self, request: Request) -> Request | Response:
        """Called before request handling. Return Request to continue or Response to short-circuit."""
        return request

    @passthrough
    def after(self, response: Response) -> Response:
        """Called after request handling. Return modified Response."""
        return response

    @property
    def has_before(self) -> bool:
        return not _is_passthrough(type(self).before)

    @property
    def has_after(self) -> bool:
        return not _is_passthrough(type(self).after)


class MiddlewareHandler:
    """Manages middleware registration for a Robyn application."""

    def __init__(self, app: Robyn) -> None:
        self._app = app
        self._middlewares: list[BaseMiddleware] = []

    @property
    def middlewares(self) -> list[BaseMiddleware]:
        return list(self._middlewares)

    def register(self, middleware: BaseMiddleware) -> "MiddlewareHandler":
        """Register a middleware instance. Returns self for chaining."""
        self._middlewares.append(middleware)
        self._apply_middleware(middleware)
        logger.info(f"Registered middleware: {middleware.__class__.__name__}", icon=LogIcon.ADAPTER)
        return self

    def _apply_middleware(self, middleware: BaseMiddleware) -> None:
        endpoints = middleware.endpoints or self._get_all_routes()
        for endpoint in endpoints:
            if middleware.has_before:
                self._register_before(endpoint, middleware.before)
            if middleware.has_after:
                self._register_after(endpoint, middleware.after)

    def _get_all_routes(self) -> frozenset[str]:
        routes = self._app.get_all_routes()
        return frozenset(route[1] for route in routes)

    def _register_before(self, endpoint: str, handler: Callable) -> None:
        @self._app.before_request(endpoint)
        async def before_wrapper(request: Request) -> Request | Response:
            return handler(request)

    def _register_after(self, endpoint: str, handler: Callable) -> None:
        @self._app.after_request(endpoint)
        def after_wrapper(response: Response) -> Response:
            return handler(response)
