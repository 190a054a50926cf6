from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from albaranes.core.error_sink import ErrorSink


class ErrorReportingMiddleware(BaseHTTPMiddleware):
    """
    Reporta al sink las respuestas 5xx y las excepciones no controladas.
    Las respuestas < 500 no se registran para no saturar el canal.

    El sink puede bloquear (webhook), así que se ejecuta fuera del event loop.
    """

    def __init__(self, app, sink: ErrorSink):
        super().__init__(app)
        self.sink = sink

    async def _report(self, message: str) -> None:
        await run_in_threadpool(self.sink.write, message)

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception as e:
            await self._report(
                f"[{request.method}] {request.url.path} -> excepción no controlada: {e!r}"
            )
            raise

        if response.status_code >= 500:
            await self._report(
                f"[{request.method}] {request.url.path} -> {response.status_code}"
            )

        return response
