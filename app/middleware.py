import logging
import time
from contextvars import ContextVar

from sqlalchemy import event
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Per-request SQL statement counter
# ---------------------------------------------------------------------------

query_count_var: ContextVar[int] = ContextVar("query_count", default=0)


def install_query_counter(engine) -> None:
    """
    Count every statement *engine* sends to the database, including the
    ones issued by eager-loading strategies, into ``query_count_var``.

    Call once per engine.
    """

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _count_query(conn, cursor, statement, parameters, context, executemany):
        query_count_var.set(query_count_var.get() + 1)


# ---------------------------------------------------------------------------
# Middleware (pure ASGI so ContextVar writes stay visible to us)
# ---------------------------------------------------------------------------

class TimingMiddleware:
    """
    Add ``X-Response-Time-Ms`` and ``X-Query-Count`` headers and log one
    line per request.

    Annotated list endpoints batch their lookups, so their statement count
    stays flat whatever the page size.  A request crossing
    ``settings.QUERY_COUNT_WARN_THRESHOLD`` is logged at WARNING as a
    likely N+1 regression.
    """

    def __init__(self, app: ASGIApp, threshold: int | None = None) -> None:
        self.app = app
        self.threshold = settings.QUERY_COUNT_WARN_THRESHOLD if threshold is None else threshold

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        query_count_var.set(0)
        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                headers = list(message.get("headers", []))
                headers.append((b"x-response-time-ms", str(duration_ms).encode()))
                headers.append((b"x-query-count", str(query_count_var.get()).encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            queries = query_count_var.get()
            level = logging.WARNING if queries > self.threshold else logging.INFO
            logger.log(
                level,
                "%s %s -> %d in %.2fms (%d queries)",
                scope["method"],
                scope["path"],
                status_code,
                duration_ms,
                queries,
            )
