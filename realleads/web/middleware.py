# realleads/web/middleware.py
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from realleads.common.tracing import new_trace_id, reset_trace_id, set_trace_id
from realleads.web import metrics as metrics_mod

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate the caller's request id (or mint one) as the trace id for the request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_trace_id()
        request.state.request_id = request_id
        token = set_trace_id(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            reset_trace_id(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        metrics_mod.HTTP_TOTAL.labels(method=request.method, path=request.url.path).inc()
        response = await call_next(request)
        bucket = {2: metrics_mod.HTTP_2XX, 4: metrics_mod.HTTP_4XX, 5: metrics_mod.HTTP_5XX}.get(
            response.status_code // 100
        )
        if bucket is not None:
            bucket.inc()
        return response


def setup_middleware(app: FastAPI) -> None:
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(MetricsMiddleware)
