# realleads/web/metrics.py
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Request, Response

# -------------------------------------------------------
#  Prometheus metrics definitions
# -------------------------------------------------------

HTTP_TOTAL = Counter(
    "realleads_http_requests_total",
    "Total HTTP requests",
    ["method", "path"]
)
HTTP_2XX = Counter("realleads_http_2xx_total", "HTTP 2xx responses")
HTTP_4XX = Counter("realleads_http_4xx_total", "HTTP 4xx responses")
HTTP_5XX = Counter("realleads_http_5xx_total", "HTTP 5xx responses")

COMMANDS_TOTAL = Counter(
    "realleads_commands_total",
    "Commands processed, by outcome mode",
    ["mode"]
)
ACTIONS_TOTAL = Counter(
    "realleads_actions_total",
    "Executed actions, by type and outcome",
    ["action_type", "outcome"]
)
COMMAND_LATENCY = Histogram(
    "realleads_command_latency_seconds",
    "End-to-end command latency (seconds)",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0)
)

# -------------------------------------------------------
#  FastAPI router for metrics endpoints
# -------------------------------------------------------

router = APIRouter()

@router.get("/metrics")
async def metrics_endpoint():
    """Prometheus scrape endpoint."""
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@router.get("/readyz")
async def readiness_check(request: Request):
    """Ready once the lifespan hook has wired the command pipeline."""
    if getattr(request.app.state, "pipeline", None) is None:
        return Response(content='{"status": "starting"}', status_code=503, media_type="application/json")
    return {"status": "ready"}
