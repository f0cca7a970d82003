"""
FILE: src/api/main.py
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_reference_data_repository
from src.api.observability import setup_observability
from src.api.routers.orders import router as orders_router
from src.api.routers.portfolio import router as portfolio_router
from src.api.routers.reference_data_config import reference_data_backend_name

app = FastAPI(
    title="RM Portfolio & Order Economics API",
    version="0.1.0",
    description=(
        "Portfolio allocation analytics and order economics for relationship managers.\n\n"
        "Every endpoint returns a result envelope (`success`, `data`, `message`, `errors`, "
        "`error_code`); failure envelopes map to 404, 422 or 503."
    ),
    openapi_tags=[
        {
            "name": "Portfolio Analysis",
            "description": "Allocation, impact preview, gaps, rebalancing and advice endpoints.",
        },
        {
            "name": "Order Economics",
            "description": "Redemption, switch, SIP and order validation endpoints.",
        },
        {"name": "Health", "description": "Liveness and readiness probes."},
    ],
)

setup_observability(app)
logger = logging.getLogger(__name__)

app.include_router(portfolio_router)
app.include_router(orders_router)


@app.exception_handler(Exception)
async def unhandled_exception_to_problem_details(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception while serving request", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/problem+json",
        content={
            "type": "about:blank",
            "title": "Internal Server Error",
            "status": 500,
            "detail": "An unexpected error occurred.",
            "instance": str(request.url.path),
        },
    )


@app.get("/health", tags=["Health"], summary="Service Health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health/live", tags=["Health"], summary="Liveness Probe")
def health_live() -> dict[str, str]:
    return {"status": "live"}


@app.get("/health/ready", tags=["Health"], summary="Readiness Probe")
def health_ready() -> JSONResponse:
    backend = reference_data_backend_name()
    try:
        get_reference_data_repository()
    except RuntimeError as exc:
        logger.warning("Reference data backend not ready: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "backend": backend, "detail": str(exc)},
        )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": "ready", "backend": backend},
    )
