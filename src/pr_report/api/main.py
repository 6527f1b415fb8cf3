"""FastAPI entrypoint serving review reports as JSON."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from pr_report.config import get_settings
from pr_report.errors import InvalidReference, ReportError, UpstreamFetchFailure
from pr_report.obs.logging import configure_logging, get_logger
from pr_report.report.service import ReportService

logger = get_logger("api")

app = FastAPI(title="Pull Request Review Report", version="0.1.0")


@lru_cache
def get_report_service() -> ReportService:
    from pr_report.bootstrap import build_report_service

    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    return build_report_service(settings)


@app.exception_handler(InvalidReference)
async def _invalid_reference(request: Request, exc: InvalidReference) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(UpstreamFetchFailure)
async def _upstream_failure(request: Request, exc: UpstreamFetchFailure) -> JSONResponse:
    logger.warning("upstream_fetch_failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(ReportError)
async def _report_failure(request: Request, exc: ReportError) -> JSONResponse:
    logger.error("report_failed", kind=type(exc).__name__, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"detail": f"Error while generating report: {exc}", "kind": type(exc).__name__},
    )


@app.get("/health")
def health() -> dict[str, Any]:
    return {"status": "ok"}


@app.get("/report")
async def report(
    url: str | None = None,
    service: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    if not url:
        raise InvalidReference(url or "")
    result = await service.report_for_url(url)
    return result.to_wire()
