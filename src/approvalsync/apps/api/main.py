from __future__ import annotations

import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from approvalsync.core.logging import configure_logging
from approvalsync.core.scheduler.scheduler import ReconcileScheduler

from .deps import get_scheduler, get_settings


def _is_on(name: str, default: str = "off") -> bool:
    return os.getenv(name, default).strip().casefold() == "on"


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    configure_logging(settings)
    scheduler = get_scheduler()
    # Off by default: the worker process owns the interval schedule.
    if _is_on("APPROVALSYNC_API_SCHEDULER"):
        scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()


app = FastAPI(title="approvalsync", lifespan=lifespan)


@app.get("/healthz")
def healthz() -> dict:
    return {"ok": True}


@app.get("/status")
def status(scheduler: ReconcileScheduler = Depends(get_scheduler)) -> dict:
    last = scheduler.last_report
    return {
        "running": scheduler.running,
        "interval_ms": scheduler.interval_ms,
        "last_pass": last.model_dump(mode="json") if last is not None else None,
    }


@app.post("/passes")
def run_pass(scheduler: ReconcileScheduler = Depends(get_scheduler)) -> JSONResponse:
    report = scheduler.trigger()
    if report is None:
        return JSONResponse(status_code=409, content={"started": False, "reason": "pass_in_progress"})
    return JSONResponse(status_code=200, content={"started": True, "pass": report.model_dump(mode="json")})


def run() -> None:
    uvicorn.run(
        "approvalsync.apps.api.main:app",
        host=os.getenv("APPROVALSYNC_API_HOST", "127.0.0.1"),
        port=int(os.getenv("APPROVALSYNC_API_PORT", "8085")),
    )


if __name__ == "__main__":
    run()
