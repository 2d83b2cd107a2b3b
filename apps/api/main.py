from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

try:
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
except Exception:  # pragma: no cover - optional dependency resolution
    FastAPIInstrumentor = None

from apps.api.observability import init_observability
from apps.api.reminders_scheduler import get_engine, start_scheduler
from apps.api.routes.preferences import router as preferences_router
from apps.api.routes.reminders import router as reminders_router
from packages.core.logging_config import configure_logging


configure_logging()

init_observability()
app = FastAPI(title="Medicine Reminders API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
if FastAPIInstrumentor is not None:
    FastAPIInstrumentor.instrument_app(app)
else:
    logging.getLogger("med_reminders.api").warning(
        "OpenTelemetry instrumentation not available. "
        "Install observability dependencies to enable tracing."
    )
app.include_router(reminders_router)
app.include_router(preferences_router)

_SCHEDULER = None


@app.on_event("startup")
def _start_reminder_scheduler() -> None:
    global _SCHEDULER
    if os.getenv("REMINDERS_SCHEDULER_ENABLED", "true").lower() != "true":
        return
    if _SCHEDULER is not None:
        return
    _SCHEDULER = start_scheduler(get_engine())


@app.on_event("shutdown")
def _stop_reminder_scheduler() -> None:
    global _SCHEDULER
    if _SCHEDULER is None:
        return
    get_engine().stop()
    _SCHEDULER = None
