"""HTTP boundary: ``/sync/gmail`` returning the batch result as JSON."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from fastapi import FastAPI, HTTPException, Query

from autotask_agent.exceptions import CollaboratorUnavailableError
from autotask_agent.pipeline.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)


def create_app(orchestrator_factory: Callable[[], SyncOrchestrator]) -> FastAPI:
    """Create the FastAPI application.

    Args:
        orchestrator_factory: Called once, lazily, on the first sync
            request. The orchestrator is then reused for the process
            lifetime.
    """
    app = FastAPI(title="AutoTask Agent", version="0.1.0")
    holder: dict[str, SyncOrchestrator] = {}
    lock = threading.Lock()

    def get_orchestrator() -> SyncOrchestrator:
        with lock:
            if "orchestrator" not in holder:
                holder["orchestrator"] = orchestrator_factory()
        return holder["orchestrator"]

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.api_route("/sync/gmail", methods=["GET", "POST"])
    def sync_gmail(max_results: int | None = Query(default=None, ge=1, le=500)) -> dict:
        try:
            result = get_orchestrator().run_sync(max_results)
        except CollaboratorUnavailableError as e:
            logger.error(f"Gmail sync failed: {e}")
            raise HTTPException(status_code=503, detail=str(e)) from e
        return result.to_dict()

    return app
