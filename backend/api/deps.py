"""FastAPI dependency helpers."""
from __future__ import annotations

import threading

from fastapi import Request

from backend.config import Settings
from backend.connectors.usaspending import USAspendingClient

_CLIENT_LOCK = threading.Lock()


def get_spending_client(request: Request) -> USAspendingClient:
    """Return the app's client, building one from the environment on first use.

    The lifespan normally installs the client; the fallback covers apps served
    without lifespan events. A client built here is flagged so shutdown closes it.
    """
    state = request.app.state
    client = getattr(state, "spending_client", None)
    if client is not None:
        return client
    with _CLIENT_LOCK:
        client = getattr(state, "spending_client", None)
        if client is None:
            client = USAspendingClient.from_settings(Settings.from_env())
            state.spending_client = client
            state.owns_spending_client = True
    return client


__all__ = ["get_spending_client"]
