"""FastAPI dependency: the process-wide relay service.

The container is stored on ``app.state.relay`` by the lifespan handler.
Tests replace it through ``app.dependency_overrides[get_relay_service]``.
"""
from fastapi import Request

from src.dp_common.errors import InternalError
from src.dp_relay.application.service import MatchAndSettleService


def get_relay_service(request: Request) -> MatchAndSettleService:
    relay = getattr(request.app.state, "relay", None)
    if relay is None:
        raise InternalError("Relay not initialized")
    return relay.service
