# src/dp_relay/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends

from src.dp_relay.api.dependencies import get_relay_service
from src.dp_relay.application.schemas import (
    HealthResponse,
    MatchAndSettleRequest,
    MatchAndSettleResponse,
)
from src.dp_relay.application.service import MatchAndSettleService

router = APIRouter(tags=["relay"])


@router.post("/match-and-settle", response_model=MatchAndSettleResponse)
async def match_and_settle(
    req: MatchAndSettleRequest,
    service: Annotated[MatchAndSettleService, Depends(get_relay_service)],
) -> MatchAndSettleResponse:
    return await service.match_and_settle(req.market_address)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(ok=True)
