# src/dp_intent/domain/repository.py
"""IntentStore Protocol: interface contract for the ledger read side."""
from typing import Protocol

from src.dp_intent.domain.models import Intent, IntentReadResult, Market


class IntentStoreProtocol(Protocol):
    async def list_open_intents(self, market: str) -> IntentReadResult: ...

    async def get_intent(self, address: str) -> Intent | None: ...

    async def get_market(self, market: str) -> Market: ...
