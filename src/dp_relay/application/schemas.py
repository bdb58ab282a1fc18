# src/dp_relay/application/schemas.py
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from solders.pubkey import Pubkey


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MatchAndSettleRequest(BaseModel):
    market_address: str = Field(
        validation_alias=AliasChoices("marketAddress", "marketPubkey", "market_address")
    )

    @field_validator("market_address")
    @classmethod
    def must_be_address(cls, v: str) -> str:
        v = v.strip()
        try:
            Pubkey.from_string(v)
        except ValueError:
            raise ValueError("marketAddress is not a valid ledger address") from None
        return v


class FillResponse(_CamelModel):
    order: str
    counterparty: str
    amount_in: int
    amount_out: int


class AttestationResponse(_CamelModel):
    signature: str
    plan_digest: str
    computation_offset: int | None = None


class PlanResponse(_CamelModel):
    market: str
    fills: list[FillResponse]
    created_at: datetime
    attestation: AttestationResponse | None = None
    skipped_records: int = 0
    total_intents: int
    processed_intents: int
    remaining_intents: int


class SettlementReceiptResponse(_CamelModel):
    signature: str | None
    market: str
    fills_settled: int
    submitted_at: datetime


class CleanupResponse(_CamelModel):
    closed: int = 0
    failed: int = 0
    skipped: int = 0


class MatchAndSettleResponse(_CamelModel):
    settlement_receipt: SettlementReceiptResponse | None = None
    plan: PlanResponse | None = None
    cleanup: CleanupResponse | None = None
    message: str | None = None
    skipped_records: int = 0


class HealthResponse(BaseModel):
    ok: bool = True
