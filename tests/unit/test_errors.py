"""Tests for dp_common.errors and dp_common.response."""

from src.dp_common.errors import (
    AdapterDecodeError,
    AppError,
    AttestationMismatchError,
    CleanupError,
    ComputationTimeoutError,
    CrossMarketError,
    KeyUnavailableError,
    MarketNotFoundError,
    SettlementError,
    ValidationError,
    VerificationError,
)
from src.dp_common.response import error_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1001, message="Bad body", http_status=400)
        assert err.http_status == 400

    def test_is_exception(self) -> None:
        err = AppError(code=1001, message="test")
        assert isinstance(err, Exception)


class TestSpecificErrors:
    def test_validation(self) -> None:
        err = ValidationError("marketAddress missing")
        assert err.code == 1001
        assert err.http_status == 400
        assert err.kind == "ValidationError"

    def test_adapter_decode_keeps_address(self) -> None:
        err = AdapterDecodeError("Abc", "discriminator mismatch")
        assert err.code == 2001
        assert err.address == "Abc"
        assert err.reason == "discriminator mismatch"

    def test_market_not_found(self) -> None:
        err = MarketNotFoundError("Mkt")
        assert err.code == 2002
        assert err.http_status == 404

    def test_cross_market(self) -> None:
        err = CrossMarketError(expected="A", found="B")
        assert err.code == 3001
        assert "A" in err.message and "B" in err.message

    def test_verification_family_shares_kind(self) -> None:
        for err in (
            KeyUnavailableError(20),
            ComputationTimeoutError(7, 120.0),
            AttestationMismatchError("fill 0 differs"),
        ):
            assert isinstance(err, VerificationError)
            assert err.kind == "VerificationError"

    def test_key_unavailable(self) -> None:
        err = KeyUnavailableError(20)
        assert err.code == 4002
        assert err.http_status == 502
        assert "20" in err.message

    def test_timeout_is_504(self) -> None:
        err = ComputationTimeoutError(7, 120.0)
        assert err.code == 4003
        assert err.http_status == 504

    def test_settlement_carries_cause(self) -> None:
        cause = RuntimeError("0x1771")
        err = SettlementError("rejected", cause=cause)
        assert err.code == 5001
        assert err.cause is cause

    def test_cleanup(self) -> None:
        err = CleanupError("Ord", "blockhash expired")
        assert err.code == 6001
        assert err.address == "Ord"


class TestErrorResponse:
    def test_shape(self) -> None:
        body = error_response(KeyUnavailableError(3)).model_dump()
        assert set(body) == {"error"}
        assert body["error"]["kind"] == "VerificationError"
        assert body["error"]["code"] == 4002
        assert "3 attempts" in body["error"]["message"]
