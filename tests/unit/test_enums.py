"""Tests for dp_common.enums: tag order must match the ledger program's variants."""

import pytest

from src.dp_common.enums import IntentStatus, JobState, Side, VerificationMode


class TestAllEnumsAreStr:
    """All enums inherit from (str, Enum) for JSON serialization."""

    def test_side_is_str(self) -> None:
        assert isinstance(Side.BUY, str)
        assert Side.BUY == "BUY"

    def test_status_is_str(self) -> None:
        assert isinstance(IntentStatus.OPEN, str)
        assert IntentStatus.PARTIALLY_FILLED == "PARTIALLY_FILLED"


class TestSideTags:
    def test_variant_order(self) -> None:
        assert Side.from_tag(0) == Side.BUY
        assert Side.from_tag(1) == Side.SELL
        assert [s.tag for s in Side] == [0, 1]

    def test_unknown_tag(self) -> None:
        with pytest.raises(ValueError, match="unknown side tag 2"):
            Side.from_tag(2)


class TestStatusTags:
    def test_variant_order(self) -> None:
        assert [IntentStatus.from_tag(n) for n in range(4)] == [
            IntentStatus.OPEN,
            IntentStatus.PARTIALLY_FILLED,
            IntentStatus.FILLED,
            IntentStatus.CANCELLED,
        ]

    def test_tag_round_trip(self) -> None:
        assert all(IntentStatus.from_tag(s.tag) is s for s in IntentStatus)

    @pytest.mark.parametrize("tag", [4, 255, -1])
    def test_unknown_tag(self, tag: int) -> None:
        with pytest.raises(ValueError):
            IntentStatus.from_tag(tag)

    def test_matchable(self) -> None:
        assert {s for s in IntentStatus if s.is_matchable} == {
            IntentStatus.OPEN,
            IntentStatus.PARTIALLY_FILLED,
        }


class TestSimpleEnums:
    def test_verification_mode(self) -> None:
        assert {m.value for m in VerificationMode} == {"local", "network"}

    def test_job_state(self) -> None:
        assert {j.value for j in JobState} == {"QUEUED", "FINALIZED", "FAILED"}
