"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Request/Config
  2xxx: Intent store
  3xxx: Matching
  4xxx: Verification (MPC network)
  5xxx: Settlement
  6xxx: Cleanup
  9xxx: System

``kind`` is the taxonomy name reported to HTTP callers; subclasses inherit
the kind of the family they belong to.
"""


class AppError(Exception):
    """Base application error."""

    kind = "AppError"

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Request/Config ---

class ValidationError(AppError):
    kind = "ValidationError"

    def __init__(self, detail: str) -> None:
        super().__init__(1001, detail, 400)


class ConfigurationError(AppError):
    kind = "ConfigurationError"

    def __init__(self, detail: str) -> None:
        super().__init__(1002, f"Invalid configuration: {detail}", 500)


# --- 2xxx: Intent store ---

class AdapterDecodeError(AppError):
    kind = "AdapterDecodeError"

    def __init__(self, address: str, reason: str) -> None:
        self.address = address
        self.reason = reason
        super().__init__(2001, f"Cannot decode record {address}: {reason}", 500)


class MarketNotFoundError(AppError):
    kind = "MarketNotFoundError"

    def __init__(self, market: str) -> None:
        super().__init__(2002, f"Market not found: {market}", 404)


# --- 3xxx: Matching ---

class CrossMarketError(AppError):
    kind = "CrossMarketError"

    def __init__(self, expected: str, found: str) -> None:
        super().__init__(
            3001, f"Intents from different markets: {found} vs {expected}", 500
        )


class PlanInvariantError(AppError):
    kind = "PlanInvariantError"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(3002, "Plan invariants violated: " + "; ".join(violations), 500)


# --- 4xxx: Verification ---

class VerificationError(AppError):
    kind = "VerificationError"

    def __init__(self, detail: str, code: int = 4001, http_status: int = 502) -> None:
        super().__init__(code, detail, http_status)


class KeyUnavailableError(VerificationError):
    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"MPC network public key unavailable after {attempts} attempts", 4002
        )


class ComputationTimeoutError(VerificationError):
    def __init__(self, offset: int, timeout_s: float) -> None:
        super().__init__(
            f"Computation {offset} not finalized within {timeout_s:g}s", 4003, 504
        )


class ComputationFailedError(VerificationError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Computation failed: {detail}", 4004)


class AttestationMismatchError(VerificationError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Network result does not match local plan: {detail}", 4005)


# --- 5xxx: Settlement ---

class SettlementError(AppError):
    kind = "SettlementError"

    def __init__(self, detail: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(5001, f"Settlement rejected: {detail}", 502)


# --- 6xxx: Cleanup ---

class CleanupError(AppError):
    kind = "CleanupError"

    def __init__(self, address: str, detail: str) -> None:
        self.address = address
        super().__init__(6001, f"Cannot close intent {address}: {detail}", 500)


# --- 9xxx: System ---

class InternalError(AppError):
    kind = "InternalError"

    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
