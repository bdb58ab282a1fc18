"""Client container: built once per process in the app lifespan.

Every long-lived connection (ledger RPC, MPC gateway HTTP client) is created
here and handed to the components that need it. Nothing else in the codebase
opens its own client.
"""
import logging
from dataclasses import dataclass

from config.settings import Settings
from src.dp_common.enums import VerificationMode
from src.dp_common.errors import ConfigurationError
from src.dp_common.ledger_client import LedgerClient
from src.dp_common.retry import RetryPolicy
from src.dp_computation.application.gateway import (
    ComputationGatewayProtocol,
    LocalComputationGateway,
    NetworkComputationGateway,
)
from src.dp_computation.infrastructure.network_client import MpcNetworkClient
from src.dp_intent.infrastructure.intent_store import LedgerIntentStore
from src.dp_reconciliation.application.service import ReconciliationService
from src.dp_relay.application.service import MatchAndSettleService
from src.dp_settlement.application.builder import SettlementBuilder

logger = logging.getLogger(__name__)


@dataclass
class RelayContainer:
    ledger: LedgerClient
    gateway: ComputationGatewayProtocol
    service: MatchAndSettleService

    async def close(self) -> None:
        await self.gateway.close()
        await self.ledger.close()


def build_gateway(settings: Settings) -> ComputationGatewayProtocol:
    try:
        mode = VerificationMode(settings.VERIFICATION_MODE.lower())
    except ValueError:
        raise ConfigurationError(
            f"VERIFICATION_MODE must be 'local' or 'network', got {settings.VERIFICATION_MODE!r}"
        ) from None

    if mode == VerificationMode.LOCAL:
        logger.warning("Verification mode is local: plans are NOT verified by the MPC network")
        return LocalComputationGateway()

    if not settings.MPC_NETWORK_URL:
        raise ConfigurationError("MPC_NETWORK_URL is required in network mode")
    if not settings.MPC_COMP_DEF_ID:
        raise ConfigurationError("MPC_COMP_DEF_ID is required in network mode")
    client = MpcNetworkClient(
        base_url=settings.MPC_NETWORK_URL,
        api_key=settings.MPC_API_KEY,
        timeout_s=settings.MPC_HTTP_TIMEOUT_S,
    )
    return NetworkComputationGateway(
        client=client,
        comp_def_id=settings.MPC_COMP_DEF_ID,
        cluster_offset=settings.MPC_CLUSTER_OFFSET,
        key_policy=RetryPolicy(
            max_attempts=settings.MPC_KEY_FETCH_ATTEMPTS,
            delay_s=settings.MPC_KEY_FETCH_DELAY_MS / 1000,
        ),
        finalize_timeout_s=settings.MPC_FINALIZE_TIMEOUT_S,
        poll_interval_s=settings.MPC_POLL_INTERVAL_MS / 1000,
    )


def build_relay(settings: Settings) -> RelayContainer:
    gateway = build_gateway(settings)
    ledger = LedgerClient.from_settings(settings)
    intent_store = LedgerIntentStore(ledger)
    service = MatchAndSettleService(
        intent_store=intent_store,
        gateway=gateway,
        settlement=SettlementBuilder(ledger, intent_store),
        reconciliation=ReconciliationService(ledger, intent_store),
        batch_max_per_side=settings.BATCH_MAX_PER_SIDE,
    )
    logger.info(
        "Relay ready: rpc=%s program=%s operator=%s",
        settings.SOLANA_RPC_URL, ledger.program_id, ledger.operator,
    )
    return RelayContainer(ledger=ledger, gateway=gateway, service=service)
