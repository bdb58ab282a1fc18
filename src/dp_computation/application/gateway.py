"""Computation gateways: produce the attestation a plan is settled with.

LocalComputationGateway: development stub, no network, fixed signature.
NetworkComputationGateway: full MPC round trip:
    1. fetch the MXE public key (bounded retry)
    2. ephemeral x25519 session → shared secret
    3. encrypt the serialized batch under a fresh nonce
    4. queue the job at a random computation offset
    5. poll until finalized (bounded wait)
    6. decrypt the circuit's fills and require they equal the local plan
No step falls back to an unverified plan.
"""
import asyncio
import logging
import secrets
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

import httpx

from src.dp_common.enums import JobState
from src.dp_common.errors import (
    AttestationMismatchError,
    ComputationFailedError,
    ComputationTimeoutError,
    KeyUnavailableError,
    VerificationError,
)
from src.dp_common.retry import RetryExhaustedError, RetryPolicy, poll_until
from src.dp_computation.domain.layout import (
    deserialize_fills,
    plan_digest,
    resolve_fills,
    serialize_intents,
)
from src.dp_computation.domain.models import EncryptedJob, JobStatus
from src.dp_computation.infrastructure.cipher import NONCE_SIZE, EphemeralSession
from src.dp_computation.infrastructure.network_client import MpcNetworkClient
from src.dp_intent.domain.models import Intent
from src.dp_matching.domain.models import AttestationToken, ExecutionPlan

logger = logging.getLogger(__name__)

LOCAL_STUB_SIGNATURE = "LOCAL_STUB_SIGNATURE"


class ComputationGatewayProtocol(Protocol):
    async def verify(
        self, intents: Sequence[Intent], plan: ExecutionPlan
    ) -> AttestationToken: ...

    async def close(self) -> None: ...


def _random_offset() -> int:
    return int.from_bytes(secrets.token_bytes(8), "little")


class LocalComputationGateway:
    async def verify(self, intents: Sequence[Intent], plan: ExecutionPlan) -> AttestationToken:
        logger.info("Local verification stub for market %s (%d fills)", plan.market, len(plan.fills))
        return AttestationToken(signature=LOCAL_STUB_SIGNATURE, plan_digest=plan_digest(plan))

    async def close(self) -> None:
        return None


class NetworkComputationGateway:
    def __init__(
        self,
        client: MpcNetworkClient,
        comp_def_id: str,
        cluster_offset: int | None,
        key_policy: RetryPolicy,
        finalize_timeout_s: float,
        poll_interval_s: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        offset_factory: Callable[[], int] = _random_offset,
    ) -> None:
        self._client = client
        self._comp_def_id = comp_def_id
        self._cluster_offset = cluster_offset
        self._key_policy = key_policy
        self._finalize_timeout_s = finalize_timeout_s
        self._poll_interval_s = poll_interval_s
        self._sleep = sleep
        self._new_offset = offset_factory

    async def verify(self, intents: Sequence[Intent], plan: ExecutionPlan) -> AttestationToken:
        if not intents:
            raise VerificationError("No intents to verify")
        network_key = await self._fetch_network_key()

        try:
            session = EphemeralSession(network_key)
        except ValueError as e:
            raise VerificationError(f"Unusable MPC network public key: {e}") from e

        with session:
            nonce = secrets.token_bytes(NONCE_SIZE)
            job = EncryptedJob(
                offset=self._new_offset(),
                ciphertexts=session.encrypt(serialize_intents(intents), nonce),
                public_key=session.public_key,
                nonce=nonce,
                record_count=len(intents),
            )
            try:
                await self._client.submit_job(job, self._comp_def_id, self._cluster_offset)
            except httpx.HTTPError as e:
                raise ComputationFailedError(f"job submission failed: {e}") from e

            status = await self._await_finalization(job.offset)
            if not status.signature:
                raise ComputationFailedError(f"computation {job.offset} finalized without signature")
            if status.output_nonce is None:
                raise ComputationFailedError(f"computation {job.offset} returned no output nonce")
            try:
                values = session.decrypt(status.output, status.output_nonce)
            except ValueError as e:
                raise ComputationFailedError(f"undecryptable output: {e}") from e

        network_fills = resolve_fills(deserialize_fills(values), intents)
        self._require_same_fills(network_fills, plan)
        logger.info(
            "Computation %d verified %d fills for market %s",
            job.offset, len(plan.fills), plan.market,
        )
        return AttestationToken(
            signature=status.signature,
            plan_digest=plan_digest(plan),
            computation_offset=job.offset,
        )

    async def _fetch_network_key(self) -> bytes:
        try:
            return await poll_until(
                self._client.fetch_public_key,
                self._key_policy,
                retry_on=(httpx.HTTPError,),
                what="MPC network public key",
                sleep=self._sleep,
            )
        except RetryExhaustedError as e:
            raise KeyUnavailableError(e.attempts) from e

    async def _await_finalization(self, offset: int) -> JobStatus:
        try:
            async with asyncio.timeout(self._finalize_timeout_s):
                while True:
                    try:
                        status = await self._client.get_job(offset)
                    except httpx.HTTPError as e:
                        raise ComputationFailedError(f"status poll failed: {e}") from e
                    if status.state == JobState.FINALIZED:
                        return status
                    if status.state == JobState.FAILED:
                        raise ComputationFailedError(status.error or f"computation {offset} aborted")
                    await self._sleep(self._poll_interval_s)
        except TimeoutError as e:
            raise ComputationTimeoutError(offset, self._finalize_timeout_s) from e

    @staticmethod
    def _require_same_fills(network_fills: list, plan: ExecutionPlan) -> None:
        if len(network_fills) != len(plan.fills):
            raise AttestationMismatchError(
                f"network produced {len(network_fills)} fills, local plan has {len(plan.fills)}"
            )
        for n, (remote, local) in enumerate(zip(network_fills, plan.fills)):
            if remote != local:
                raise AttestationMismatchError(f"fill {n} differs")

    async def close(self) -> None:
        await self._client.close()
