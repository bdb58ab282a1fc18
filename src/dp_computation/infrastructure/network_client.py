"""HTTP client for the MPC network gateway.

Endpoints:
    GET  /v1/mxe/public-key            → {"publicKey": hex | null}  (404 until published)
    POST /v1/computations              → 202, queues an encrypted job
    GET  /v1/computations/{offset}     → {"state", "signature", "output", "outputNonce", "error"}

Binary fields travel as lowercase hex. A body that does not parse into these
shapes is reported as ComputationFailedError.
"""

import logging

import httpx

from src.dp_common.enums import JobState
from src.dp_common.errors import ComputationFailedError
from src.dp_computation.domain.models import EncryptedJob, JobStatus

logger = logging.getLogger(__name__)


class MpcNetworkClient:
    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._http = httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=timeout_s, transport=transport
        )

    async def fetch_public_key(self) -> bytes | None:
        """The MXE x25519 public key, or None while it is not yet published."""
        resp = await self._http.get("/v1/mxe/public-key")
        if resp.status_code == httpx.codes.NOT_FOUND:
            return None
        resp.raise_for_status()
        try:
            key_hex = resp.json().get("publicKey")
            return bytes.fromhex(key_hex) if key_hex else None
        except (ValueError, TypeError, AttributeError) as e:
            raise ComputationFailedError(f"malformed public key response: {e}") from e

    async def submit_job(
        self, job: EncryptedJob, comp_def_id: str, cluster_offset: int | None
    ) -> None:
        payload = {
            "computationOffset": str(job.offset),
            "compDefId": comp_def_id,
            "clusterOffset": cluster_offset,
            "publicKey": job.public_key.hex(),
            "nonce": job.nonce.hex(),
            "ciphertexts": [ct.hex() for ct in job.ciphertexts],
            "recordCount": job.record_count,
        }
        resp = await self._http.post("/v1/computations", json=payload)
        resp.raise_for_status()
        logger.info("Queued computation %d (%d ciphertexts)", job.offset, len(job.ciphertexts))

    async def get_job(self, offset: int) -> JobStatus:
        resp = await self._http.get(f"/v1/computations/{offset}")
        resp.raise_for_status()
        try:
            body = resp.json()
            nonce_hex = body.get("outputNonce")
            return JobStatus(
                offset=offset,
                state=JobState(body["state"]),
                signature=body.get("signature"),
                output=[bytes.fromhex(ct) for ct in body.get("output") or []],
                output_nonce=bytes.fromhex(nonce_hex) if nonce_hex else None,
                error=body.get("error"),
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ComputationFailedError(f"malformed status for computation {offset}: {e}") from e

    async def close(self) -> None:
        await self._http.aclose()
