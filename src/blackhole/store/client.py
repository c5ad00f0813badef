"""
Block Store Client
==================

Async HTTP client for the remote block store (httpx).

Per channel the protocol is two-phase:
    1. check:  send the identities, receive the subset the store lacks
    2. upload: send only the missing payloads, in bounded batches

Failure policy:
    - An empty identity list is answered locally, without a request
    - A failed check yields CheckResult(ok=False, missing=[]), so nothing
      is uploaded for that channel; the caller can tell it apart from a
      genuine "nothing missing" answer
    - A failed upload batch is logged and reported in its BatchOutcome;
      the remaining batches are still attempted
    - Blocks that fail validation are skipped, the rest of their batch is sent
    - Nothing is retried automatically

Example:
    async with BlockStoreClient("http://localhost:8081/api/v1/blocks") as client:
        sync = await client.sync_channel(payloads_by_hex_id, Channel.LUMA)
        print(sync.uploaded, sync.failed_batches)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from blackhole.errors import NetworkError, ValidationError
from blackhole.models.block import Channel
from blackhole.models.wire import (
    BlockBatchUploadRequest,
    BlockCheckRequest,
    BlockCheckResponse,
    BlockDto,
)
from blackhole.store.batching import partition


logger = logging.getLogger(__name__)


DEFAULT_BATCH_SIZE = 1000


@dataclass(frozen=True, slots=True)
class CheckResult:
    """
    Outcome of one existence check.
    
    Attributes:
        missing: Identities the store reported as absent
        ok: False when the check itself failed (missing is then empty)
        error: Failure description when ok is False
    """
    
    missing: List[str]
    ok: bool = True
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    """
    Outcome of one upload batch.
    
    Attributes:
        index: Zero-based batch number
        size: Entries in the batch before validation
        sent: Entries actually sent
        skipped: Entries dropped by validation
        ok: Whether the request succeeded (True when nothing had to be sent)
        error: Failure description when ok is False
    """
    
    index: int
    size: int
    sent: int
    skipped: int
    ok: bool
    error: Optional[str] = None


@dataclass
class ChannelSync:
    """Check-then-upload result for one channel of one image."""
    
    channel: Channel
    unique: int
    check: CheckResult
    batches: List[BatchOutcome] = field(default_factory=list)
    
    @property
    def missing(self) -> int:
        return len(self.check.missing)
    
    @property
    def uploaded(self) -> int:
        return sum(b.sent for b in self.batches if b.ok)
    
    @property
    def failed_batches(self) -> int:
        return sum(1 for b in self.batches if not b.ok)
    
    @property
    def ok(self) -> bool:
        return self.check.ok and self.failed_batches == 0
    
    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "channel": self.channel.value,
            "unique": self.unique,
            "check_ok": self.check.ok,
            "missing": self.missing,
            "uploaded": self.uploaded,
            "failed_batches": self.failed_batches,
        }


class BlockStoreClientMetrics:
    """Metrics for BlockStoreClient observability."""
    
    __slots__ = (
        "checks_sent",
        "check_failures",
        "batches_sent",
        "batch_failures",
        "blocks_uploaded",
        "blocks_skipped",
    )
    
    def __init__(self) -> None:
        self.checks_sent: int = 0
        self.check_failures: int = 0
        self.batches_sent: int = 0
        self.batch_failures: int = 0
        self.blocks_uploaded: int = 0
        self.blocks_skipped: int = 0
    
    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "checks_sent": self.checks_sent,
            "check_failures": self.check_failures,
            "batches_sent": self.batches_sent,
            "batch_failures": self.batch_failures,
            "blocks_uploaded": self.blocks_uploaded,
            "blocks_skipped": self.blocks_skipped,
        }


def to_block_dto(identity: str, payload: bytes, channel: Channel) -> BlockDto:
    """
    Build a validated upload entry.
    
    Raises:
        ValidationError: If the identity is not 16-128 hex characters or
            the payload is empty
    """
    try:
        return BlockDto(hash=identity, data=payload, type=channel)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid block {identity[:16]!r}: {e.errors()[0]['msg']}")


class BlockStoreClient:
    """
    Async client for the block store check/upload endpoints.
    
    Attributes:
        base_url: Block endpoint prefix, e.g. http://host:8081/api/v1/blocks
        batch_size: Maximum blocks per upload request
        metrics: Operational metrics
    """
    
    def __init__(
        self,
        base_url: str,
        batch_size: int = DEFAULT_BATCH_SIZE,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize block store client.
        
        Args:
            base_url: Block endpoint prefix
            batch_size: Maximum blocks per upload request (>= 1)
            timeout: Per-request timeout in seconds, applied to every request
                even when a pre-built client is passed in
            client: Pre-built httpx client (owned by the caller)
        """
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        
        self.base_url = base_url.rstrip("/")
        self.batch_size = batch_size
        self.timeout = timeout
        
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        
        self.metrics = BlockStoreClientMetrics()
    
    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
    
    async def __aenter__(self) -> "BlockStoreClient":
        """Async context manager entry."""
        return self
    
    async def __aexit__(self, *args) -> None:
        """Async context manager exit."""
        await self.aclose()
    
    async def _post(self, endpoint: str, channel: Channel, body: dict) -> httpx.Response:
        url = f"{self.base_url}/{endpoint}"
        try:
            response = await self._client.post(
                url,
                params={"type": channel.value},
                json=body,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NetworkError(f"POST {url} failed: {e}")
        return response
    
    async def check_missing(self, identities: Sequence[str], channel: Channel) -> CheckResult:
        """
        Ask the store which identities it lacks.
        
        Args:
            identities: Hex identities (length-prefixed digests)
            channel: Channel the identities belong to
            
        Returns:
            CheckResult; ok=False with no missing entries if the check failed
        """
        if not identities:
            return CheckResult(missing=[])
        
        self.metrics.checks_sent += 1
        request = BlockCheckRequest(hashes=list(identities))
        
        try:
            response = await self._post("check", channel, request.model_dump(mode="json"))
            try:
                missing = BlockCheckResponse.model_validate(response.json()).missing
            except (ValueError, PydanticValidationError) as e:
                raise NetworkError(f"Malformed check response: {e}")
        except NetworkError as e:
            self.metrics.check_failures += 1
            logger.error(f"Error checking missing {channel.value} blocks: {e}")
            return CheckResult(missing=[], ok=False, error=str(e))
        
        existing = len(identities) - len(missing)
        logger.info(
            f"Checked {len(identities)} {channel.value} blocks → "
            f"{existing} exist, {len(missing)} missing"
        )
        return CheckResult(missing=missing)
    
    async def upload_blocks(
        self,
        blocks: Sequence[Tuple[str, bytes]],
        channel: Channel,
    ) -> List[BatchOutcome]:
        """
        Upload blocks in batches of at most batch_size.
        
        Args:
            blocks: (hex identity, payload) pairs, uploaded in this order
            channel: Channel of every block
            
        Returns:
            One BatchOutcome per batch, in order
        """
        if not blocks:
            logger.info(f"No {channel.value} blocks to upload")
            return []
        
        batches = partition(blocks, self.batch_size)
        outcomes = []
        for i, batch in enumerate(batches):
            outcomes.append(await self._upload_batch(i, len(batches), batch, channel))
        return outcomes
    
    async def _upload_batch(
        self,
        index: int,
        count: int,
        batch: Sequence[Tuple[str, bytes]],
        channel: Channel,
    ) -> BatchOutcome:
        entries = []
        for identity, payload in batch:
            try:
                entries.append(to_block_dto(identity, payload, channel))
            except ValidationError as e:
                logger.warning(f"Skipping {channel.value} block: {e}")
        
        skipped = len(batch) - len(entries)
        self.metrics.blocks_skipped += skipped
        
        if not entries:
            logger.warning(f"Batch {index + 1}/{count} has no valid blocks, not sent")
            return BatchOutcome(index=index, size=len(batch), sent=0, skipped=skipped, ok=True)
        
        request = BlockBatchUploadRequest(blocks=entries)
        self.metrics.batches_sent += 1
        try:
            await self._post("upload", channel, request.model_dump(mode="json"))
        except NetworkError as e:
            self.metrics.batch_failures += 1
            logger.error(f"Upload failed for batch {index + 1}/{count}: {e}")
            return BatchOutcome(
                index=index,
                size=len(batch),
                sent=len(entries),
                skipped=skipped,
                ok=False,
                error=str(e),
            )
        
        self.metrics.blocks_uploaded += len(entries)
        logger.info(
            f"Uploaded {channel.value} batch {index + 1}/{count} ({len(entries)} blocks)"
        )
        return BatchOutcome(
            index=index,
            size=len(batch),
            sent=len(entries),
            skipped=skipped,
            ok=True,
        )
    
    async def sync_channel(self, payloads: Mapping[str, bytes], channel: Channel) -> ChannelSync:
        """
        Check one channel's unique payloads and upload the missing ones.
        
        Args:
            payloads: Hex identity -> payload, in first-seen order
            channel: Channel of the payloads
            
        Returns:
            ChannelSync with the check result and per-batch outcomes
        """
        if not payloads:
            logger.info(f"No {channel.value} blocks to upload")
            return ChannelSync(channel=channel, unique=0, check=CheckResult(missing=[]))
        
        check = await self.check_missing(list(payloads), channel)
        sync = ChannelSync(channel=channel, unique=len(payloads), check=check)
        
        if not check.ok:
            return sync
        if not check.missing:
            logger.info(f"All {channel.value} blocks already exist, no upload needed")
            return sync
        
        upload = []
        for identity in check.missing:
            payload = payloads.get(identity.lower())
            if payload is None:
                logger.warning(f"Store reported unknown {channel.value} block {identity}, ignoring")
                continue
            upload.append((identity, payload))
        
        logger.info(f"Uploading {len(upload)} missing {channel.value} blocks…")
        sync.batches = await self.upload_blocks(upload, channel)
        return sync
