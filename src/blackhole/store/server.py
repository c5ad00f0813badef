"""
Reference Block Store
=====================

Minimal in-memory block store speaking the check/upload protocol.

Intended for local development and integration tests; real deployments
point the client at a persistent store implementing the same contract.

Endpoints:
    GET  /health                          - Liveness probe
    POST /api/v1/blocks/check?type=LUMA   - Report identities not stored
    POST /api/v1/blocks/upload?type=LUMA  - Store a batch of blocks

Upload rules:
    - Every entry's hash must equal the length-prefixed digest of its data
    - Every entry's type must match the channel in the request target
    - Re-uploading an identical block is a no-op (idempotent)
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from blackhole import __version__
from blackhole.dedup.identity import LENGTH_PREFIXED_DIGEST
from blackhole.models.block import CHANNELS, Channel
from blackhole.models.wire import (
    BlockBatchUploadRequest,
    BlockCheckRequest,
    BlockCheckResponse,
)


logger = logging.getLogger(__name__)


DEFAULT_PREFIX = "/api/v1/blocks"


class InMemoryBlockStore:
    """
    Thread-safe per-channel map of hex identity -> payload.
    
    Identities are normalised to lowercase.
    """
    
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._blocks: Dict[Channel, Dict[str, bytes]] = {channel: {} for channel in CHANNELS}
    
    def missing(self, channel: Channel, identities: Sequence[str]) -> List[str]:
        """Identities (as given) that are not stored for this channel."""
        with self._lock:
            stored = self._blocks[channel]
            return [identity for identity in identities if identity.lower() not in stored]
    
    def put(self, channel: Channel, identity: str, payload: bytes) -> bool:
        """
        Store a block.
        
        Returns:
            True if the block was new, False if it was already present
        """
        with self._lock:
            stored = self._blocks[channel]
            key = identity.lower()
            if key in stored:
                return False
            stored[key] = payload
            return True
    
    def get(self, channel: Channel, identity: str) -> Optional[bytes]:
        """Stored payload, or None."""
        with self._lock:
            return self._blocks[channel].get(identity.lower())
    
    def count(self, channel: Channel) -> int:
        """Number of stored blocks for a channel."""
        with self._lock:
            return len(self._blocks[channel])


def create_app(
    store: Optional[InMemoryBlockStore] = None,
    prefix: str = DEFAULT_PREFIX,
) -> FastAPI:
    """
    Build the FastAPI application.
    
    Args:
        store: Backing store (a fresh one is created if None)
        prefix: Path prefix of the block endpoints
    """
    store = store or InMemoryBlockStore()
    
    app = FastAPI(
        title="Blackhole Block Store",
        description="In-memory reference block store",
        version=__version__,
    )
    app.state.store = store
    
    @app.get("/health")
    async def health() -> JSONResponse:
        """Liveness probe with per-channel block counts."""
        return JSONResponse({
            "status": "healthy",
            "blocks": {channel.value: store.count(channel) for channel in CHANNELS},
        })
    
    @app.post(f"{prefix}/check", response_model=BlockCheckResponse)
    async def check(
        request: BlockCheckRequest,
        block_type: Channel = Query(..., alias="type"),
    ) -> BlockCheckResponse:
        """Return the identities not stored for this channel."""
        missing = store.missing(block_type, request.hashes)
        logger.info(
            f"Check {block_type.value}: {len(request.hashes)} requested, {len(missing)} missing"
        )
        return BlockCheckResponse(missing=missing)
    
    @app.post(f"{prefix}/upload")
    async def upload(
        request: BlockBatchUploadRequest,
        block_type: Channel = Query(..., alias="type"),
    ) -> JSONResponse:
        """Store a batch of blocks after verifying type and identity."""
        for block in request.blocks:
            if block.type != block_type:
                raise HTTPException(
                    status_code=422,
                    detail=f"Block {block.hash} has type {block.type.value}, expected {block_type.value}",
                )
            expected = LENGTH_PREFIXED_DIGEST.hexdigest(block.data)
            if block.hash.lower() != expected:
                raise HTTPException(
                    status_code=422,
                    detail=f"Hash mismatch for block {block.hash}",
                )
        
        stored = sum(1 for block in request.blocks if store.put(block_type, block.hash, block.data))
        logger.info(
            f"Upload {block_type.value}: {len(request.blocks)} received, {stored} new"
        )
        return JSONResponse({"received": len(request.blocks), "stored": stored})
    
    return app


def run() -> None:
    """Serve the reference store with uvicorn."""
    import uvicorn
    
    from blackhole.config import settings, setup_logging
    
    setup_logging(settings)
    uvicorn.run(
        create_app(),
        host=settings.server.host,
        port=settings.server.port,
    )


if __name__ == "__main__":
    run()
