"""
Content Identity
================

Named digest schemes used as block identities.

Two schemes coexist and are NOT interchangeable:
    - RAW_DIGEST: SHA-256 over the payload bytes. Stored in containers
      as 32 raw bytes.
    - LENGTH_PREFIXED_DIGEST: SHA-256 over a 4-byte big-endian length
      followed by the payload. Sent to the block store as lowercase hex.

Each boundary picks one scheme by name; the container path always uses
RAW_DIGEST and the block store path always uses LENGTH_PREFIXED_DIGEST.
"""

import hashlib
import struct
from dataclasses import dataclass


DIGEST_SIZE = 32


@dataclass(frozen=True, slots=True)
class DigestScheme:
    """
    A versioned content identity function.
    
    Attributes:
        name: Stable scheme identifier
        length_prefixed: Hash a 4-byte big-endian length before the payload
    """
    
    name: str
    length_prefixed: bool
    
    def digest(self, payload: bytes) -> bytes:
        """Return the 32-byte identity of a payload."""
        h = hashlib.sha256()
        if self.length_prefixed:
            h.update(struct.pack(">I", len(payload)))
        h.update(payload)
        return h.digest()
    
    def hexdigest(self, payload: bytes) -> str:
        """Return the identity as lowercase hex."""
        return self.digest(payload).hex()


RAW_DIGEST = DigestScheme(name="sha256-raw-v1", length_prefixed=False)
LENGTH_PREFIXED_DIGEST = DigestScheme(name="sha256-length-prefixed-v1", length_prefixed=True)
