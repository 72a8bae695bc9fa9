from __future__ import annotations

import hashlib
from typing import Literal, Optional

from assetpack.config import HASH_CHUNK_SIZE

Algo = Literal["sha1", "md5"]


def digest_file(path: str, algo: Optional[Algo] = "sha1", chunk_size: int = HASH_CHUNK_SIZE) -> Optional[str]:
    """
    Streaming hex digest of a file, or None when hashing is disabled (algo=None).
    """
    if algo is None:
        return None
    if algo not in ("sha1", "md5"):
        raise ValueError(f"Unsupported hash algo: {algo}")

    h = hashlib.new(algo)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            h.update(chunk)
    return h.hexdigest()
