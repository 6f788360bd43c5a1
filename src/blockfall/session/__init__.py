"""Session persistence for blockfall.

- BlobStore / MemoryStore / JsonFileStore: named text blobs
- SessionRecord and the validated codec for the saved game
"""

from .store import BlobStore, MemoryStore, JsonFileStore
from .codec import (
    HIGH_SCORE_KEY,
    SESSION_KEY,
    SessionDecodeError,
    SessionRecord,
    decode_high_score,
    decode_session,
    dumps_high_score,
    dumps_session,
    encode_session,
    loads_session,
)

__all__ = [
    "BlobStore",
    "MemoryStore",
    "JsonFileStore",
    "HIGH_SCORE_KEY",
    "SESSION_KEY",
    "SessionDecodeError",
    "SessionRecord",
    "decode_high_score",
    "decode_session",
    "dumps_high_score",
    "dumps_session",
    "encode_session",
    "loads_session",
]
