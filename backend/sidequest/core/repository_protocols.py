"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - The storage collaborator is accessed only through FileStorage
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass a plain fake object
    - Async in Protocol: URL generation may do IO in some backends, so callers
      always await it (and never while holding a DB transaction open)
"""

from typing import Protocol


class FileStorage(Protocol):
    """Contract for the object store that receives proof attachments."""
    async def get_upload_url(
        self, key: str, content_type: str, ttl_seconds: int,
    ) -> str: ...
    async def get_download_url(self, key: str, ttl_seconds: int) -> str: ...
