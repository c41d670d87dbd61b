"""Request Dependencies — identity of the caller.

Invariants:
    - The caller's id comes from the X-User-Id header set by the upstream
      auth gateway and is trusted as-is (no authentication here)
    - A missing or malformed header is a 400 validation error
"""

from uuid import UUID

from fastapi import Header


async def get_current_user_id(
    x_user_id: UUID = Header(..., alias="X-User-Id"),
) -> UUID:
    return x_user_id
