from uuid import UUID

from fastapi import HTTPException, Request


def get_current_owner(request: Request) -> UUID:
    """Extract the seller id from the X-User-Id header.

    Session handling lives in the identity provider in front of this
    service; it forwards the authenticated seller in this header.
    """
    user_id_header = request.headers.get("X-User-Id")
    if not user_id_header:
        raise HTTPException(status_code=400, detail="X-User-Id header is required")
    try:
        return UUID(user_id_header)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-User-Id header") from None
