from fastapi import Header, HTTPException, Request, status

from app.container import Container


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_current_user_id(x_user_id: int | None = Header(default=None)) -> int:
    """Caller identity set by the upstream authentication layer."""
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return x_user_id
