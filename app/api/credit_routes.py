from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_container, get_current_user_id
from app.api.schemas import AddCreditsRequest, UseCreditsRequest
from app.container import Container
from app.credits.exceptions import UserNotFoundError

router = APIRouter(prefix="/credits", tags=["credits"])


@router.get("")
def read_credits(
    user_id: int = Depends(get_current_user_id),
    container: Container = Depends(get_container),
) -> dict:
    return {"creditBalance": container.ledger.get_balance(user_id)}


@router.post("/use")
def use_credits(
    body: UseCreditsRequest,
    user_id: int = Depends(get_current_user_id),
    container: Container = Depends(get_container),
) -> dict:
    return {"creditBalance": container.ledger.spend(user_id, body.amount)}


@router.post("/admin/add")
def add_credits(
    body: AddCreditsRequest,
    user_id: int = Depends(get_current_user_id),
    container: Container = Depends(get_container),
) -> dict:
    """Admin grant of credits to any user."""
    caller = container.user_repo.find_by_id(user_id)
    if caller is None:
        raise UserNotFoundError(f"User {user_id} not found")
    if not caller.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    balance = container.ledger.credit(
        body.userId, body.amount, f"Added {body.amount} credits.", actor_id=user_id
    )
    return {"creditBalance": balance}
