"""User endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..database import get_db
from ..models import User
from ..schemas import UserResponse
from ..auth import PermissionChecker

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def get_users(
    role: str | None = None,
    current_user: User = Depends(PermissionChecker("canManageUsers")),
    db: Session = Depends(get_db)
):
    """Get all users, optionally filtered by role."""
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    users = query.order_by(User.name.asc()).all()
    return [UserResponse.model_validate(u) for u in users]
