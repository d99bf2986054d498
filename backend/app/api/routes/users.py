from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.api.schemas import UserResponse
from app.core.database import MAX_ROW_ID, get_db
from app.core.errors import BadRequest, NotFound
from app.models.user import User

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
async def list_users(db: Session = Depends(get_db)):
    """List public profile fields for all users"""
    return db.query(User).order_by(User.user_id).all()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: Session = Depends(get_db)):
    """Get a single user's public profile"""
    if user_id <= 0:
        raise BadRequest("userId must be a positive integer")
    if user_id > MAX_ROW_ID:
        # No stored row can carry an id this large
        raise NotFound(f"could not find userId: {user_id}")

    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFound(f"could not find userId: {user_id}")

    return user
