from typing import Optional
from fastapi import APIRouter, Depends, File as FastAPIFile, Form, UploadFile
from sqlalchemy.orm import Session
from app.api.dependencies import CurrentUser, get_current_user
from app.api.schemas import CamelModel, UserResponse
from app.core.database import get_db
from app.core.errors import NotFound
from app.models.user import User
from app.storage.local_storage import storage

# Every route here requires a valid access token
router = APIRouter(
    prefix="/user",
    tags=["profile"],
    dependencies=[Depends(get_current_user)],
)


class ProfileUpdate(CamelModel):
    display_name: Optional[str] = None
    bio: Optional[str] = None


def _get_own_user(db: Session, current_user: CurrentUser) -> User:
    # Scoped by the authenticated id so a user can only reach their own row
    user = db.query(User).filter(User.user_id == current_user.user_id).first()
    if not user:
        raise NotFound(f"could not find userId: {current_user.user_id}")
    return user


@router.get("", response_model=UserResponse)
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the authenticated user's profile"""
    return _get_own_user(db, current_user)


@router.patch("/profile", response_model=UserResponse)
async def update_profile_with_image(
    image: UploadFile = FastAPIFile(...),
    display_name: Optional[str] = Form(None, alias="displayName"),
    bio: Optional[str] = Form(None),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update profile fields and replace the avatar image"""
    user = _get_own_user(db, current_user)

    _, filename = await storage.save_image(image)
    user.image = storage.public_path(filename)
    # Multipart cannot express null, so absent fields keep their value
    if display_name is not None:
        user.display_name = display_name
    if bio is not None:
        user.bio = bio

    db.commit()
    db.refresh(user)
    return user


@router.patch("/profile/no-image", response_model=UserResponse)
async def update_profile(
    profile_update: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update profile fields, leaving the avatar unchanged"""
    user = _get_own_user(db, current_user)

    # Omitted fields are left alone; explicit nulls clear the field
    for field, value in profile_update.model_dump(exclude_unset=True).items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user
