import logging
from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.api.schemas import AuthResponse, CamelModel, TokenUser
from app.core.database import get_db
from app.core.errors import BadRequest, Conflict, Unauthorized, UNEXPECTED_ERROR_MESSAGE
from app.core.security import verify_password, get_password_hash, create_access_token
from app.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# Same message for unknown usernames and wrong passwords so responses
# do not reveal which usernames exist
INVALID_LOGIN_MESSAGE = "invalid username or password"


class SignUpRequest(CamelModel):
    # Required fields are checked in the handler to answer 400 rather than 422
    username: Optional[str] = None
    password: Optional[str] = None
    display_name: Optional[str] = None
    image: Optional[str] = None
    bio: Optional[str] = None


class SignInRequest(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token(user.user_id, user.username)
    return AuthResponse(token=token, user=TokenUser(user_id=user.user_id, username=user.username))


@router.post("/sign-up", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(sign_up_data: Optional[SignUpRequest] = None, db: Session = Depends(get_db)):
    """Register a new user and issue an access token"""
    sign_up_data = sign_up_data or SignUpRequest()
    if not sign_up_data.username or not sign_up_data.password:
        raise BadRequest("username and password are required fields")

    try:
        # Explicit check gives a clear error; the unique constraint still
        # catches two concurrent sign-ups for the same username below
        existing_user = db.query(User).filter(
            User.username == sign_up_data.username
        ).first()
        if existing_user:
            raise Conflict("username already taken")

        db_user = User(
            username=sign_up_data.username,
            hashed_password=get_password_hash(sign_up_data.password),
            display_name=sign_up_data.display_name,
            image=sign_up_data.image,
            bio=sign_up_data.bio,
        )
        db.add(db_user)
        db.commit()
        # Refresh to load generated fields (user_id, created_at)
        db.refresh(db_user)
    except HTTPException:
        db.rollback()
        raise
    except IntegrityError:
        db.rollback()
        raise Conflict("username already taken")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Database error during sign-up")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=UNEXPECTED_ERROR_MESSAGE
        )
    except Exception:
        # Hashing or anything else unexpected - never expose internals
        db.rollback()
        logger.exception("Unexpected error during sign-up")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=UNEXPECTED_ERROR_MESSAGE
        )

    logger.info("Signed up user %s (id=%d)", db_user.username, db_user.user_id)
    return _auth_response(db_user)


@router.post("/sign-in", response_model=AuthResponse)
async def sign_in(body: Any = Body(None), db: Session = Depends(get_db)):
    """Verify credentials and issue an access token"""
    # Missing or malformed fields are a failed login, not a bad request
    try:
        credentials = SignInRequest.model_validate(body or {})
    except ValidationError:
        raise Unauthorized("invalid login")
    if not credentials.username or not credentials.password:
        raise Unauthorized("invalid login")

    user = db.query(User).filter(User.username == credentials.username).first()

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.info("Failed sign-in for username %r", credentials.username)
        raise Unauthorized(INVALID_LOGIN_MESSAGE)

    return _auth_response(user)
