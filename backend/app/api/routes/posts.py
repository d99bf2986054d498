import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, File as FastAPIFile, Form, UploadFile, status
from sqlalchemy.orm import Session
from app.api.dependencies import CurrentUser, get_current_user
from app.api.schemas import CamelModel, PostResponse
from app.core.database import MAX_ROW_ID, get_db
from app.core.errors import BadRequest
from app.models.post import Post
from app.storage.local_storage import storage

logger = logging.getLogger(__name__)

# Every route here requires a valid access token
router = APIRouter(tags=["posts"], dependencies=[Depends(get_current_user)])


class PostCreate(CamelModel):
    text_content: Optional[str] = None
    display_name: Optional[str] = None
    avatar: Optional[str] = None


def _create_post(
    db: Session,
    current_user: CurrentUser,
    text_content: Optional[str],
    display_name: Optional[str],
    avatar: Optional[str],
    image: Optional[str] = None,
) -> Post:
    """
    Insert a post for the authenticated user.

    user_id and username always come from the token. display_name and avatar
    are stored exactly as the client sent them: they are a snapshot of the
    author at posting time, not a live view of the profile.
    """
    db_post = Post(
        user_id=current_user.user_id,
        username=current_user.username,
        display_name=display_name,
        avatar=avatar,
        text_content=text_content,
        image=image,
    )
    db.add(db_post)
    db.commit()
    db.refresh(db_post)
    logger.info("User %d created post %d", current_user.user_id, db_post.post_id)
    return db_post


@router.post("/new/post", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post_with_image(
    image: UploadFile = FastAPIFile(...),
    text_content: Optional[str] = Form(None, alias="textContent"),
    display_name: Optional[str] = Form(None, alias="displayName"),
    avatar: Optional[str] = Form(None),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a post with an attached image"""
    if not text_content:
        raise BadRequest("textContent is a required field")

    _, filename = await storage.save_image(image)
    return _create_post(
        db, current_user, text_content, display_name, avatar,
        image=storage.public_path(filename),
    )


@router.post("/new/post/no-image", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post: PostCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a text-only post"""
    if not post.text_content:
        raise BadRequest("textContent is a required field")

    return _create_post(db, current_user, post.text_content, post.display_name, post.avatar)


@router.get("/posts", response_model=List[PostResponse])
async def list_posts(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the authenticated user's posts, newest first"""
    return db.query(Post).filter(
        Post.user_id == current_user.user_id
    ).order_by(Post.post_id.desc()).all()


@router.delete("/posts/{post_id}", response_model=List[PostResponse])
async def delete_post(
    post_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete one of the authenticated user's posts.

    Returns the deleted posts. Someone else's post or a missing id matches
    nothing, so the result is an empty list and no row changes.
    """
    if post_id <= 0:
        raise BadRequest("postId must be a positive integer")
    if post_id > MAX_ROW_ID:
        return []

    posts = db.query(Post).filter(
        Post.post_id == post_id,
        Post.user_id == current_user.user_id
    ).all()

    deleted = [PostResponse.model_validate(post) for post in posts]
    for post in posts:
        db.delete(post)
    db.commit()

    return deleted
