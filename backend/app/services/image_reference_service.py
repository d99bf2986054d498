from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Set
from sqlalchemy.orm import Session
from app.models.post import Post
from app.models.user import User
from app.storage.local_storage import IMAGE_URL_PREFIX, ImageStorage


class ImageReferenceService:
    """Service for tracking which stored images are still referenced by rows"""

    @staticmethod
    def filename_from_public_path(public_path: Optional[str]) -> Optional[str]:
        """
        Extract the stored filename from a public image path.
        Paths outside /images (external URLs, client-supplied values) return None.
        """
        if not public_path:
            return None

        prefix = f"{IMAGE_URL_PREFIX}/"
        if not public_path.startswith(prefix):
            return None

        filename = public_path[len(prefix):]
        # Nested paths never come from the storage layer
        if not filename or "/" in filename:
            return None
        return filename

    @staticmethod
    def get_referenced_filenames(db: Session) -> Set[str]:
        """
        Collect every stored filename referenced by a user avatar, a post image
        or a post's avatar snapshot.
        """
        referenced = set()

        paths: List[Optional[str]] = [row[0] for row in db.query(User.image).all()]
        for image, avatar in db.query(Post.image, Post.avatar).all():
            paths.append(image)
            paths.append(avatar)

        for path in paths:
            filename = ImageReferenceService.filename_from_public_path(path)
            if filename:
                referenced.add(filename)

        return referenced

    @staticmethod
    def get_orphaned_images(
        db: Session,
        storage: ImageStorage,
        grace_minutes: int = 0,
        now: Optional[datetime] = None,
    ) -> List[Path]:
        """
        Find stored images not referenced by any row.
        Files modified within the grace period are skipped, since their row
        may not be committed yet.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(minutes=grace_minutes)
        referenced = ImageReferenceService.get_referenced_filenames(db)

        orphaned = []
        for path in storage.list_files():
            if path.name in referenced:
                continue
            modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
            if modified > cutoff:
                continue
            orphaned.append(path)

        return orphaned


image_reference_service = ImageReferenceService()
