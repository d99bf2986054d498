import logging
import uuid
from pathlib import Path
from fastapi import UploadFile
from app.core.config import settings
from app.core.errors import BadRequest

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

# Public URL prefix under which UPLOAD_DIR is mounted
IMAGE_URL_PREFIX = "/images"


class ImageStorage:
    def __init__(self, upload_dir: str | None = None, max_file_size: int | None = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_file_size = max_file_size or settings.MAX_FILE_SIZE
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def save_image(self, file: UploadFile) -> tuple[str, str]:
        """Validate and save an uploaded image, returning (file_path, filename)"""
        if not file.filename:
            raise BadRequest("image filename is required")

        file_ext = Path(file.filename).suffix.lower()
        if file_ext not in ALLOWED_IMAGE_EXTENSIONS:
            logger.info("Rejected upload %r: unsupported type", file.filename)
            raise BadRequest(
                f"image type not supported. Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}"
            )

        # Read one byte past the limit so oversized files are detected
        # without loading arbitrarily large bodies
        content = await file.read(self.max_file_size + 1)
        if not content:
            raise BadRequest("image file is empty")
        if len(content) > self.max_file_size:
            logger.info("Rejected upload %r: larger than %d bytes", file.filename, self.max_file_size)
            raise BadRequest("image file is too large")

        # Generate unique filename
        unique_filename = f"{uuid.uuid4()}{file_ext}"
        file_path = self.upload_dir / unique_filename
        with open(file_path, "wb") as f:
            f.write(content)

        logger.info("Saved image %s (%d bytes)", unique_filename, len(content))
        return str(file_path), unique_filename

    @staticmethod
    def public_path(filename: str) -> str:
        """Public URL path for a stored image"""
        return f"{IMAGE_URL_PREFIX}/{filename}"

    def get_file_path(self, filename: str) -> Path:
        """Get full path to a stored image"""
        return self.upload_dir / filename

    def delete_file(self, filename: str) -> bool:
        """Delete a stored image"""
        file_path = self.get_file_path(filename)
        if file_path.exists():
            file_path.unlink()
            return True
        return False

    def list_files(self) -> list[Path]:
        """All regular files currently in the image directory"""
        return [path for path in self.upload_dir.iterdir() if path.is_file()]


storage = ImageStorage()
