"""
Background scheduler for periodic tasks.

This module manages background jobs that run on a schedule:
- Cleanup orphaned images: Runs every IMAGE_CLEANUP_INTERVAL_HOURS hours
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import SessionLocal
from app.services.image_reference_service import image_reference_service
from app.storage.local_storage import ImageStorage, storage
import logging

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def cleanup_orphaned_images(db: Session, image_storage: ImageStorage, grace_minutes: int) -> int:
    """
    Delete stored images that no user or post references any more.

    Replaced avatars are the usual source of orphans. Returns the number of
    files removed.
    """
    orphaned = image_reference_service.get_orphaned_images(
        db, image_storage, grace_minutes=grace_minutes)

    deleted = 0
    for path in orphaned:
        try:
            if image_storage.delete_file(path.name):
                deleted += 1
                logger.info(f"Deleted orphaned image: {path.name}")
        except OSError as e:
            logger.error(f"Error deleting orphaned image {path.name}: {str(e)}")

    return deleted


def cleanup_orphaned_images_job():
    """
    Background job wrapper with its own database session.
    """
    db = SessionLocal()
    try:
        deleted = cleanup_orphaned_images(db, storage, settings.ORPHAN_GRACE_MINUTES)
        if deleted > 0:
            logger.info(f"Cleanup job completed: Deleted {deleted} orphaned images")
        else:
            logger.info("Cleanup job completed: No orphaned images found")
    except Exception:
        logger.exception("Error in cleanup_orphaned_images_job")
    finally:
        db.close()


def start_scheduler():
    """
    Start the background scheduler.

    Called from the application lifespan on startup.
    """
    if not settings.ENABLE_IMAGE_CLEANUP:
        logger.info("Image cleanup disabled; background scheduler not started.")
        return

    if not scheduler.running:
        scheduler.add_job(
            cleanup_orphaned_images_job,
            trigger=IntervalTrigger(hours=settings.IMAGE_CLEANUP_INTERVAL_HOURS),
            id="cleanup_orphaned_images",
            name="Cleanup orphaned images",
            replace_existing=True
        )

        scheduler.start()
        logger.info(
            "Background scheduler started. Cleanup job scheduled to run every %d hours.",
            settings.IMAGE_CLEANUP_INTERVAL_HOURS,
        )


def stop_scheduler():
    """
    Stop the background scheduler.

    Called from the application lifespan on shutdown.
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped.")
