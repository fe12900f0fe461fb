"""Initialize the database and report practice statistics."""
import logging

from hanzidrill.config import ensure_directories, settings
from hanzidrill.logging_config import setup_logging
from hanzidrill.models.base import SessionLocal, init_db
from hanzidrill.models.practice_models import PracticeMode
from hanzidrill.services.practice_service import PracticeService

logger = logging.getLogger(__name__)


def main() -> None:
    """Prepare storage and log per-mode statistics."""
    ensure_directories()
    setup_logging("Starting hanzidrill ...")

    init_db()
    logger.info("Database initialized at %s", settings.database.url)

    db = SessionLocal()
    try:
        service = PracticeService(db)
        for mode in PracticeMode:
            stats = service.get_stats(mode)
            logger.info(
                "%s: %d words, %d learned, %d mastered, %d due, buckets %s",
                mode.value,
                stats.total_words,
                stats.learned,
                stats.mastered,
                stats.due_for_review,
                stats.buckets,
            )
    finally:
        db.close()


if __name__ == "__main__":
    main()
