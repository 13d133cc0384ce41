"""
Delete the stored files of receipts invalidated by mark-unpaid.

Usage: python -m rental_service.scripts.purge_receipts
"""
import logging

from shared.core.config import settings
from shared.core.database import SessionLocal
from rental_service.app import models  # noqa: F401
from rental_service.app.dependencies import get_blob_store
from rental_service.app.services.receipt_service import ReceiptEngine

logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(level=settings.LOG_LEVEL)
    db = SessionLocal()
    try:
        purged = ReceiptEngine(get_blob_store()).purge_invalidated(db)
        logger.info(f"Purged {purged} invalidated receipts")
    finally:
        db.close()


if __name__ == "__main__":
    main()
