"""
Generate the missing receipts of paid payments.

Usage: python -m rental_service.scripts.sync_receipts
"""
import logging

from shared.core.config import settings
from shared.core.database import SessionLocal
from rental_service.app import models  # noqa: F401
from rental_service.app.crud.financials import payments_crud
from rental_service.app.dependencies import get_blob_store, get_receipt_signer
from rental_service.app.services.receipt_service import ReceiptEngine

logger = logging.getLogger(__name__)


def sync_receipts(db, engine: ReceiptEngine) -> dict:
    generated, failed = 0, 0
    for payment in payments_crud.get_paid_without_receipt(db):
        try:
            engine.generate(db, payment.id)
            generated += 1
        except Exception:
            logger.exception(f"Could not generate receipt for payment {payment.id}")
            failed += 1

    logger.info(f"Receipt sync done: {generated} generated, {failed} failed")
    return {"generated": generated, "failed": failed}


def main():
    logging.basicConfig(level=settings.LOG_LEVEL)
    db = SessionLocal()
    try:
        sync_receipts(db, ReceiptEngine(get_blob_store(), get_receipt_signer()))
    finally:
        db.close()


if __name__ == "__main__":
    main()
