import hashlib
import hmac
import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.database import scoped_transaction
from shared.core.exceptions import (
    ConflictError,
    ConstraintViolation,
    DataIncompleteError,
    ExternalStorageError,
    SigningError,
)
from shared.utils.clock import utcnow
from shared.utils.enums import PaymentStatus
from shared.utils.pdf_signer import ReceiptSigner
from shared.utils.receipt_pdf import (
    OwnerInfo, ReceiptPdfData, generate_receipt_pdf, period_label,
)
from shared.utils.storage_client import BlobStore
from ..crud.financials import payments_crud
from ..models.financials.payments import Payment
from ..models.financials.receipts import Receipt

logger = logging.getLogger(__name__)


def compute_verification_hash(payment_id, lease_id, payment_date: datetime, secret: str) -> str:
    """Keyed SHA-256 over the (payment, lease, payment date) triple."""
    message = f"{payment_id}-{lease_id}-{payment_date.isoformat()}"
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def receipt_storage_path(payment: Payment) -> str:
    due = payment.due_date
    return f"tenant_{payment.lease.tenant_id}/{due.year}/{due.month:02d}/receipt_{payment.id}.pdf"


def receipt_file_name(payment: Payment) -> str:
    label = period_label(payment.due_date).replace(" ", "_").lower()
    return f"receipt_{label}_{payment.id}.pdf"


def ensure_chain(payment: Payment) -> None:
    lease = payment.lease
    if lease is None or lease.tenant is None or lease.room is None or lease.room.property is None:
        raise DataIncompleteError(
            "Incomplete data to generate the receipt",
            {"payment_id": str(payment.id)},
        )


class ReceiptArtifact(BaseModel):
    content: bytes
    storage_path: str
    verification_hash: str
    signed: bool = False


class ReceiptEngine:
    """Builds, stores and serves the receipt of a paid payment."""

    def __init__(
        self,
        blob_store: BlobStore,
        signer: Optional[ReceiptSigner] = None,
        renderer: Callable[[ReceiptPdfData, OwnerInfo], bytes] = generate_receipt_pdf,
        bucket: str = settings.RECEIPTS_BUCKET,
        secret: str = settings.HASH_SECRET,
        verification_url: str = settings.VERIFICATION_URL,
    ):
        self.blob_store = blob_store
        self.signer = signer
        self.renderer = renderer
        self.bucket = bucket
        self.secret = secret
        self.verification_url = verification_url.rstrip("/")
        self.owner = OwnerInfo(
            name=settings.OWNER_NAME,
            company=settings.OWNER_COMPANY,
            address=settings.OWNER_ADDRESS,
            postal_code=settings.OWNER_POSTAL_CODE,
            city=settings.OWNER_CITY,
            siret=settings.OWNER_SIRET,
        )

    def verification_hash(self, payment: Payment) -> str:
        return compute_verification_hash(
            payment.id, payment.lease_id, payment.payment_date, self.secret)

    # ------------------------------------------------------------------
    # Artifact
    # ------------------------------------------------------------------
    def build_artifact(self, payment: Payment) -> ReceiptArtifact:
        ensure_chain(payment)
        if payment.payment_date is None:
            raise ConflictError("Receipts can only be generated for paid payments")

        lease = payment.lease
        prop = lease.room.property
        verification_hash = self.verification_hash(payment)

        content = self.renderer(
            ReceiptPdfData(
                payment_id=str(payment.id),
                period=payment.due_date,
                payment_date=payment.payment_date,
                tenant_name=lease.tenant.full_name,
                property_name=prop.name,
                property_address=prop.address,
                property_postal_code=prop.postal_code,
                property_city=prop.city,
                room_number=lease.room.room_number,
                rent_amount=payment.rent_amount,
                charges_amount=payment.charges_amount,
                total_amount=payment.amount,
                verification_hash=verification_hash,
                verification_url=f"{self.verification_url}/verify/{verification_hash}",
            ),
            self.owner,
        )

        signed = False
        if self.signer is not None:
            try:
                content = self.signer.sign(content)
                signed = True
            except SigningError as e:
                logger.warning(
                    f"Receipt for payment {payment.id} stored unsigned: {e}")

        return ReceiptArtifact(
            content=content,
            storage_path=receipt_storage_path(payment),
            verification_hash=verification_hash,
            signed=signed,
        )

    def _upload(self, artifact: ReceiptArtifact) -> dict:
        return self.blob_store.upload(
            artifact.content, self.bucket, artifact.storage_path, "application/pdf")

    # ------------------------------------------------------------------
    # Generate
    # ------------------------------------------------------------------
    def generate(self, db: Session, payment_id: UUID) -> Receipt:
        """
        Return the receipt of a paid payment, creating it when needed.

        An active receipt is returned untouched. An invalidated one is
        rewritten in place so the payment keeps a single receipt row. The
        row is written under the payment lock once the payment is confirmed
        still paid with the same payment date.
        """
        payment = payments_crud.get_payment_with_chain(db, payment_id)
        if payment.status != PaymentStatus.paid.value:
            raise ConflictError("Receipts can only be generated for paid payments")

        receipt = payment.receipt
        if receipt is not None and not receipt.is_deleted:
            return receipt

        paid_at = payment.payment_date
        artifact = self.build_artifact(payment)
        stored = self._upload(artifact)

        try:
            with scoped_transaction(db):
                locked = payments_crud.lock_payment(db, payment.id)
                if locked.status != PaymentStatus.paid.value or locked.payment_date != paid_at:
                    raise ConflictError(
                        "Payment changed while its receipt was generated",
                        {"payment_id": str(payment.id)})

                receipt = (
                    db.query(Receipt)
                    .filter(Receipt.payment_id == payment.id)
                    .populate_existing()
                    .first()
                )
                if receipt is not None and not receipt.is_deleted:
                    # stored by a concurrent request
                    return receipt
                if receipt is None:
                    receipt = Receipt(payment_id=payment.id)
                    db.add(receipt)
                receipt.storage_path = stored["path"]
                receipt.storage_url = stored.get("url")
                receipt.verification_hash = artifact.verification_hash
                receipt.signed = artifact.signed
                receipt.generated_at = utcnow()
                receipt.downloaded_at = None
                receipt.is_deleted = False
        except ConstraintViolation:
            # a concurrent request stored the receipt first
            existing = db.query(Receipt).filter(
                Receipt.payment_id == payment.id).first()
            if existing is None:
                raise
            return existing

        logger.info(f"Receipt generated for payment {payment.id} at {receipt.storage_path}")
        return receipt

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------
    def download(self, db: Session, payment_id: UUID) -> Tuple[Receipt, bytes, str]:
        """
        Receipt bytes for a paid payment.

        A missing or unreachable artifact is rebuilt at the same path and
        the receipt row refreshed in place.
        """
        receipt = self.generate(db, payment_id)
        payment = payments_crud.get_payment_with_chain(db, payment_id)

        try:
            content = self.blob_store.download(self.bucket, receipt.storage_path)
        except ExternalStorageError as e:
            logger.info(
                f"Receipt artifact missing for payment {payment.id}, regenerating: {e}")
            content = self._regenerate(db, payment, receipt)

        with scoped_transaction(db):
            receipt.downloaded_at = utcnow()

        return receipt, content, receipt_file_name(payment)

    def _regenerate(self, db: Session, payment: Payment, receipt: Receipt) -> bytes:
        artifact = self.build_artifact(payment)
        artifact.storage_path = receipt.storage_path
        stored = self._upload(artifact)

        with scoped_transaction(db):
            receipt.storage_url = stored.get("url")
            receipt.verification_hash = artifact.verification_hash
            receipt.signed = artifact.signed
            receipt.generated_at = utcnow()
        return artifact.content

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------
    def discard_artifacts(self, paths: List[str]) -> int:
        if not paths:
            return 0
        return self.blob_store.delete_many(self.bucket, paths)

    def purge_receipt(self, db: Session, receipt_id: UUID) -> bool:
        """
        Drop one invalidated receipt, the row first and then its blob.

        The payment row is locked and the receipt re-read under the lock; a
        receipt revived by mark-paid since it was listed is left alone.
        """
        with scoped_transaction(db):
            candidate = db.query(Receipt.payment_id).filter(Receipt.id == receipt_id).first()
            if candidate is None:
                return False
            payments_crud.lock_payment(db, candidate.payment_id)

            receipt = (
                db.query(Receipt)
                .filter(Receipt.id == receipt_id, Receipt.is_deleted == True)
                .with_for_update()
                .populate_existing()
                .first()
            )
            if receipt is None:
                return False
            path = receipt.storage_path
            db.delete(receipt)

        try:
            self.blob_store.delete(self.bucket, path)
        except ExternalStorageError as e:
            logger.error(f"Receipt {receipt_id} purged but blob {path} left behind: {e}")
        return True

    def purge_invalidated(self, db: Session) -> int:
        """Purge every receipt invalidated by mark-unpaid."""
        receipt_ids = [
            receipt_id for (receipt_id,) in
            db.query(Receipt.id).filter(Receipt.is_deleted == True).all()
        ]
        purged = 0
        for receipt_id in receipt_ids:
            if self.purge_receipt(db, receipt_id):
                purged += 1
        return purged
