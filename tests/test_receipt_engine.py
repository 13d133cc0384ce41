"""
Tests for receipt generation, storage and download.

Validates:
- storage path layout and keyed verification hash
- signing oracle and unsigned fallback
- regeneration of a missing artifact on download
- purge of invalidated receipts and the sync job
- purge skips receipts revived by a concurrent mark-paid
"""

import uuid
from datetime import datetime

import pytest

from shared.core.config import settings
from shared.core.exceptions import ConflictError, DataIncompleteError
from rental_service.app.models.financials.payments import Payment
from rental_service.app.models.financials.receipts import Receipt
from rental_service.app.models.leasing_tenants.leases import Lease
from rental_service.app.models.leasing_tenants.tenants import Tenant
from rental_service.scripts.sync_receipts import sync_receipts
from rental_service.app.services import payment_state_service
from rental_service.app.services.receipt_service import (
    ReceiptEngine,
    compute_verification_hash,
    ensure_chain,
    receipt_file_name,
)


def _first_payment(lease):
    return sorted(lease.payments, key=lambda p: p.due_date)[0]


# =============================================================================
# Hash
# =============================================================================


class TestVerificationHash:

    def test_stable_for_same_triple(self):
        paid_at = datetime(2024, 1, 20, 10, 30)
        first = compute_verification_hash("p1", "l1", paid_at, "secret")
        second = compute_verification_hash("p1", "l1", paid_at, "secret")

        assert first == second
        assert len(first) == 64

    def test_depends_on_secret_and_inputs(self):
        paid_at = datetime(2024, 1, 20, 10, 30)
        base = compute_verification_hash("p1", "l1", paid_at, "secret")

        assert compute_verification_hash("p1", "l1", paid_at, "other") != base
        assert compute_verification_hash("p2", "l1", paid_at, "secret") != base
        assert "secret" not in base


# =============================================================================
# Generate
# =============================================================================


class TestGenerate:

    def test_artifact_stored_under_tenant_month_path(
            self, db, make_lease, receipt_engine, blob_store):
        lease = make_lease()
        payment = _first_payment(lease)
        payment_state_service.mark_paid(db, payment.id, receipt_engine)

        receipt = db.query(Receipt).filter(Receipt.payment_id == payment.id).one()

        assert receipt.storage_path == (
            f"tenant_{lease.tenant_id}/2024/01/receipt_{payment.id}.pdf")
        content = blob_store.objects[(settings.RECEIPTS_BUCKET, receipt.storage_path)]
        assert content.startswith(b"%PDF")
        assert receipt.signed is False
        assert receipt.storage_url.startswith("memory://")

    def test_generate_on_pending_payment_is_rejected(self, db, make_lease, receipt_engine):
        payment = _first_payment(make_lease())

        with pytest.raises(ConflictError):
            receipt_engine.generate(db, payment.id)

    def test_generate_twice_returns_same_receipt(self, db, make_lease, receipt_engine):
        payment = _first_payment(make_lease())
        payment_state_service.mark_paid(db, payment.id, receipt_engine)
        first = db.query(Receipt).filter(Receipt.payment_id == payment.id).one()

        again = receipt_engine.generate(db, payment.id)

        assert again.id == first.id
        assert db.query(Receipt).count() == 1

    def test_signer_output_is_stored(self, db, make_lease, blob_store, stamp_signer):
        engine = ReceiptEngine(blob_store, signer=stamp_signer)
        payment = _first_payment(make_lease())

        payment_state_service.mark_paid(db, payment.id, engine)
        receipt = db.query(Receipt).one()

        assert receipt.signed is True
        assert blob_store.objects[(settings.RECEIPTS_BUCKET, receipt.storage_path)].endswith(
            b"%signed")

    def test_signing_failure_degrades_to_unsigned(self, db, make_lease, blob_store, broken_signer):
        engine = ReceiptEngine(blob_store, signer=broken_signer)
        payment = _first_payment(make_lease())

        _, receipt_error = payment_state_service.mark_paid(db, payment.id, engine)
        receipt = db.query(Receipt).one()

        assert receipt_error is None
        assert receipt.signed is False

    def test_incomplete_chain(self):
        lease = Lease(tenant=Tenant(first_name="Ana", last_name="Roy"), room=None)
        payment = Payment(id=uuid.uuid4(), lease=lease)

        with pytest.raises(DataIncompleteError):
            ensure_chain(payment)

    def test_file_name_uses_billing_month(self, make_lease):
        payment = _first_payment(make_lease())

        assert receipt_file_name(payment) == f"receipt_january_2024_{payment.id}.pdf"


# =============================================================================
# Download
# =============================================================================


class TestDownload:

    def test_download_streams_pdf_and_stamps_access(self, client, db, make_lease):
        payment = _first_payment(make_lease())
        client.put(f"/api/payments/{payment.id}/mark-paid")

        resp = client.get(f"/api/receipts/{payment.id}/download")

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert "attachment" in resp.headers["content-disposition"]
        assert resp.content.startswith(b"%PDF")
        db.expire_all()
        assert db.query(Receipt).one().downloaded_at is not None

    def test_missing_artifact_is_regenerated_at_same_path(
            self, client, db, make_lease, blob_store):
        payment = _first_payment(make_lease())
        client.put(f"/api/payments/{payment.id}/mark-paid")
        receipt = db.query(Receipt).one()
        path = receipt.storage_path
        del blob_store.objects[(settings.RECEIPTS_BUCKET, path)]

        resp = client.get(f"/api/receipts/{payment.id}/download")

        assert resp.status_code == 200
        assert resp.content.startswith(b"%PDF")
        assert (settings.RECEIPTS_BUCKET, path) in blob_store.objects
        db.expire_all()
        refreshed = db.query(Receipt).one()
        assert refreshed.storage_path == path
        assert refreshed.downloaded_at is not None

    def test_download_of_pending_payment(self, client, make_lease):
        payment = _first_payment(make_lease())

        resp = client.get(f"/api/receipts/{payment.id}/download")

        assert resp.status_code == 409

    def test_tenant_cannot_download_someone_elses_receipt(
            self, client, make_lease, current_user):
        payment = _first_payment(make_lease())
        client.put(f"/api/payments/{payment.id}/mark-paid")
        current_user.role = "tenant"

        resp = client.get(f"/api/receipts/{payment.id}/download")

        assert resp.status_code == 403


# =============================================================================
# Maintenance jobs
# =============================================================================


class TestMaintenance:

    def test_purge_removes_invalidated_receipts(self, db, make_lease, receipt_engine, blob_store):
        payment = _first_payment(make_lease())
        payment_state_service.mark_paid(db, payment.id, receipt_engine)
        payment_state_service.mark_unpaid(db, payment.id)

        purged = receipt_engine.purge_invalidated(db)

        assert purged == 1
        assert db.query(Receipt).count() == 0
        assert blob_store.objects == {}

    def test_purge_skips_receipt_revived_by_repayment(
            self, db, make_lease, receipt_engine, blob_store):
        payment = _first_payment(make_lease())
        payment_state_service.mark_paid(db, payment.id, receipt_engine)
        payment_state_service.mark_unpaid(db, payment.id)
        receipt_id = db.query(Receipt).one().id
        payment_state_service.mark_paid(db, payment.id, receipt_engine)

        assert receipt_engine.purge_receipt(db, receipt_id) is False

        receipt = db.query(Receipt).one()
        assert receipt.id == receipt_id
        assert receipt.is_deleted is False
        assert (settings.RECEIPTS_BUCKET, receipt.storage_path) in blob_store.objects

    def test_repayment_during_blob_delete_keeps_payment_paid(
            self, db, make_lease, receipt_engine, blob_store, monkeypatch):
        payment = _first_payment(make_lease())
        payment_id = payment.id
        payment_state_service.mark_paid(db, payment_id, receipt_engine)
        payment_state_service.mark_unpaid(db, payment_id)
        delete = blob_store.delete

        def repay_then_delete(bucket, path):
            payment_state_service.mark_paid(db, payment_id, receipt_engine)
            delete(bucket, path)

        monkeypatch.setattr(blob_store, "delete", repay_then_delete)

        assert receipt_engine.purge_invalidated(db) == 1

        db.expire_all()
        assert db.query(Payment).filter(Payment.id == payment_id).one().status == "paid"
        assert db.query(Receipt).filter(Receipt.payment_id == payment_id).count() == 1

        # the artifact lost to the purge is rebuilt on download
        _, content, _ = receipt_engine.download(db, payment_id)
        assert content.startswith(b"%PDF")
        assert len(blob_store.objects) == 1

    def test_sync_generates_missing_receipts(self, db, make_lease, receipt_engine, blob_store):
        payment = _first_payment(make_lease())
        blob_store.fail_uploads = True
        payment_state_service.mark_paid(db, payment.id, receipt_engine)
        blob_store.fail_uploads = False

        result = sync_receipts(db, receipt_engine)

        assert result == {"generated": 1, "failed": 0}
        assert db.query(Receipt).filter(Receipt.payment_id == payment.id).count() == 1
