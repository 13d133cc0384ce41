from functools import lru_cache
from typing import Optional

from fastapi import Depends

from shared.core.config import settings
from shared.utils.pdf_signer import Pkcs12Signer, ReceiptSigner
from shared.utils.storage_client import BlobStore, SupabaseBlobStore
from .services.receipt_service import ReceiptEngine


@lru_cache
def get_blob_store() -> BlobStore:
    return SupabaseBlobStore(
        settings.SUPABASE_URL, settings.SUPABASE_KEY, settings.SIGNED_URL_TTL)


@lru_cache
def get_receipt_signer() -> Optional[ReceiptSigner]:
    if not settings.SIGNATURE_PATH:
        return None
    return Pkcs12Signer(settings.SIGNATURE_PATH, settings.SIGNATURE_PASSWORD)


def get_receipt_engine(
    blob_store: BlobStore = Depends(get_blob_store),
    signer: Optional[ReceiptSigner] = Depends(get_receipt_signer),
) -> ReceiptEngine:
    return ReceiptEngine(blob_store, signer)
