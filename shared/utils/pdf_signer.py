from abc import ABC, abstractmethod
from io import BytesIO

from pyhanko.pdf_utils.incremental_writer import IncrementalPdfFileWriter
from pyhanko.sign import signers

from shared.core.exceptions import SigningError


class ReceiptSigner(ABC):

    @abstractmethod
    def sign(self, content: bytes) -> bytes:
        """Return signed PDF bytes or raise ``SigningError``."""


class Pkcs12Signer(ReceiptSigner):
    """Signs PDFs with a PKCS#12 certificate bundle."""

    field_name = "ReceiptSignature"

    def __init__(self, pfx_path: str, passphrase: str | None = None):
        self.pfx_path = pfx_path
        self.passphrase = passphrase.encode() if passphrase else None
        self._signer = None

    def _load(self):
        if self._signer is None:
            self._signer = signers.SimpleSigner.load_pkcs12(
                pfx_file=self.pfx_path, passphrase=self.passphrase)
            if self._signer is None:
                raise SigningError(
                    f"Unable to load signing certificate from {self.pfx_path}")
        return self._signer

    def sign(self, content):
        signer = self._load()
        try:
            writer = IncrementalPdfFileWriter(BytesIO(content))
            output = signers.sign_pdf(
                writer,
                signers.PdfSignatureMetadata(field_name=self.field_name),
                signer=signer,
            )
        except Exception as e:
            raise SigningError(f"PDF signing failed: {e}") from e
        return output.getvalue()
