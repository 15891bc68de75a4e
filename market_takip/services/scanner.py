"""Barcode scanner capability and the product draft it fills in.

The decoding engine is pluggable: anything implementing ``Decoder`` can feed
scanned text into a ``ProductDraft`` through a ``BarcodeScanSession``.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional, Protocol, Union

from .image_preprocessor import ImagePreprocessor
from ..models.product import Category, Product
from ..utils.logger import get_inventory_logger


class Decoder(Protocol):
    """A barcode decoding engine (camera, file, test double)."""

    def start(self, on_result: Callable[[str], None], on_error: Callable[[Exception], None]) -> None:
        ...

    def stop(self) -> None:
        ...


class BarcodeScanSession:
    """
    One scan: start the decoder, take the first result, stop.

    Per-frame decode errors are expected while the camera searches and are
    ignored. A ``PermissionError`` (camera access denied) ends the session
    and is kept in ``last_error``.
    """

    def __init__(self, decoder: Decoder, on_decoded: Callable[[str], None]):
        self.decoder = decoder
        self.on_decoded = on_decoded
        self.active = False
        self.last_error: Optional[Exception] = None
        self.logger = get_inventory_logger()

    def open(self) -> "BarcodeScanSession":
        if not self.active:
            self.active = True
            self.last_error = None
            self.decoder.start(self._handle_result, self._handle_error)
        return self

    def close(self):
        """Stop the decoder. Safe to call more than once."""
        if self.active:
            self.active = False
            self.decoder.stop()

    def _handle_result(self, text: str):
        if not self.active:
            return
        self.logger.info(f"Barcode scanned: {text}")
        self.on_decoded(text)
        self.close()

    def _handle_error(self, error: Exception):
        if isinstance(error, PermissionError):
            self.logger.warning(f"Camera permission denied: {str(error)}")
            self.last_error = error
            self.close()
        else:
            self.logger.debug(f"Scan frame error ignored: {str(error)}")

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@dataclass
class ProductDraft:
    """Form state for a product that has not been created yet."""

    name: str = ""
    barcode: str = ""
    category: Category = Category.OTHER
    quantity: int = 1
    expiry_date: Optional[Union[date, str]] = None
    image: Optional[str] = None

    def on_decoded(self, text: str):
        """Scanner callback; assigns the decoded text verbatim."""
        self.barcode = text

    async def attach_photo(self, raw: Union[bytes, str], preprocessor: ImagePreprocessor):
        """Compress a captured photo and keep it on the draft."""
        self.image = await preprocessor.compress(raw)

    def build(self, now: Optional[datetime] = None) -> Product:
        """
        Create the product.

        Raises:
            ValueError: If name, barcode or expiry date is missing, or a field is invalid
        """
        if not self.name or not self.barcode or not self.expiry_date:
            raise ValueError("Name, barcode and expiry date are required")

        return Product.create(
            name=self.name,
            barcode=self.barcode,
            category=self.category,
            expiry_date=self.expiry_date,
            quantity=self.quantity or 1,
            image=self.image,
            now=now
        )
