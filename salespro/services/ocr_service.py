"""
Product guess from a scanned bill.

The text recogniser is injected: anything with an async recognize(image)
that returns plain text. Recognition failures never block a sale entry,
so guess_product() reports them as "no match".
"""
from __future__ import annotations

import asyncio
import io
from typing import Iterable, Optional, Protocol

import structlog

from salespro.constants import PRODUCTS
from salespro.models.sale import BillImage

logger = structlog.get_logger(__name__)


class TextRecognizer(Protocol):
    async def recognize(self, image: BillImage) -> str:
        ...


def match_product(text: str, catalog: Iterable[str] = PRODUCTS) -> Optional[str]:
    """First catalog entry whose name appears in text (case-insensitive)."""
    haystack = text.lower()
    for product in catalog:
        if product.lower() in haystack:
            return product
    return None


class BillScanService:
    def __init__(self, recognizer: TextRecognizer, catalog: Iterable[str] = PRODUCTS):
        self.recognizer = recognizer
        self.catalog = list(catalog)

    async def guess_product(self, image: BillImage) -> Optional[str]:
        try:
            text = await self.recognizer.recognize(image)
        except Exception as exc:
            logger.warning("bill_scan_failed", kind=type(exc).__name__, error=str(exc))
            return None
        product = match_product(text or "", self.catalog)
        logger.info("bill_scanned", matched=product)
        return product


class TesseractRecognizer:
    """Local Tesseract OCR through pytesseract; needs the tesseract binary on PATH."""

    def __init__(self, min_chars: int = 12):
        self.min_chars = min_chars

    def _read(self, image: BillImage) -> str:
        import pytesseract
        from PIL import Image, ImageEnhance, ImageOps

        with Image.open(io.BytesIO(image.data)) as picture:
            grayscale = ImageOps.grayscale(picture)
        boosted = ImageEnhance.Contrast(ImageOps.autocontrast(grayscale)).enhance(1.8)
        text = pytesseract.image_to_string(boosted)
        if len(text.strip()) >= self.min_chars:
            return text
        # light text on a dark receipt
        inverted = ImageEnhance.Contrast(ImageOps.invert(grayscale)).enhance(1.6)
        alt = pytesseract.image_to_string(inverted)
        return alt if len(alt.strip()) > len(text.strip()) else text

    async def recognize(self, image: BillImage) -> str:
        return await asyncio.to_thread(self._read, image)
