"""
Module: export.pdf_writer

Purpose:
    Package paper bitmaps into a PDF using ReportLab, then confirm the
    save by re-opening the written file with PyMuPDF. Each bitmap fills
    one page edge to edge: page width is A4 width and page height follows
    the bitmap's aspect ratio, so nothing is cropped or distorted.

Key Functions:
    - page_size_for(): Bitmap -> page size in points
    - write_pdf(): Bitmaps -> PDF file
    - confirm_saved(): Re-open and count pages

Dependencies:
    - reportlab: PDF generation
    - fitz (PyMuPDF): Save confirmation
    - PIL: Image handling

Used By:
    - export.pipeline
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Sequence, Tuple

import fitz
from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .errors import SaveError

logger = logging.getLogger(__name__)

A4_WIDTH_PT, A4_HEIGHT_PT = A4


def page_size_for(image: Image.Image, page_width_pt: float = A4_WIDTH_PT) -> Tuple[float, float]:
    """
    Page size (points) for a full-bleed bitmap.

    Example:
        >>> page_size_for(Image.new("RGB", (1588, 2246)))
        (595.27..., 841.88...)
    """
    if image.width <= 0 or image.height <= 0:
        raise ValueError(f"Image has no area: {image.width}x{image.height}")
    return page_width_pt, image.height * page_width_pt / image.width


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """Convert PIL image to ReportLab ImageReader."""
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def write_pdf(images: Sequence[Image.Image], output_path: Path) -> int:
    """
    Write one full-bleed page per image.

    Returns:
        Number of pages written

    Raises:
        SaveError: If the file cannot be written
    """
    if not images:
        raise SaveError("No pages to write")

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        c = canvas.Canvas(str(output_path), pagesize=page_size_for(images[0]))
        for image in images:
            width_pt, height_pt = page_size_for(image)
            c.setPageSize((width_pt, height_pt))
            c.drawImage(_pil_to_reader(image), 0, 0, width=width_pt, height=height_pt)
            c.showPage()
        c.save()
    except (OSError, ValueError) as e:
        raise SaveError(f"Failed to write {output_path}: {e}") from e

    logger.info(f"Wrote {len(images)} page(s) to {output_path}")
    return len(images)


def confirm_saved(output_path: Path, expected_pages: int) -> None:
    """
    Check that ``output_path`` is a readable PDF with the expected pages.

    Raises:
        SaveError: If the file is missing, unreadable or incomplete
    """
    if not output_path.exists() or output_path.stat().st_size == 0:
        raise SaveError(f"PDF was not saved: {output_path}")
    try:
        with fitz.open(str(output_path)) as doc:
            pages = doc.page_count
    except (fitz.FileDataError, RuntimeError, ValueError, OSError) as e:
        raise SaveError(f"Saved PDF cannot be opened: {e}") from e
    if pages != expected_pages:
        raise SaveError(f"Saved PDF has {pages} pages, expected {expected_pages}")
    logger.debug(f"Confirmed {output_path.name}: {pages} page(s)")
