# backend/utils/pdf.py

import logging
from pathlib import Path

from config import settings
from models.proposal import ProposalDocument
from schemas.proposal import DocumentTotals

logger = logging.getLogger(__name__)

# Path configuration
FONT_DIR = Path("assets/fonts")
FONT_REGULAR_PATH = FONT_DIR / "DejaVuSans.ttf"
FONT_BOLD_PATH = FONT_DIR / "DejaVuSans-Bold.ttf"

# Built-in fonts until the DejaVu files (needed for Cyrillic) are registered
FONT_REGULAR_NAME = "Helvetica"
FONT_BOLD_NAME = "Helvetica-Bold"

def ensure_storage_dir() -> Path:
    storage_dir = Path(settings.PDF_STORAGE_DIR)
    storage_dir.mkdir(parents=True, exist_ok=True)
    return storage_dir

def get_pdf_path(proposal_number: str) -> Path:
    """Returns the PDF file path of a proposal."""
    return ensure_storage_dir() / f"{proposal_number}.pdf"

_fonts_inited = False
def _init_fonts():
    """Registers the DejaVu fonts with ReportLab when they are shipped."""
    global _fonts_inited, FONT_REGULAR_NAME, FONT_BOLD_NAME
    if _fonts_inited:
        return
    _fonts_inited = True

    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfbase.ttfonts import TTFont

    if not FONT_REGULAR_PATH.exists():
        logger.warning("Font file not found at %s, using Helvetica", FONT_REGULAR_PATH)
        return

    pdfmetrics.registerFont(TTFont("DejaVuSans", str(FONT_REGULAR_PATH)))
    FONT_REGULAR_NAME = "DejaVuSans"
    if FONT_BOLD_PATH.exists():
        pdfmetrics.registerFont(TTFont("DejaVuSans-Bold", str(FONT_BOLD_PATH)))
        FONT_BOLD_NAME = "DejaVuSans-Bold"
    else:
        FONT_BOLD_NAME = FONT_REGULAR_NAME

def generate_proposal_pdf(proposal: ProposalDocument, totals: DocumentTotals, out_path: Path, currency: str = "EUR") -> None:
    """
    Renders a proposal:
    - Header (number, dates, status)
    - Client and manager
    - One table per group (description, qty, unit price, discount, VAT, total)
    - Document summary
    """
    from reportlab.lib.pagesizes import A4
    from reportlab.pdfgen import canvas
    from reportlab.lib.units import mm

    _init_fonts()
    out_path.parent.mkdir(parents=True, exist_ok=True)

    c = canvas.Canvas(str(out_path), pagesize=A4)
    width, height = A4

    def draw_text(x, y, text, font=None, size=10, align="left"):
        c.setFont(font or FONT_REGULAR_NAME, size)
        text_str = str(text) if text is not None else ""
        if align == "right":
            c.drawRightString(x, y, text_str)
        elif align == "center":
            c.drawCentredString(x, y, text_str)
        else:
            c.drawString(x, y, text_str)

    def new_page_if_needed(current_y, needed=40 * mm):
        if current_y < needed:
            c.showPage()
            return height - 20 * mm
        return current_y

    # --- 1. HEADER ---
    y = height - 20 * mm
    draw_text(190 * mm, y, f"Proposal {proposal.number}", font=FONT_BOLD_NAME, size=16, align="right")
    y -= 8 * mm
    draw_text(190 * mm, y, f"Date: {proposal.proposal_date}", size=10, align="right")
    if proposal.valid_until:
        y -= 5 * mm
        draw_text(190 * mm, y, f"Valid until: {proposal.valid_until}", size=9, align="right")
    y -= 5 * mm
    status = getattr(proposal.status, "value", proposal.status)
    draw_text(190 * mm, y, f"Status: {status}", size=9, align="right")

    y -= 6 * mm
    c.setLineWidth(0.5)
    c.line(20 * mm, y, 190 * mm, y)
    y -= 10 * mm

    # --- 2. CLIENT ---
    draw_text(20 * mm, y, "CLIENT:", font=FONT_BOLD_NAME)
    y -= 5 * mm
    draw_text(20 * mm, y, proposal.client_name, font=FONT_BOLD_NAME)
    if proposal.manager:
        y -= 5 * mm
        draw_text(20 * mm, y, f"Manager: {proposal.manager}")
    y -= 12 * mm

    # --- 3. GROUP TABLES ---
    def draw_group(current_y, group, group_totals):
        draw_text(20 * mm, current_y, group.name, font=FONT_BOLD_NAME, size=11)
        current_y -= 10 * mm

        c.setFillColorRGB(0.95, 0.95, 0.95)
        c.rect(20 * mm, current_y - 2 * mm, 170 * mm, 8 * mm, fill=1, stroke=0)
        c.setFillColorRGB(0, 0, 0)

        c.setFont(FONT_BOLD_NAME, 9)
        c.drawString(22 * mm, current_y, "#")
        c.drawString(30 * mm, current_y, "Description")
        c.drawRightString(112 * mm, current_y, "Qty")
        c.drawRightString(132 * mm, current_y, "Price")
        c.drawRightString(146 * mm, current_y, "Disc.")
        c.drawRightString(160 * mm, current_y, "VAT")
        c.drawRightString(188 * mm, current_y, "Total")
        current_y -= 8 * mm

        c.setFont(FONT_REGULAR_NAME, 9)
        for idx, (position, line) in enumerate(zip(group.positions, group_totals.positions), start=1):
            c.drawString(22 * mm, current_y, str(idx))
            c.drawString(30 * mm, current_y, (position.description or "")[:48])
            c.drawRightString(112 * mm, current_y, f"{position.quantity:g}")
            c.drawRightString(132 * mm, current_y, f"{position.unit_price:.2f}")
            c.drawRightString(146 * mm, current_y, f"{position.discount_percent:g}%")
            c.drawRightString(160 * mm, current_y, f"{position.vat_percent:g}%")
            c.drawRightString(188 * mm, current_y, f"{line.total:.2f}")

            c.setLineWidth(0.1)
            c.line(20 * mm, current_y - 2 * mm, 190 * mm, current_y - 2 * mm)
            current_y -= 6 * mm

            if current_y < 40 * mm:
                c.showPage()
                current_y = height - 20 * mm
                c.setFont(FONT_REGULAR_NAME, 9)

        draw_text(160 * mm, current_y, "Group total:", font=FONT_BOLD_NAME, size=9, align="right")
        draw_text(188 * mm, current_y, f"{group_totals.total:.2f}", font=FONT_BOLD_NAME, size=9, align="right")
        return current_y - 10 * mm

    for group, group_totals in zip(proposal.groups, totals.groups):
        y = new_page_if_needed(y, 60 * mm)
        y = draw_group(y, group, group_totals)

    # --- 4. SUMMARY ---
    y = new_page_if_needed(y)
    c.setFont(FONT_BOLD_NAME, 10)
    for label, amount in (
        ("Subtotal:", totals.subtotal),
        ("Discount:", -totals.discount),
        ("VAT:", totals.vat_amount),
    ):
        c.drawRightString(150 * mm, y, label)
        c.drawRightString(188 * mm, y, f"{amount:.2f} {currency}")
        y -= 5 * mm

    y -= 1 * mm
    c.setFont(FONT_BOLD_NAME, 12)
    c.drawRightString(150 * mm, y, "TOTAL:")
    c.drawRightString(188 * mm, y, f"{totals.total:.2f} {currency}")

    if proposal.notes:
        y -= 12 * mm
        y = new_page_if_needed(y)
        draw_text(20 * mm, y, f"Notes: {proposal.notes[:110]}", size=9)

    c.showPage()
    c.save()
