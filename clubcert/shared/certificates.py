from __future__ import annotations

import os
from io import BytesIO
from typing import Callable

from PyPDF2 import PdfReader, PdfWriter
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from ..models import Certificate
from .constants import QR_DRAW_SIZE_PT
from .errors import RenderingFailed
from .qr import encode_qr
from .ranking import ordinal
from .time import fmt_long_date

GOLD = HexColor("#D4AF37")
DARK_GOLD = HexColor("#C5A028")
INK = HexColor("#333333")
NAME_INK = HexColor("#1A1A1A")
MUTED = HexColor("#666666")
SCORE_INK = HexColor("#555555")
CODE_INK = HexColor("#999999")

SIGNATURE_LABELS = ("Event Organizer", "Competition Director")


def template_path(template_dir: str | None, template_type: str | None) -> str | None:
    if not template_dir or not template_type:
        return None
    candidate = os.path.join(
        template_dir, f"cert_template_{template_type.strip().lower()}.pdf"
    )
    return candidate if os.path.isfile(candidate) else None


def achievement_line(cert: Certificate) -> str:
    achievement = cert.achievement or ""
    if not cert.rank:
        return achievement.upper()
    place = f"{ordinal(cert.rank)} Place"
    if achievement.lower() == place.lower():
        return place.upper()
    return f"{place} - {achievement}".upper()


def fmt_score(value: float | None) -> str:
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _fit_text(text: str, font_name: str, max_pt: int, min_pt: int, max_width: float) -> int:
    pt = max_pt
    while pt > min_pt and stringWidth(text, font_name, pt) > max_width:
        pt -= 1
    return pt


def _draw_page(
    c: canvas.Canvas,
    cert: Certificate,
    competition_name: str,
    width: float,
    height: float,
    qr_png: bytes,
) -> None:
    cx = width / 2.0

    def top(y: float, size: float) -> float:
        # baseline for text whose top edge sits y points below the page top
        return height - y - size

    c.setStrokeColor(GOLD)
    c.setLineWidth(5)
    c.rect(20, 20, width - 40, height - 40)
    c.setStrokeColor(DARK_GOLD)
    c.setLineWidth(2)
    c.rect(25, 25, width - 50, height - 50)

    c.setFillColor(INK)
    c.setFont("Helvetica-Bold", 40)
    c.drawCentredString(cx, top(70, 40), "CERTIFICATE")
    c.setFont("Helvetica", 20)
    c.drawCentredString(cx, top(115, 20), "OF ACHIEVEMENT", charSpace=5)

    c.setFillColor(MUTED)
    c.setFont("Helvetica-Oblique", 16)
    c.drawCentredString(cx, top(165, 16), "This is proudly presented to")

    name = cert.recipient_name or ""
    name_pt = _fit_text(name, "Helvetica-Bold", 36, 20, width - 120)
    c.setFillColor(NAME_INK)
    c.setFont("Helvetica-Bold", name_pt)
    c.drawCentredString(cx, top(195, 36), name)

    c.setStrokeColor(GOLD)
    c.setLineWidth(2)
    c.line(cx - 200, height - 240, cx + 200, height - 240)

    c.setFillColor(MUTED)
    c.setFont("Helvetica", 16)
    c.drawCentredString(cx, top(255, 16), "For their outstanding performance as")

    achievement = achievement_line(cert)
    c.setFillColor(GOLD)
    c.setFont("Helvetica-Bold", _fit_text(achievement, "Helvetica-Bold", 24, 14, width - 120))
    c.drawCentredString(cx, top(280, 24), achievement)

    c.setFillColor(INK)
    c.setFont("Helvetica", 18)
    c.drawCentredString(cx, top(312, 18), f"in {cert.category} Division")

    c.setFont(
        "Helvetica-Bold",
        _fit_text(competition_name or "", "Helvetica-Bold", 20, 12, width - 120),
    )
    c.drawCentredString(cx, top(342, 20), competition_name or "")

    if cert.total_score:
        c.setFillColor(SCORE_INK)
        c.setFont("Helvetica", 14)
        c.drawCentredString(cx, top(370, 14), f"Score: {fmt_score(cert.total_score)}")

    c.setFillColor(INK)
    c.setFont("Helvetica", 12)
    c.drawCentredString(cx, top(395, 12), f"Given on {fmt_long_date(cert.issued_at)}")

    line_y = 100
    c.drawString(100, line_y, "______________________")
    c.drawString(100, line_y - 18, SIGNATURE_LABELS[0])
    c.drawString(width - 250, line_y, "______________________")
    c.drawString(width - 250, line_y - 18, SIGNATURE_LABELS[1])

    qr_size = QR_DRAW_SIZE_PT
    qr_bottom = 48
    c.drawImage(
        ImageReader(BytesIO(qr_png)),
        cx - qr_size / 2.0,
        qr_bottom,
        width=qr_size,
        height=qr_size,
    )
    c.setFillColor(CODE_INK)
    c.setFont("Helvetica", 8)
    c.drawCentredString(cx, qr_bottom - 12, cert.validation_code or "")


def render_certificate_pdf(
    cert: Certificate,
    competition_name: str,
    template_dir: str | None = None,
    *,
    qr_encoder: Callable[[str], bytes] = encode_qr,
) -> bytes:
    """Render a single landscape page for the certificate.

    When ``template_dir`` holds ``cert_template_<type>.pdf`` the drawing is
    merged over its first page. Any failure raises RenderingFailed.
    """
    try:
        qr_png = qr_encoder(cert.validation_url)
        background = template_path(template_dir, cert.template_type)
        if background:
            base_page = PdfReader(background).pages[0]
            width = float(base_page.mediabox.width)
            height = float(base_page.mediabox.height)
        else:
            base_page = None
            width, height = landscape(A4)

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(width, height))
        c.setTitle(f"Certificate {cert.validation_code}")
        _draw_page(c, cert, competition_name, width, height, qr_png)
        c.save()

        if base_page is None:
            return buffer.getvalue()

        buffer.seek(0)
        base_page.merge_page(PdfReader(buffer).pages[0])
        writer = PdfWriter()
        writer.add_page(base_page)
        out_buf = BytesIO()
        writer.write(out_buf)
        return out_buf.getvalue()
    except Exception as exc:
        raise RenderingFailed(
            f"Failed to render certificate {getattr(cert, 'id', None)}: {exc}"
        ) from exc
