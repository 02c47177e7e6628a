from datetime import datetime, timezone
from io import BytesIO

import pytest
from PIL import Image
from PyPDF2 import PdfReader
from reportlab.lib.pagesizes import letter, landscape
from reportlab.pdfgen import canvas

from clubcert.models import Certificate
from clubcert.shared.certificates import (
    achievement_line,
    fmt_score,
    render_certificate_pdf,
    template_path,
)
from clubcert.shared.errors import RenderingFailed
from clubcert.shared.qr import encode_qr


def _cert(**overrides):
    fields = dict(
        id=7,
        competition_id=1,
        recipient_id=3,
        recipient_name="Ada Lovelace",
        category="Recurve Men",
        achievement="WINNER",
        rank=1,
        total_score=287.0,
        validation_code="CERT-LXJ2K9A1-7F3Q",
        validation_url="https://club.example.com/verify/cert/CERT-LXJ2K9A1-7F3Q",
        template_type="GOLD",
        download_count=0,
        issued_at=datetime(2025, 3, 5, 9, 0, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return Certificate(**fields)


def _text(pdf_bytes):
    reader = PdfReader(BytesIO(pdf_bytes))
    return reader, "\n".join(page.extract_text() for page in reader.pages)


def test_render_single_landscape_page():
    pdf_bytes = render_certificate_pdf(_cert(), "Spring Open")
    assert pdf_bytes.startswith(b"%PDF")
    reader, text = _text(pdf_bytes)
    assert len(reader.pages) == 1
    box = reader.pages[0].mediabox
    assert float(box.width) > float(box.height)
    assert "Lovelace" in text
    assert "CERT-LXJ2K9A1-7F3Q" in text
    assert "CERTIFICATE" in text
    assert "Spring Open" in text
    assert "Score: 287" in text
    assert "Given on 5 March 2025" in text


def test_render_omits_zero_score():
    _, text = _text(render_certificate_pdf(_cert(total_score=0), "Spring Open"))
    assert "Score:" not in text
    _, text = _text(render_certificate_pdf(_cert(total_score=None), "Spring Open"))
    assert "Score:" not in text


def test_render_does_not_touch_record():
    cert = _cert()
    render_certificate_pdf(cert, "Spring Open")
    assert cert.download_count == 0
    assert cert.validation_code == "CERT-LXJ2K9A1-7F3Q"


def test_render_encodes_validation_url():
    seen = []

    def recording_encoder(text):
        seen.append(text)
        return encode_qr(text)

    render_certificate_pdf(_cert(), "Spring Open", qr_encoder=recording_encoder)
    assert seen == ["https://club.example.com/verify/cert/CERT-LXJ2K9A1-7F3Q"]


def test_render_failure_is_wrapped():
    def broken_encoder(text):
        raise OSError("encoder offline")

    with pytest.raises(RenderingFailed) as excinfo:
        render_certificate_pdf(_cert(), "Spring Open", qr_encoder=broken_encoder)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_render_merges_template_background(tmp_path):
    background = tmp_path / "cert_template_gold.pdf"
    c = canvas.Canvas(str(background), pagesize=landscape(letter))
    c.drawString(40, 40, "Riverside Archery Club")
    c.save()

    pdf_bytes = render_certificate_pdf(_cert(), "Spring Open", str(tmp_path))
    reader, text = _text(pdf_bytes)
    assert len(reader.pages) == 1
    assert float(reader.pages[0].mediabox.width) == pytest.approx(landscape(letter)[0])
    assert "Riverside Archery Club" in text
    assert "CERT-LXJ2K9A1-7F3Q" in text


def test_template_path(tmp_path):
    (tmp_path / "cert_template_silver.pdf").write_bytes(b"%PDF-1.4\n")
    assert template_path(str(tmp_path), "SILVER") == str(tmp_path / "cert_template_silver.pdf")
    assert template_path(str(tmp_path), "GOLD") is None
    assert template_path(None, "SILVER") is None
    assert template_path(str(tmp_path), None) is None


@pytest.mark.parametrize(
    "rank,achievement,expected",
    [
        (1, "WINNER", "1ST PLACE - WINNER"),
        (3, "2nd RUNNER UP", "3RD PLACE - 2ND RUNNER UP"),
        (2, "2nd Place", "2ND PLACE"),
        (None, "PARTICIPANT", "PARTICIPANT"),
    ],
)
def test_achievement_line(rank, achievement, expected):
    assert achievement_line(_cert(rank=rank, achievement=achievement)) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (287.0, "287"),
        (287.5, "287.5"),
        (287.25, "287.25"),
        (1234567.5, "1234567.5"),
        (None, ""),
        (0, "0"),
    ],
)
def test_fmt_score(value, expected):
    assert fmt_score(value) == expected


def test_encode_qr_png():
    png = encode_qr("https://club.example.com/verify/cert/CERT-1-ABCD")
    assert png.startswith(b"\x89PNG")
    img = Image.open(BytesIO(png))
    assert img.size[0] == img.size[1]
