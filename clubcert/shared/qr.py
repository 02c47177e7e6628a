from io import BytesIO

import qrcode
from qrcode.image.pil import PilImage

from .constants import QR_BORDER, QR_BOX_SIZE, QR_ERROR_CORRECTION


def encode_qr(text: str) -> bytes:
    """Encode text as a black-on-white QR code PNG."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=QR_ERROR_CORRECTION,
        box_size=QR_BOX_SIZE,
        border=QR_BORDER,
        image_factory=PilImage,
    )
    qr.add_data(text)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
