"""QR code generation for certificate verification URLs."""

import base64
from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_H

QR_FILL_COLOR = "white"
QR_BACK_COLOR = "transparent"
QR_BORDER_MODULES = 1


def generate_qr_code_png(data: str, *, box_size: int = 10) -> bytes:
    """Encode ``data`` as a PNG QR code.

    High error correction and a one-module quiet zone; white modules on a
    transparent background so the code sits on the certificate artwork.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_H,
        box_size=box_size,
        border=QR_BORDER_MODULES,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color=QR_FILL_COLOR, back_color=QR_BACK_COLOR)

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def generate_qr_code_base64(data: str) -> str:
    """Return the QR PNG for ``data`` as a bare base64 string (no data: prefix)."""
    return base64.b64encode(generate_qr_code_png(data)).decode("ascii")
