"""Tests for QR code generation."""

import base64
from io import BytesIO
from unittest.mock import patch

import pytest
import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H

from rendering.qr import generate_qr_code_base64, generate_qr_code_png

pytestmark = pytest.mark.unit


class TestGenerateQrCode:
    def test_png_output(self):
        png = generate_qr_code_png("https://example.com/verify/123")
        assert png.startswith(b"\x89PNG\r\n\x1a\n")

    def test_base64_has_no_data_uri_prefix(self):
        encoded = generate_qr_code_base64("https://example.com/verify/123")
        assert not encoded.startswith("data:")
        assert base64.b64decode(encoded).startswith(b"\x89PNG")

    def test_transparent_background_white_modules(self):
        png = generate_qr_code_png("https://example.com/verify/123", box_size=4)
        image = Image.open(BytesIO(png))

        assert image.mode == "RGBA"
        # One-module border: the corner pixel is background, so transparent.
        assert image.getpixel((0, 0))[3] == 0
        # The finder pattern starts right after the border.
        assert image.getpixel((4, 4))[:3] == (255, 255, 255)
        assert image.getpixel((4, 4))[3] == 255

    def test_uses_high_error_correction_and_one_module_border(self):
        with patch("rendering.qr.qrcode.QRCode", wraps=qrcode.QRCode) as qr:
            generate_qr_code_png("data")

        kwargs = qr.call_args.kwargs
        assert kwargs["error_correction"] == ERROR_CORRECT_H
        assert kwargs["border"] == 1

    def test_different_data_different_codes(self):
        assert generate_qr_code_base64("a") != generate_qr_code_base64("b")
