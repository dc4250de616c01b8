"""Rendering module for presentation concerns.

This module handles all presentation/rendering logic:
- Certificate HTML templating and field formatting
- QR code generation
- Headless browser PDF conversion

This separates presentation concerns from business logic in services.
"""

from rendering.browser import PlaywrightLauncher, RenderTimeoutError, render_pdf
from rendering.certificates import (
    TemplateRenderError,
    render_certificate_html,
    safe_filename,
)
from rendering.qr import generate_qr_code_base64

__all__ = [
    "PlaywrightLauncher",
    "RenderTimeoutError",
    "TemplateRenderError",
    "generate_qr_code_base64",
    "render_certificate_html",
    "render_pdf",
    "safe_filename",
]
