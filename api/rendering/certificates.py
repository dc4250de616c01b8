"""Certificate rendering - HTML templating and field formatting.

This module handles the presentation side of a certificate:
- Certificate id normalization and verification URLs
- Date formatting (DD.MM.YYYY)
- Download filename sanitization
- Jinja2 rendering of the certificate template with inlined assets

The browser step that turns the HTML into a PDF lives in rendering/browser.py.
"""

import base64
import re
from datetime import date, datetime
from pathlib import Path
from typing import TypedDict

from dateutil import parser as dateutil_parser
from jinja2 import Environment, StrictUndefined, TemplateError

DEFAULT_VERIFICATION_BASE_URL = "https://example.com/verify"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_\-]")
_TRAILING_ZONE_NAME = re.compile(r"\s*\([^()]*\)\s*$")


class TemplateRenderError(Exception):
    """Raised when the certificate template cannot be rendered."""


class InvalidDateError(ValueError):
    """Raised when a caller-supplied date cannot be parsed."""


class CertificateTemplateContext(TypedDict):
    """Named slots available to the certificate template."""

    id: str
    certificateId: str
    fullName: str
    articleTitle: str
    date: str
    qr_code: str
    bgBase64: str
    logoBase64: str


def normalize_certificate_id(certificate_id: str | int) -> str:
    """Drop the leading ``#`` from a certificate id ("#123" -> "123")."""
    return str(certificate_id).replace("#", "", 1)


def build_verification_url(
    certificate_id: str,
    qr_code_url: str | None = None,
    base_url: str = DEFAULT_VERIFICATION_BASE_URL,
) -> str:
    """Return the URL the QR code points at.

    A caller-supplied URL is used verbatim; otherwise the normalized id is
    appended to ``base_url``.
    """
    if qr_code_url:
        return qr_code_url
    return f"{base_url.rstrip('/')}/{normalize_certificate_id(certificate_id)}"


def parse_certificate_date(value: str) -> date:
    """Parse a caller-supplied date into a calendar date.

    ISO dates and datetimes take the fast path. Anything else goes through
    dateutil, which covers forms like ``2024/03/05``, ``March 5, 2024`` and
    the output of JavaScript's ``Date.toString()``. The calendar date is
    taken as written; offsets are not converted.

    Raises:
        InvalidDateError: If the text is not a recognizable date.
    """
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    # Date.toString() appends the zone name in parentheses
    text = _TRAILING_ZONE_NAME.sub("", text)
    try:
        return dateutil_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise InvalidDateError(f"Invalid date: {value!r}") from e


def format_certificate_date(value: date | datetime | str) -> str:
    """Format a date as DD.MM.YYYY."""
    if isinstance(value, str):
        value = parse_certificate_date(value)
    return value.strftime("%d.%m.%Y")


def safe_filename(full_name: str) -> str:
    """Build the download filename from a full name.

    Every character outside ``[A-Za-z0-9_-]`` becomes ``_``.
    """
    return f"{_UNSAFE_FILENAME_CHARS.sub('_', str(full_name))}.pdf"


def read_file_as_base64(path: Path) -> str:
    """Read a binary asset and return it base64-encoded.

    Raises:
        OSError: If the file cannot be read.
    """
    return base64.b64encode(Path(path).read_bytes()).decode("ascii")


_environment = Environment(
    autoescape=True,
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


def render_certificate_html(
    template_text: str, context: CertificateTemplateContext
) -> str:
    """Render the certificate template into a self-contained HTML document.

    Args:
        template_text: Jinja2 template source read from the template file
        context: Values for the template's named slots

    Returns:
        HTML markup with every image inlined as base64

    Raises:
        TemplateRenderError: If the template is malformed or references an
            unknown slot
    """
    try:
        template = _environment.from_string(template_text)
        return template.render(**context)
    except TemplateError as e:
        raise TemplateRenderError(f"Template rendering failed: {e}") from e
