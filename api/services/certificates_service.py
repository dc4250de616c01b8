"""Certificate business logic for the renderer service.

This module handles certificate generation end to end:
- Request validation (required fields)
- Field normalization (certificate id, date, verification URL)
- Template and asset loading from the configured paths
- QR code, HTML and PDF generation (delegating to the rendering modules)

Routes should delegate all certificate business logic to this module.
"""

import asyncio
from dataclasses import dataclass

from core.clock import Clock
from core.config import Settings
from core.logger import get_logger
from rendering.browser import BrowserLauncher, RenderOptions, render_pdf
from rendering.certificates import (
    CertificateTemplateContext,
    build_verification_url,
    format_certificate_date,
    normalize_certificate_id,
    read_file_as_base64,
    render_certificate_html,
    safe_filename,
)
from rendering.qr import generate_qr_code_base64
from schemas import CertificateFields, CertificateRequest, RenderedCertificate

logger = get_logger(__name__)

MISSING_FIELDS_MESSAGE = (
    "Missing required parameters: fullName, articleTitle, "
    "and certificateId are required"
)


class MissingFieldsError(Exception):
    """Raised when a required request field is absent or empty."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(MISSING_FIELDS_MESSAGE)


class AssetLoadError(Exception):
    """Raised when the template or an image asset cannot be read."""


@dataclass(frozen=True)
class CertificateAssets:
    """Template source and base64-encoded images read for one request."""

    template: str
    background_base64: str
    logo_base64: str


def validate_request(body: CertificateRequest) -> None:
    """Check that fullName, articleTitle and certificateId are present.

    Raises:
        MissingFieldsError: If any of them is missing or empty
    """
    missing = [
        name
        for name in ("fullName", "articleTitle", "certificateId")
        if not getattr(body, name)
    ]
    if missing:
        raise MissingFieldsError(missing)


def build_certificate_fields(
    body: CertificateRequest,
    clock: Clock,
    verification_base_url: str,
) -> CertificateFields:
    """Normalize a validated request into the values shown on the certificate."""
    certificate_id = normalize_certificate_id(body.certificateId or "")
    formatted_date = format_certificate_date(body.date or clock.today())

    return CertificateFields(
        certificate_id=certificate_id,
        full_name=body.fullName or "",
        article_title=body.articleTitle or "",
        date=formatted_date,
        verification_url=build_verification_url(
            certificate_id, body.qrCodeUrl, verification_base_url
        ),
    )


def _read_assets(settings: Settings) -> CertificateAssets:
    try:
        template = settings.certificate_template_path.read_text(encoding="utf-8")
        background = read_file_as_base64(settings.background_image_path)
        logo = read_file_as_base64(settings.logo_image_path)
    except OSError as e:
        logger.error("certificate.assets.read_failed", error=str(e))
        raise AssetLoadError(str(e)) from e

    return CertificateAssets(
        template=template, background_base64=background, logo_base64=logo
    )


async def load_certificate_assets(settings: Settings) -> CertificateAssets:
    """Read the template and both images. Not cached between requests.

    Raises:
        AssetLoadError: With the underlying I/O error message
    """
    return await asyncio.to_thread(_read_assets, settings)


def _template_context(
    fields: CertificateFields, assets: CertificateAssets, qr_code_base64: str
) -> CertificateTemplateContext:
    return {
        "id": fields.certificate_id,
        "certificateId": fields.certificate_id,
        "fullName": fields.full_name,
        "articleTitle": fields.article_title,
        "date": fields.date,
        "qr_code": qr_code_base64,
        "bgBase64": assets.background_base64,
        "logoBase64": assets.logo_base64,
    }


async def generate_certificate(
    body: CertificateRequest,
    *,
    settings: Settings,
    launcher: BrowserLauncher,
    clock: Clock,
) -> RenderedCertificate:
    """Generate a certificate PDF for one request.

    Validation runs before any filesystem or browser work. The browser is
    launched per call and released on every exit path by the renderer.

    Raises:
        MissingFieldsError: A required field is missing
        InvalidDateError: The supplied date cannot be parsed
        AssetLoadError: The template or an asset cannot be read
        TemplateRenderError: The template is malformed
        RenderTimeoutError: The page did not settle within the timeout
    """
    validate_request(body)
    fields = build_certificate_fields(body, clock, settings.verification_base_url)

    assets = await load_certificate_assets(settings)
    qr_code_base64 = await asyncio.to_thread(
        generate_qr_code_base64, fields.verification_url
    )

    html = render_certificate_html(
        assets.template, _template_context(fields, assets, qr_code_base64)
    )

    pdf = await render_pdf(
        html,
        launcher,
        RenderOptions(
            content_timeout=settings.render_timeout_seconds,
            image_settle_timeout=settings.image_settle_timeout_seconds,
        ),
    )

    filename = safe_filename(fields.full_name)
    logger.info(
        "certificate.generated",
        certificate_id=fields.certificate_id,
        filename=filename,
        pdf_bytes=len(pdf),
    )
    return RenderedCertificate(filename=filename, html=html, pdf=pdf)
