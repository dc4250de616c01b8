"""Pydantic schemas for API request/response validation."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


class CertificateRequest(BaseModel):
    """Request to generate a certificate PDF.

    Required fields are optional here so that a missing field yields the
    service's own 400 message instead of a schema error.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    fullName: str | None = None
    articleTitle: str | None = None
    certificateId: str | None = None
    qrCodeUrl: str | None = None
    date: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    message: str


class ErrorResponse(BaseModel):
    """Error body returned for 4xx/5xx responses."""

    error: str
    message: str | None = None


@dataclass(frozen=True)
class CertificateFields:
    """Validated, normalized values placed on a certificate."""

    certificate_id: str
    full_name: str
    article_title: str
    date: str
    verification_url: str


@dataclass(frozen=True)
class RenderedCertificate:
    """A finished certificate ready to be sent to the caller."""

    filename: str
    html: str
    pdf: bytes
