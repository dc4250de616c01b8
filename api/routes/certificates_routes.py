"""Certificate generation endpoint."""

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from core.clock import Clock, get_clock
from core.config import Settings
from core.logger import bound_contextvars, get_logger
from rendering.browser import BrowserLauncher
from rendering.certificates import InvalidDateError
from schemas import CertificateRequest, ErrorResponse
from services.certificates_service import MissingFieldsError, generate_certificate

logger = get_logger(__name__)

router = APIRouter(tags=["certificates"])

GENERATION_FAILED = "Failed to generate certificate"
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_app_settings(request: Request) -> Settings:
    """The frozen settings the app was built with."""
    return request.app.state.settings


def get_browser_launcher(request: Request) -> BrowserLauncher:
    """The launcher created at startup; tests override this dependency."""
    return request.app.state.browser_launcher


async def read_certificate_request(request: Request) -> CertificateRequest:
    """Parse the body as a urlencoded form or as JSON.

    Both encodings produce the same CertificateRequest. Malformed bodies
    raise RequestValidationError so they share the 400 validation handler.
    """
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(FORM_CONTENT_TYPES):
            form = await request.form()
            data: Any = {key: value for key, value in form.items()}
        else:
            raw = await request.body()
            data = json.loads(raw) if raw else {}
        return CertificateRequest.model_validate(data)
    except json.JSONDecodeError as e:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body", e.pos), "msg": e.msg}]
        ) from e
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
LauncherDep = Annotated[BrowserLauncher, Depends(get_browser_launcher)]
ClockDep = Annotated[Clock, Depends(get_clock)]
CertificateBody = Annotated[CertificateRequest, Depends(read_certificate_request)]

_REQUEST_SCHEMA = CertificateRequest.model_json_schema()


def _error(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


@router.post(
    "/generate-certificate",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "PDF certificate"},
        400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
        500: {"model": ErrorResponse, "description": "Rendering failed"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": _REQUEST_SCHEMA},
                "application/x-www-form-urlencoded": {"schema": _REQUEST_SCHEMA},
            },
        }
    },
)
async def generate_certificate_endpoint(
    body: CertificateBody,
    settings: SettingsDep,
    launcher: LauncherDep,
    clock: ClockDep,
) -> Response:
    """Render a certificate PDF and return it as a file download."""
    with bound_contextvars(certificate_id=body.certificateId):
        try:
            certificate = await generate_certificate(
                body, settings=settings, launcher=launcher, clock=clock
            )
        except MissingFieldsError as e:
            logger.info("certificate.rejected", missing=e.missing)
            return _error(400, str(e))
        except InvalidDateError as e:
            logger.info("certificate.rejected", reason="invalid_date")
            return _error(400, str(e))
        except Exception as e:
            # Every downstream failure becomes a JSON error; the browser has
            # already been released by the renderer.
            logger.exception("certificate.failed", exc_type=type(e).__name__)
            return _error(500, GENERATION_FAILED, str(e))

    return Response(
        content=certificate.pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{certificate.filename}"',
        },
    )
