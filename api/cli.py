#!/usr/bin/env python3
"""CLI for the certificate renderer service.

Usage:
    python -m cli <command>

Commands:
    serve    Run the HTTP server on the configured host and port
    render   Render one certificate to a local PDF file
"""

import argparse
import asyncio
import sys
from pathlib import Path

from core.clock import SystemClock
from core.config import get_settings
from core.logger import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP server."""
    import uvicorn

    settings = get_settings()
    port = args.port or settings.port
    logger.info("server.starting", host=settings.host, port=port)
    uvicorn.run("main:app", host=settings.host, port=port, log_config=None)
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    """Render a certificate through the same service path the endpoint uses."""
    from rendering.browser import PlaywrightLauncher
    from schemas import CertificateRequest
    from services.certificates_service import generate_certificate

    settings = get_settings()
    body = CertificateRequest(
        fullName=args.full_name,
        articleTitle=args.article_title,
        certificateId=args.certificate_id,
        qrCodeUrl=args.qr_code_url,
        date=args.date,
    )

    certificate = asyncio.run(
        generate_certificate(
            body,
            settings=settings,
            launcher=PlaywrightLauncher(settings.browser_executable_path),
            clock=SystemClock(),
        )
    )

    output = Path(args.output) if args.output else Path(certificate.filename)
    output.write_bytes(certificate.pdf)
    logger.info("certificate.written", path=str(output), size=len(certificate.pdf))
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Certificate renderer CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--port", type=int, default=None, help="Override PORT")

    render = subparsers.add_parser("render", help="Render a certificate to a PDF file")
    render.add_argument("--full-name", required=True)
    render.add_argument("--article-title", required=True)
    render.add_argument("--certificate-id", required=True)
    render.add_argument("--qr-code-url", default=None)
    render.add_argument("--date", default=None, help="ISO date, defaults to today")
    render.add_argument("--output", "-o", default=None, help="Output PDF path")

    args = parser.parse_args()

    if args.command == "serve":
        return cmd_serve(args)
    elif args.command == "render":
        return cmd_render(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
