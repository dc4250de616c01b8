"""Pytest configuration and shared fixtures.

This module provides:
- Settings pointing at a temporary template/assets directory
- A fake browser launcher in place of Playwright
- A fixed clock so default dates are deterministic
- FastAPI test client for route integration tests
"""

from collections.abc import AsyncGenerator
from datetime import date
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from core.clock import FixedClock, get_clock
from core.config import Settings, clear_settings_cache
from routes.certificates_routes import get_browser_launcher
from tests.fakes import FakeLauncher

FIXED_TODAY = date(2024, 3, 5)

TEST_TEMPLATE = """<!DOCTYPE html>
<html>
<body>
  <img src="data:image/svg+xml;base64,{{ bgBase64 }}">
  <img src="data:image/svg+xml;base64,{{ logoBase64 }}">
  <h1>{{ fullName }}</h1>
  <h2>{{ articleTitle }}</h2>
  <p id="cert-id">{{ id }}|{{ certificateId }}</p>
  <p id="cert-date">{{ date }}</p>
  <img src="data:image/png;base64,{{ qr_code }}">
</body>
</html>
"""

BG_SVG = b'<svg xmlns="http://www.w3.org/2000/svg"><rect width="10" height="10"/></svg>'
LOGO_SVG = b'<svg xmlns="http://www.w3.org/2000/svg"><circle r="4"/></svg>'


@pytest.fixture(autouse=True)
def _clear_settings():
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def asset_dir(tmp_path: Path) -> Path:
    """A template file plus bg.svg and logo.svg under tmp_path."""
    (tmp_path / "template.html").write_text(TEST_TEMPLATE, encoding="utf-8")
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "bg.svg").write_bytes(BG_SVG)
    (assets / "logo.svg").write_bytes(LOGO_SVG)
    return tmp_path


@pytest.fixture
def test_settings(asset_dir: Path) -> Settings:
    return Settings(
        certificate_template_path=asset_dir / "template.html",
        certificate_assets_path=asset_dir / "assets",
        allowed_origins="http://localhost:5173,https://app.example.com",
        environment="production",
    )


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(FIXED_TODAY)


@pytest.fixture
def app(test_settings: Settings, launcher: FakeLauncher, clock: FixedClock) -> FastAPI:
    """Application wired to the fake launcher and fixed clock."""
    from main import create_app

    application = create_app(test_settings)
    application.dependency_overrides[get_browser_launcher] = lambda: launcher
    application.dependency_overrides[get_clock] = lambda: clock
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

