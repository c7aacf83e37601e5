"""Tests for environment fact gathering (karetech_stack.validation.context).

Covers:
- lookup_npm_package: 200, 404, other status, timeout, connection error
- gather_validation_context: directory check, offline mode, registry settings
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from karetech_stack.config import Settings
from karetech_stack.validation.context import gather_validation_context, lookup_npm_package


def _mock_client(response=None, side_effect=None) -> MagicMock:
    client = AsyncMock()
    if side_effect is not None:
        client.get.side_effect = side_effect
    else:
        client.get.return_value = response
    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=client)
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm


def _response(status: int) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    return response


# ---------------------------------------------------------------------------
# lookup_npm_package
# ---------------------------------------------------------------------------


class TestLookupNpmPackage:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_package_exists(self):
        cm = _mock_client(_response(200))
        with patch("karetech_stack.validation.context.httpx.AsyncClient", return_value=cm):
            assert await lookup_npm_package("react") == (True, None)
        client = await cm.__aenter__()
        assert client.get.call_args.args[0] == "https://registry.npmjs.org/react"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_package_free(self):
        cm = _mock_client(_response(404))
        with patch("karetech_stack.validation.context.httpx.AsyncClient", return_value=cm):
            assert await lookup_npm_package("acme-portal") == (False, None)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_scoped_name_quoted(self):
        cm = _mock_client(_response(404))
        with patch("karetech_stack.validation.context.httpx.AsyncClient", return_value=cm):
            await lookup_npm_package("@acme/portal", registry="https://npm.example.com/")
        client = await cm.__aenter__()
        assert client.get.call_args.args[0] == "https://npm.example.com/@acme%2Fportal"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_status(self):
        cm = _mock_client(_response(503))
        with patch("karetech_stack.validation.context.httpx.AsyncClient", return_value=cm):
            exists, note = await lookup_npm_package("acme-portal")
        assert exists is None
        assert "HTTP 503" in note

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout(self):
        cm = _mock_client(side_effect=httpx.ReadTimeout("slow"))
        with patch("karetech_stack.validation.context.httpx.AsyncClient", return_value=cm):
            exists, note = await lookup_npm_package("acme-portal", timeout=2.0)
        assert exists is None
        assert "timed out after 2.0s" in note

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connection_error(self):
        cm = _mock_client(side_effect=httpx.ConnectError("refused"))
        with patch("karetech_stack.validation.context.httpx.AsyncClient", return_value=cm):
            exists, note = await lookup_npm_package("acme-portal")
        assert exists is None
        assert "ConnectError" in note


# ---------------------------------------------------------------------------
# gather_validation_context
# ---------------------------------------------------------------------------


class TestGatherValidationContext:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_offline_skips_registry(self, offline_settings, tmp_path: Path):
        with patch(
            "karetech_stack.validation.context.lookup_npm_package", new_callable=AsyncMock
        ) as mock_lookup:
            context = await gather_validation_context("acme-portal", offline_settings, cwd=tmp_path)
        mock_lookup.assert_not_called()
        assert context.directory_exists is False
        assert context.npm_package_exists is None
        assert context.npm_note.startswith("Offline mode")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_existing_directory(self, offline_settings, tmp_path: Path):
        (tmp_path / "acme-portal").mkdir()
        context = await gather_validation_context("acme-portal", offline_settings, cwd=tmp_path)
        assert context.directory_exists is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_online_uses_settings(self, tmp_path: Path):
        settings = Settings(npm_registry="https://npm.example.com", network_timeout=1.5)
        with patch(
            "karetech_stack.validation.context.lookup_npm_package",
            new_callable=AsyncMock,
            return_value=(True, None),
        ) as mock_lookup:
            context = await gather_validation_context("acme-portal", settings, cwd=tmp_path)
        mock_lookup.assert_awaited_once_with("acme-portal", "https://npm.example.com", 1.5)
        assert context.npm_package_exists is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_name(self):
        context = await gather_validation_context(None)
        assert context.directory_exists is False
        assert context.npm_package_exists is None
