"""Tests for the GitHub client -- fetch_readme, readme_url, client lifecycle."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from readmesync.clients import github_client
from readmesync.clients.github_client import fetch_readme, readme_url
from readmesync.errors import FetchStatusError, FetchTransportError, UpstreamFetchError


def _mock_client(response=None, side_effect=None):
    """Create a mock AsyncClient whose ``get`` returns *response*."""
    client = MagicMock()
    client.get = AsyncMock(return_value=response, side_effect=side_effect)
    return client


# ---------- readme_url ----------


def test_readme_url_defaults_to_org():
    assert readme_url("mux") == "https://api.github.com/repos/darlinggo/mux/readme"


def test_readme_url_custom_base_and_org():
    url = readme_url("mux", org="acme", api_base="https://ghe.example.com/api/v3/")
    assert url == "https://ghe.example.com/api/v3/repos/acme/mux/readme"


# ---------- fetch_readme ----------


@pytest.mark.asyncio
async def test_fetch_readme_returns_raw_bytes():
    client = _mock_client(httpx.Response(200, content=b"# mux\n\nA router."))
    with patch("readmesync.clients.github_client._get_client", return_value=client):
        body = await fetch_readme("mux", "ghp_token")

    assert body == b"# mux\n\nA router."
    client.get.assert_awaited_once()
    args, kwargs = client.get.call_args
    assert args[0] == "https://api.github.com/repos/darlinggo/mux/readme"
    assert kwargs["headers"]["Accept"] == "application/vnd.github.v3.raw"
    assert kwargs["headers"]["Authorization"] == "token ghp_token"


@pytest.mark.asyncio
async def test_fetch_readme_non_200_carries_repo_status_and_body():
    client = _mock_client(httpx.Response(404, content=b'{"message": "Not Found"}'))
    with patch("readmesync.clients.github_client._get_client", return_value=client):
        with pytest.raises(FetchStatusError) as excinfo:
            await fetch_readme("missing", "ghp_token")

    err = excinfo.value
    assert err.repo == "missing"
    assert err.status == "404 Not Found"
    assert err.body == b'{"message": "Not Found"}'
    assert "missing" in str(err)
    assert err.status_code == 500


@pytest.mark.asyncio
async def test_fetch_readme_transport_error_keeps_repo():
    client = _mock_client(side_effect=httpx.ConnectError("connection refused"))
    with patch("readmesync.clients.github_client._get_client", return_value=client):
        with pytest.raises(FetchTransportError) as excinfo:
            await fetch_readme("mux", "ghp_token")

    assert excinfo.value.repo == "mux"
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert isinstance(excinfo.value, UpstreamFetchError)


@pytest.mark.asyncio
async def test_fetch_readme_makes_a_single_attempt():
    client = _mock_client(httpx.Response(502, content=b"bad gateway"))
    with patch("readmesync.clients.github_client._get_client", return_value=client):
        with pytest.raises(FetchStatusError):
            await fetch_readme("mux", "ghp_token")
    assert client.get.await_count == 1


# ---------- shared client ----------


@pytest.mark.asyncio
async def test_close_client_resets_shared_client():
    await github_client.close_client()
    first = github_client._get_client(timeout=5.0)
    assert github_client._get_client() is first
    assert first.timeout.connect == 5.0

    await github_client.close_client()
    assert github_client._client is None


@pytest.mark.asyncio
async def test_fetch_readme_invalid_name_is_transport_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"# ok"))
    async with httpx.AsyncClient(transport=transport) as client:
        with patch("readmesync.clients.github_client._get_client", return_value=client):
            with pytest.raises(FetchTransportError) as excinfo:
                await fetch_readme("bad\nname", "ghp_token")

    assert excinfo.value.repo == "bad\nname"
    assert isinstance(excinfo.value.__cause__, httpx.InvalidURL)
