"""Tests for release asset discovery."""

from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from kw_airgap.exceptions import DiscoveryError
from kw_airgap.releases import GitHubReleases
from kw_airgap.transport import ReleaseAsset


def _session(payload: Any = None, text: str = "", error: Exception | None = None) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    response.text = text
    if error:
        response.raise_for_status.side_effect = error
    session = MagicMock()
    session.get.return_value = response
    return session


async def test_list_assets() -> None:
    """Test listing the assets of a release."""
    session = _session(
        {
            "tag_name": "kubewarden-defaults-1.2.8",
            "assets": [
                {
                    "name": "images.txt",
                    "browser_download_url": "https://example.com/images.txt",
                },
            ],
        }
    )
    releases = GitHubReleases(session=session)

    assets = await releases.list_assets("kubewarden-defaults-1.2.8")

    assert assets == [ReleaseAsset("images.txt", "https://example.com/images.txt")]
    url = session.get.call_args.args[0]
    assert url == (
        "https://api.github.com/repos/kubewarden/helm-charts/releases/tags/"
        "kubewarden-defaults-1.2.8"
    )


async def test_fetch_text() -> None:
    """Test downloading a text asset."""
    releases = GitHubReleases(session=_session(text="ghcr.io/a:1\n"))
    assert await releases.fetch_text("https://example.com/images.txt") == "ghcr.io/a:1\n"


async def test_http_error() -> None:
    """Test an HTTP failure is reported as a discovery error."""
    releases = GitHubReleases(
        session=_session(error=requests.HTTPError("404 Client Error: Not Found"))
    )
    with pytest.raises(DiscoveryError, match="404 Client Error"):
        await releases.list_assets("kubewarden-defaults-0.0.0")


@pytest.mark.parametrize(
    "payload",
    [[], {"tag_name": "x"}, {"assets": [{"name": "images.txt"}]}],
)
async def test_invalid_response(payload: Any) -> None:
    """Test an unexpected API response is rejected."""
    releases = GitHubReleases(session=_session(payload))
    with pytest.raises(DiscoveryError):
        await releases.list_assets("kubewarden-defaults-1.2.8")
