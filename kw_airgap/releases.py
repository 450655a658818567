"""Release asset discovery using the GitHub releases API."""

import logging
from typing import Any

import requests

from .exceptions import DiscoveryError
from .transport import ReleaseAsset, ReleaseAssets

__all__ = [
    "GitHubReleases",
]

_LOGGER = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
DEFAULT_REPO = "kubewarden/helm-charts"
_TIMEOUT = 60.0


class GitHubReleases(ReleaseAssets):
    """Lists and downloads the assets of releases of a GitHub repository."""

    def __init__(
        self,
        repo: str = DEFAULT_REPO,
        api_url: str = GITHUB_API,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize GitHubReleases."""
        self._repo = repo
        self._api_url = api_url.rstrip("/")
        self._session = session or requests.Session()

    def _get(self, url: str, **kwargs: Any) -> requests.Response:
        _LOGGER.debug("Fetching %s", url)
        try:
            response = self._session.get(url, timeout=_TIMEOUT, **kwargs)
            response.raise_for_status()
        except requests.RequestException as err:
            raise DiscoveryError(f"Unable to fetch {url}: {err}") from err
        return response

    async def list_assets(self, tag: str) -> list[ReleaseAsset]:
        """Return the assets of the release with the given tag."""
        url = f"{self._api_url}/repos/{self._repo}/releases/tags/{tag}"
        response = self._get(url, headers={"Accept": "application/vnd.github+json"})
        try:
            doc = response.json()
        except ValueError as err:
            raise DiscoveryError(f"Invalid JSON response from {url}: {err}") from err
        if not isinstance(doc, dict) or not isinstance(
            assets := doc.get("assets"), list
        ):
            raise DiscoveryError(f"Release {tag} response is missing assets: {doc}")
        result = []
        for asset in assets:
            if not isinstance(asset, dict) or not (
                download_url := asset.get("browser_download_url")
            ):
                raise DiscoveryError(f"Release {tag} has an invalid asset: {asset}")
            result.append(ReleaseAsset(name=asset.get("name", ""), url=download_url))
        return result

    async def fetch_text(self, url: str) -> str:
        """Download a text asset."""
        return self._get(url).text
