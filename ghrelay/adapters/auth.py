"""GitHub App authentication: app JWT and installation access tokens."""

import logging
import time

import jwt
import requests

from ghrelay.adapters.base import GitPlatformError
from ghrelay.adapters.github import GitHubAdapter

LOG = logging.getLogger("ghrelay.adapters.auth")

# GitHub rejects app JWTs valid for more than 10 minutes
JWT_LIFETIME_SECONDS = 9 * 60
CLOCK_SKEW_SECONDS = 60


class GitHubAppAuth:
    """Mints installation tokens for a GitHub App."""

    def __init__(self, app_id: str, private_key: str, api_url: str = "https://api.github.com") -> None:
        self._app_id = app_id
        self._private_key = private_key
        self._api_url = api_url.rstrip("/")

    def app_jwt(self, now: float | None = None) -> str:
        """Return an RS256 JWT identifying the app."""
        issued = int(now if now is not None else time.time()) - CLOCK_SKEW_SECONDS
        payload = {"iat": issued, "exp": issued + JWT_LIFETIME_SECONDS, "iss": self._app_id}
        return jwt.encode(payload, self._private_key, algorithm="RS256")

    def installation_token(self, installation_id: int) -> str:
        """Exchange the app JWT for an installation access token."""
        url = f"{self._api_url}/app/installations/{installation_id}/access_tokens"
        try:
            resp = requests.post(
                url,
                headers={
                    "Authorization": f"Bearer {self.app_jwt()}",
                    "Accept": "application/vnd.github+json",
                },
                timeout=30,
            )
        except requests.RequestException as e:
            raise GitPlatformError(f"installation token for {installation_id}: {e}") from e
        if resp.status_code >= 400:
            raise GitPlatformError(
                f"{resp.status_code}: installation token for {installation_id}: {resp.text or resp.reason}",
                status_code=resp.status_code,
            )
        LOG.debug("Installation token issued for installation %s", installation_id)
        return resp.json()["token"]

    def adapter_for(self, installation_id: int) -> tuple[GitHubAdapter, str]:
        """Return an adapter authenticated as the installation, and its
        token."""
        token = self.installation_token(installation_id)
        return GitHubAdapter(token=token, api_url=self._api_url), token
