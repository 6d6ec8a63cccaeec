"""Git platform adapters (base, GitHub and App auth)."""

from ghrelay.adapters.auth import GitHubAppAuth
from ghrelay.adapters.base import GitPlatformAdapter, GitPlatformError
from ghrelay.adapters.github import GitHubAdapter

__all__ = ["GitHubAppAuth", "GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]
