"""ghrelay - GitHub webhook relay that starts and reconciles automation runs."""

__version__ = "0.1.0"
