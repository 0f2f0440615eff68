from __future__ import annotations


class PortfolioError(Exception):
    """Base class for failures the CLI reports instead of crashing on."""


class LogLoadError(PortfolioError):
    """The per-line commit log could not be fetched or parsed."""


class ProjectLoadError(PortfolioError):
    """The project list could not be fetched or parsed."""


class ConfigError(ValueError):
    """The site config file holds a value the build cannot use."""
