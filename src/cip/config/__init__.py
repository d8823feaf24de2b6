"""Configuration package."""

from cip.config.settings import Settings

__all__ = ["Settings"]
