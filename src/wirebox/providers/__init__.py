"""Reusable service providers."""

from .base import BaseServiceProvider
from .settings import SettingsServiceProvider

__all__ = ["BaseServiceProvider", "SettingsServiceProvider"]
