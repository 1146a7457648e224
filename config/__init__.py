"""Configuration package for the contract payments service."""
from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
