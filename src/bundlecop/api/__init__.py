"""Client for the bundlecop tracking API."""

from .client import ApiError, ReadingsApiClient

__all__ = ["ApiError", "ReadingsApiClient"]
