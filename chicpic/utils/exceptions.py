"""Custom exceptions hierarchy."""


class ChicPicException(Exception):
    """Base exception for all Chic Pic errors."""

    pass


class ConfigurationError(ChicPicException):
    """Missing or inconsistent configuration."""

    pass


class StorageError(ChicPicException):
    """Error during object storage operations."""

    pass


class DatabaseError(ChicPicException):
    """Error during database operations."""

    pass


class ValidationError(ChicPicException, ValueError):
    """Invalid asset data (unknown fields, sizes not valid for a category)."""

    pass


class AssetNotFoundError(ChicPicException):
    """Requested garment, model or look does not exist."""

    pass
