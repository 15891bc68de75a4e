"""Custom exception classes for the application."""


class BaseAppException(Exception):
    """Base exception class for all application exceptions."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(BaseAppException):
    """Raised when there's a configuration error."""
    pass


class StorageError(BaseAppException):
    """Raised when the backing store cannot persist a value."""
    pass


class QuotaExceededError(StorageError):
    """Raised when a write would exceed the storage quota."""
    pass


class WriteFailedError(StorageError):
    """Raised when a write fails for any other reason."""
    pass


class DataImportError(BaseAppException):
    """Raised when a backup document cannot be imported."""
    pass


class InvalidImportFormatError(DataImportError):
    """Raised when a backup document is not a JSON array of records."""
    pass


class ImageError(BaseAppException):
    """Raised when a product photo cannot be processed."""
    pass


class ImageDecodeError(ImageError):
    """Raised when the image decoder rejects the input."""
    pass


class RepositoryError(BaseAppException):
    """Raised when a repository operation violates a collection invariant."""
    pass


class DuplicateIdError(RepositoryError):
    """Raised when adding a product whose id is already present."""
    pass


class InvalidRecordError(RepositoryError):
    """Raised when a record in a bulk replacement is malformed."""
    pass
