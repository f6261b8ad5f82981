"""Custom exceptions for service layer."""


class FocusFlowError(Exception):
    """Base exception for all FocusFlow errors."""

    pass


class StorageError(FocusFlowError):
    """Exception raised for key-value store operations."""

    pass


class StorageReadError(StorageError):
    """Exception raised when a stored value cannot be read."""

    pass


class StorageWriteError(StorageError):
    """Exception raised when a value cannot be written (quota, disabled storage)."""

    pass
