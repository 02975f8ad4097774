"""Custom exceptions for the DentalRef library."""


class DentalRefException(Exception):
    """Base exception for all DentalRef errors."""
    pass


# Configuration and Validation Exceptions

class ConfigurationError(DentalRefException):
    """Error in configuration."""
    pass


class ValidationError(DentalRefException):
    """Caller input failed validation."""
    pass


class ComparisonError(ValidationError):
    """A material comparison request cannot be satisfied."""
    pass


# Entity Store Exceptions

class DataStoreError(DentalRefException):
    """Base exception for entity store errors."""
    pass


class DataLoadError(DataStoreError):
    """A dataset file is missing, unreadable or malformed."""
    pass


class EntityNotFoundError(DataStoreError):
    """No material or procedure matches the requested id."""
    pass
