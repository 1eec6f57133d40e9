"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import List, Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class MissingConfigurationException(ConfigurationException):
    """A required setting is unbound or empty at the time it is needed."""

    def __init__(self, setting: str, details: Optional[dict] = None):
        self.setting = setting
        super().__init__(
            f"Required configuration '{setting}' is not set",
            details or {"setting": setting}
        )


class InvalidConfigurationException(ConfigurationException):
    """One or more settings are bound but cannot be parsed or validated."""

    def __init__(self, settings: List[str], details: Optional[dict] = None):
        self.settings = settings
        super().__init__(
            f"Invalid configuration: {', '.join(settings)}",
            details or {"settings": settings}
        )


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class DatabaseConnectionException(ExternalServiceException):
    """The datastore could not be reached or did not answer in time."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("Database", message, details)
