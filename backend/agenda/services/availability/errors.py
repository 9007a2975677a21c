# backend/agenda/services/availability/errors.py
"""
Availability error taxonomy.

ValidationError and NotFoundError are client errors; DataSourceError means
the data store failed and must never be reported as "no availability".
"""


class AvailabilityError(Exception):
    """Base class for all availability engine errors."""

    default_message = "Availability computation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AvailabilityError):
    default_message = "Invalid request"


class NotFoundError(AvailabilityError):
    default_message = "Not found"


class WorkspaceNotFound(NotFoundError):
    default_message = "Workspace not found"


class ServiceNotFound(NotFoundError):
    # Same message for missing, inactive and foreign services
    default_message = "Service not found or inactive"


class DataSourceError(AvailabilityError):
    default_message = "Failed to load scheduling data"


class ScanCancelled(AvailabilityError):
    default_message = "Availability scan cancelled"
