"""
Platform-wide exception hierarchy.

The scoring and export core never raises on malformed snapshot data; these
types are raised by the layers around it (snapshot lookups, storage
adapters, request validation). Blueprints register one handler per type in
``create_app`` and get consistent HTTP status codes everywhere.

Usage:
    from journeymap.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Journey", resource_id="j-1")
    raise ValidationError("Snapshot must be a JSON object")
"""


class NotFoundError(Exception):
    """Raised when an id does not exist in the loaded snapshot.

    Args:
        resource: Human-readable entity name (e.g. "Journey", "Client").
        resource_id: The id that was looked up.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when request input is well-formed HTTP but unusable.

    Maps to HTTP 400 in the blueprint error handlers.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class StorageError(Exception):
    """Raised by a snapshot store adapter when it cannot load or save.

    Maps to HTTP 500. The underlying exception is chained (``raise ... from``).
    """
