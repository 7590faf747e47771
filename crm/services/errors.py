"""Service-layer errors.

Each error carries the HTTP status it maps to; main.py renders them all
through one exception handler as an ErrorResponse.
"""


class CRMError(Exception):
    """Base error for service-layer failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CRMError):
    """Malformed or missing input, rejected before reaching storage.

    ``fields`` maps field names to a short reason when the failure is
    attributable to specific inputs.
    """

    status_code = 400

    def __init__(self, message: str, fields: dict[str, str] | None = None):
        super().__init__(message)
        self.fields = fields or {}


class NotFoundError(CRMError):
    """Raised when an id does not resolve to a stored record."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class IllegalTransitionError(CRMError):
    """A status change not allowed by the record's state machine."""

    status_code = 409

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(f"Cannot change {entity} status from '{current}' to '{target}'")
        self.entity = entity
        self.current = current
        self.target = target


class DeliveryError(CRMError):
    """Outbound mail failed. The record was persisted and marked failed."""

    status_code = 502

    def __init__(self, message: str, record_id: str | None = None):
        super().__init__(message)
        self.record_id = record_id


class AuthenticationError(CRMError):
    """Bad credentials or failed human verification.

    The message never says which factor failed.
    """

    status_code = 401

    def __init__(self, message: str = "Invalid login credentials"):
        super().__init__(message)
