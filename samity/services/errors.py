"""Exceptions raised by the service layer."""


class SamityError(Exception):
    """Base exception for all service errors."""

    status_code = 500

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self):
        return {
            'status': 'error',
            'error': type(self).__name__,
            'message': self.message,
            'details': self.details,
        }


class ValidationError(SamityError):
    """Raised when input is missing, malformed or out of range"""
    status_code = 400


class DuplicateError(ValidationError):
    """Raised when a unique field (phone, username) is already taken"""
    pass


class NotFoundError(SamityError):
    """Raised when an id does not resolve to an existing record"""
    status_code = 404

    def __init__(self, entity, entity_id):
        super().__init__(f"{entity} {entity_id} not found",
                         {'entity': entity, 'id': entity_id})


class InvalidStateError(SamityError):
    """Raised when a lifecycle transition is not allowed"""
    status_code = 409


class AuthenticationError(SamityError):
    """Raised when credentials are rejected"""
    status_code = 401


class AuthorizationError(SamityError):
    """Raised when the signed-in user may not perform the action"""
    status_code = 403
