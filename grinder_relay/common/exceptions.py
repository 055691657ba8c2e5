"""
Custom Exception Classes for the Grinder Relay

Hierarchical exception structure for error handling across services.
Every error carries the HTTP status and short error kind the API returns.
"""


class RelayError(Exception):
    """Base exception for all relay errors"""

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> dict:
        """JSON body returned to the caller"""
        return {"success": False, "error": self.error, "message": self.message}


class UnauthorizedError(RelayError):
    """Credential missing, malformed or rejected by the user gate"""

    status_code = 401
    error = "Unauthorized"


class ForbiddenError(RelayError):
    """Credential present but not accepted"""

    status_code = 403
    error = "Forbidden"


class NotFoundError(RelayError):
    """Referenced fault event does not exist"""

    status_code = 404
    error = "Not Found"

    def __init__(self, message: str, resource_id: str | None = None):
        self.resource_id = resource_id
        super().__init__(message)


class PersistenceError(RelayError):
    """Event store unreachable or write rejected"""

    status_code = 500
    error = "Persistence Error"

    def __init__(self, message: str, operation: str | None = None):
        self.operation = operation
        if operation:
            message = f"{operation} failed: {message}"
        super().__init__(message)


class ConfigurationError(RelayError):
    """Required secrets or credentials absent"""

    status_code = 500
    error = "Configuration Error"
