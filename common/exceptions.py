"""
Custom exceptions for the CODE 4O4 backend.
"""


class Code404BaseException(Exception):
    """Base exception for all custom exceptions in the application."""
    status_code = 500

    def __init__(self, message="An error occurred in the CODE 4O4 backend"):
        self.message = message
        super().__init__(self.message)


class ValidationError(Code404BaseException):
    """Exception raised for errors in the input validation."""
    status_code = 400

    def __init__(self, message="Invalid input provided"):
        super().__init__(message)


class MissingFieldError(ValidationError):
    """Exception raised when a required field is missing."""
    def __init__(self, field_name):
        self.field_name = field_name
        message = f"Required field '{field_name}' is missing"
        super().__init__(message)


class InvalidEmailError(ValidationError):
    """Exception raised for invalid email addresses."""
    def __init__(self, email):
        self.email = email
        message = f"Invalid email address: {email}"
        super().__init__(message)


class InvalidURLError(ValidationError):
    def __init__(self, url):
        self.url = url
        message = f"Invalid URL: {url}"
        super().__init__(message)


class DatabaseError(Code404BaseException):
    """Exception raised for errors in Firestore operations."""
    def __init__(self, message="An error occurred during database operation"):
        super().__init__(message)


class DuplicateEntryError(DatabaseError):
    """Exception raised when trying to create a duplicate document."""
    status_code = 409

    def __init__(self, entry_type, identifier):
        self.entry_type = entry_type
        self.identifier = identifier
        message = f"{entry_type} with identifier '{identifier}' already exists"
        super().__init__(message)


class NotFoundError(DatabaseError):
    """Exception raised when a requested document does not exist."""
    status_code = 404

    def __init__(self, resource_type, identifier):
        self.resource_type = resource_type
        self.identifier = identifier
        message = f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message)


class AuthenticationError(Code404BaseException):
    status_code = 401

    def __init__(self, message="Authentication failed"):
        super().__init__(message)


class AuthorizationError(Code404BaseException):
    """Exception raised for errors in authorization."""
    status_code = 401

    def __init__(self, message="Unauthorized"):
        super().__init__(message)


class ExternalServiceError(Code404BaseException):
    """Exception raised when an external service (Slack, SMTP, Web Push) fails."""
    status_code = 502

    def __init__(self, service_name, message="External service error"):
        self.service_name = service_name
        message = f"{service_name} service error: {message}"
        super().__init__(message)
