"""API error types rendered as JSON by the app-level error handler."""


class ApiError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"success": False, "message": self.message}


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid request"


class UploadRejected(ValidationError):
    message = "Upload rejected"


class MissingFile(UploadRejected):
    message = "No image file provided"


class FileTooLarge(UploadRejected):
    message = "File too large. Maximum size is 10MB."


class FileTypeNotAllowed(UploadRejected):
    def __init__(self, extension, mime_type):
        self.extension = extension
        self.mime_type = mime_type
        super().__init__(
            f"File type not allowed. Extension: {extension or '(none)'}, "
            f"MIME type: {mime_type or '(none)'}"
        )


class InvalidImageId(ValidationError):
    message = "Invalid image ID"


class ImageNotFound(ApiError):
    status_code = 404
    message = "Image not found"


class InvalidCredentials(ApiError):
    status_code = 401
    message = "Invalid email or password"


class EmailAlreadyRegistered(ApiError):
    status_code = 409
    message = "Email already registered"


class PersistenceError(ApiError):
    status_code = 500
    message = "Failed to store image"
