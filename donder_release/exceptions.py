"""Contains exceptions raised while planning and publishing a release."""


class DonderReleaseError(Exception):
    """Base class for all errors that end a release run."""

    pass


class RepositoryAccessError(DonderReleaseError):
    """Raised when the repository location or a reference cannot be read."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        """Initializes the exception with the message and optional git stderr."""
        super().__init__(message)
        self.stderr = stderr


class VersionFileError(RepositoryAccessError):
    """Raised when a package manifest cannot be read, has no version, or cannot be written."""

    pass


class ReleaseHostError(DonderReleaseError):
    """Base class for errors returned by the release host."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initializes the exception with the message and HTTP status code."""
        super().__init__(message)
        self.status_code = status_code


class AuthorizationError(ReleaseHostError):
    """Raised when the release host rejects the credential (401/403)."""

    pass


class ValidationError(ReleaseHostError):
    """Raised when the release host rejects the request payload (422)."""

    pass


class ReleaseConflictError(ValidationError):
    """Raised when creating a release fails because its tag already has one."""

    pass


class TransientNetworkError(ReleaseHostError):
    """Raised for failures worth retrying: 5xx responses, timeouts and connection errors."""

    pass


class DuplicateReleaseError(DonderReleaseError):
    """Raised when a release for the tag already exists and overwriting was not requested."""

    def __init__(self, tag_name: str) -> None:
        """Initializes the exception with the duplicated tag name."""
        super().__init__(f"A release for tag {tag_name} already exists. Use --overwrite to update it.")
        self.tag_name = tag_name
