"""ghadmin exceptions."""


class GitHubAdminError(Exception):
    """Base exception for ghadmin."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(GitHubAdminError):
    """Token rejected while connecting."""

    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class NotConnectedError(GitHubAdminError):
    """Operation needs a GitHub connection and there is none."""

    code = "NOT_CONNECTED"

    def __init__(self, message: str = "not connected"):
        super().__init__(message, status_code=409)


class InvalidArgumentError(GitHubAdminError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class GatewayError(GitHubAdminError):
    """A GitHub API call failed after the gateway's own retries."""

    code = "GITHUB_ERROR"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, status_code=status_code or 502)
