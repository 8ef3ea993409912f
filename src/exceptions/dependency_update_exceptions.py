"""
Dependency Update Exceptions

Custom exceptions for the dependency update workflow. Every one of them is
fatal for the run that raised it; none is retried automatically.
"""

from http import HTTPStatus
from typing import List, Optional

from src.utils.exception import AppException


# ============================================================================
# BASE EXCEPTION
# ============================================================================

class DependencyUpdateException(AppException):
    """Base exception for dependency update workflow errors."""
    def __init__(self, message: str, status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, message=message)


# ============================================================================
# GUARD EXCEPTIONS
# ============================================================================

class DuplicateProposalError(DependencyUpdateException):
    """Raised when an update branch from a previous run is still present."""
    def __init__(self, repo_name: str, branch_names: List[str]):
        message = (
            f"Update proposal already active in {repo_name}: "
            f"{', '.join(branch_names)}"
        )
        super().__init__(message=message, status_code=HTTPStatus.CONFLICT)
        self.repo_name = repo_name
        self.branch_names = branch_names


# ============================================================================
# LOOKUP EXCEPTIONS
# ============================================================================

class NotFoundError(DependencyUpdateException):
    """Base exception for missing remote resources."""
    def __init__(self, message: str):
        super().__init__(message=message, status_code=HTTPStatus.NOT_FOUND)


class RepositoryNotFoundError(NotFoundError):
    """Raised when the repository does not exist or is not visible to the token."""
    def __init__(self, repo_name: str):
        super().__init__(message=f"Repository not found: {repo_name}")
        self.repo_name = repo_name


class BranchNotFoundError(NotFoundError):
    """Raised when a branch cannot be found."""
    def __init__(self, repo_name: str, branch_name: str):
        super().__init__(message=f"Branch {branch_name} not found in {repo_name}")
        self.repo_name = repo_name
        self.branch_name = branch_name


class ManifestNotFoundError(NotFoundError):
    """Raised when the manifest file is missing on the main branch."""
    def __init__(self, repo_name: str, path: str):
        super().__init__(message=f"Manifest {path} not found in {repo_name}")
        self.repo_name = repo_name
        self.path = path


# ============================================================================
# DECODE EXCEPTIONS
# ============================================================================

class DecodeError(DependencyUpdateException):
    """Base exception for manifest content that cannot be understood."""
    def __init__(self, message: str):
        super().__init__(message=message, status_code=HTTPStatus.UNPROCESSABLE_ENTITY)


class ManifestDecodeError(DecodeError):
    """Raised when manifest content is not a decodable JSON object."""
    def __init__(self, path: str, error_detail: str):
        super().__init__(message=f"Failed to decode manifest {path}: {error_detail}")
        self.path = path
        self.error_detail = error_detail


class ManifestVersionError(DecodeError):
    """Raised when the manifest's own version is missing or not semantic."""
    def __init__(self, version: Optional[str]):
        super().__init__(message=f"Manifest version is not a valid semantic version: {version!r}")
        self.version = version


# ============================================================================
# RESOLUTION EXCEPTIONS
# ============================================================================

class ResolutionError(DependencyUpdateException):
    """Raised when the update resolver fails or times out."""
    def __init__(self, error_detail: str):
        super().__init__(message=f"Dependency resolution failed: {error_detail}")
        self.error_detail = error_detail


# ============================================================================
# REMOTE API EXCEPTIONS
# ============================================================================

class RemoteError(DependencyUpdateException):
    """Base exception for hosting API failures."""
    def __init__(self, message: str, status_code: int = HTTPStatus.BAD_GATEWAY):
        super().__init__(message=message, status_code=status_code)


class RemoteAuthenticationError(RemoteError):
    """Raised when the hosting API rejects the access token."""
    def __init__(self):
        super().__init__(message="GitHub API authentication failed", status_code=HTTPStatus.UNAUTHORIZED)


class RemotePermissionError(RemoteError):
    """Raised when the access token lacks a required permission."""
    def __init__(self, message: str = "Insufficient permissions for GitHub operation"):
        super().__init__(message=message, status_code=HTTPStatus.FORBIDDEN)


class RemoteTimeoutError(RemoteError):
    """Raised when a hosting API call does not answer in time."""
    def __init__(self, operation: str, timeout_seconds: float):
        message = f"GitHub API call '{operation}' timed out after {timeout_seconds}s"
        super().__init__(message=message, status_code=HTTPStatus.GATEWAY_TIMEOUT)
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class RevisionInvalidError(RemoteError):
    """Raised when a branch is created from a missing or unknown revision."""
    def __init__(self, revision: Optional[str], error_detail: str = "revision is invalid"):
        super().__init__(
            message=f"Cannot create branch from {revision!r}: {error_detail}",
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
        )
        self.revision = revision


class RemoteConflictError(RemoteError):
    """Raised when the branch name is already taken on the remote."""
    def __init__(self, repo_name: str, branch_name: str):
        super().__init__(
            message=f"Branch {branch_name} already exists in {repo_name}",
            status_code=HTTPStatus.CONFLICT,
        )
        self.repo_name = repo_name
        self.branch_name = branch_name


class StaleRevisionError(RemoteError):
    """Raised when the file changed remotely since it was read."""
    def __init__(self, path: str, revision: str):
        super().__init__(
            message=f"Revision {revision} of {path} is stale; the file changed remotely",
            status_code=HTTPStatus.CONFLICT,
        )
        self.path = path
        self.revision = revision


class WriteError(RemoteError):
    """Raised when a file update is rejected for any other reason."""
    def __init__(self, path: str, error_detail: str):
        super().__init__(message=f"Failed to write {path}: {error_detail}")
        self.path = path
        self.error_detail = error_detail
