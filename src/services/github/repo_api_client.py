"""
GitHub API Client for Repository Operations

Token-authenticated client for the branch, contents and pull request
endpoints used by the dependency update workflow. Requests are bounded by a
timeout and never retried; HTTP failures are translated into typed exceptions.
"""

import base64
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from src.core.dependency_update_config import GitHubAPIConfig, dependency_update_settings
from src.exceptions.dependency_update_exceptions import (
    BranchNotFoundError,
    ManifestDecodeError,
    ManifestNotFoundError,
    RemoteAuthenticationError,
    RemoteConflictError,
    RemoteError,
    RemotePermissionError,
    RemoteTimeoutError,
    RepositoryNotFoundError,
    RevisionInvalidError,
    StaleRevisionError,
    WriteError,
)
from src.models.schemas.dependency_update import (
    BranchRef,
    PullRequest,
    PullRequestRequest,
    RemoteFile,
    RepositoryHandle,
)
from src.utils.logging.otel_logger import get_logger

logger = get_logger(__name__)


class RepoApiClient:
    """
    GitHub API client implementing RemoteRepositoryGateway.

    Features:
    - Personal access token authentication
    - Per-request timeout surfaced as RemoteTimeoutError
    - Typed exceptions for conflicts, stale revisions and permission problems
    - No per-run state, so one client can serve concurrent runs
    """

    def __init__(
        self,
        token: str,
        config: Optional[GitHubAPIConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.token = token
        self.config = config or dependency_update_settings.github_api
        self.base_url = self.config.api_base_url.rstrip("/")
        self.timeout = httpx.Timeout(self.config.request_timeout)
        self._http_client = http_client

    async def list_branches(self, repository: RepositoryHandle) -> List[BranchRef]:
        """
        List all branches of a repository.

        Args:
            repository: Target repository

        Returns:
            Every branch with its head commit SHA

        Raises:
            RepositoryNotFoundError: If the repository doesn't exist
            RemoteError: For other API errors, or if the branch list exceeds max_branch_pages
        """
        endpoint = f"/repos/{repository.full_name}/branches"
        per_page = self.config.branches_per_page
        params: Dict[str, Any] = {"per_page": per_page}

        logger.info(f"Listing branches for {repository}")

        try:
            # GitHub API paginates branches, we need to collect all pages
            branches: List[BranchRef] = []
            page = 1

            while True:
                params["page"] = page
                response_data = await self._make_api_request(
                    method="GET",
                    endpoint=endpoint,
                    params=params
                )

                if not response_data:
                    break

                branches.extend(
                    BranchRef(name=item["name"], sha=item["commit"]["sha"])
                    for item in response_data
                )

                if len(response_data) < per_page:
                    break

                page += 1

                if page > self.config.max_branch_pages:
                    # A partial list could hide an existing update branch
                    raise RemoteError(
                        f"More than {self.config.max_branch_pages} pages of branches in {repository}; "
                        f"refusing to work from a partial branch list"
                    )

            logger.info(f"Found {len(branches)} branches in {repository}")
            return branches

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise RepositoryNotFoundError(repository.full_name)
            raise self._handle_http_error(e, f"list branches for {repository}")

    async def get_branch(self, repository: RepositoryHandle, branch_name: str) -> BranchRef:
        """
        Get a branch and the SHA of its head commit.

        Raises:
            BranchNotFoundError: If the branch doesn't exist
            RemoteError: For other API errors
        """
        endpoint = f"/repos/{repository.full_name}/branches/{quote(branch_name, safe='')}"

        try:
            response_data = await self._make_api_request(method="GET", endpoint=endpoint)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise BranchNotFoundError(repository.full_name, branch_name)
            raise self._handle_http_error(e, f"get branch {branch_name} of {repository}")

        return BranchRef(name=response_data["name"], sha=response_data["commit"]["sha"])

    async def get_file(self, repository: RepositoryHandle, path: str, ref: str) -> RemoteFile:
        """
        Get file content and blob SHA from the contents API.

        Args:
            repository: Target repository
            path: File path inside the repository
            ref: Commit SHA or branch name to read from

        Returns:
            Transport-encoded content and its revision marker

        Raises:
            ManifestNotFoundError: If the file doesn't exist on ref
            ManifestDecodeError: If the path is not a regular file
            RemoteError: For other API errors
        """
        endpoint = f"/repos/{repository.full_name}/contents/{quote(path)}"

        logger.info(f"Fetching {path}@{ref} from {repository}")

        try:
            response_data = await self._make_api_request(
                method="GET",
                endpoint=endpoint,
                params={"ref": ref}
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise ManifestNotFoundError(repository.full_name, path)
            raise self._handle_http_error(e, f"get contents of {path} in {repository}")

        if not isinstance(response_data, dict) or response_data.get("type", "file") != "file":
            raise ManifestDecodeError(path, "path does not point to a file")

        return RemoteFile(
            path=response_data.get("path", path),
            sha=response_data["sha"],
            content=response_data.get("content") or "",
            encoding=response_data.get("encoding"),
        )

    async def create_branch(
        self, repository: RepositoryHandle, branch_name: str, from_sha: str
    ) -> BranchRef:
        """
        Create a branch reference pointing at an existing commit.

        Raises:
            RevisionInvalidError: If from_sha is empty or unknown to the remote
            RemoteConflictError: If the branch name already exists
            RemoteError: For other API errors
        """
        if not from_sha:
            raise RevisionInvalidError(from_sha, "no revision was read before branching")

        endpoint = f"/repos/{repository.full_name}/git/refs"
        payload = {"ref": f"refs/heads/{branch_name}", "sha": from_sha}

        logger.info(f"Creating branch {branch_name} from {from_sha[:8]} in {repository}")

        try:
            response_data = await self._make_api_request(
                method="POST",
                endpoint=endpoint,
                json_data=payload
            )
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            detail = self._error_detail(e.response)
            if status_code == 409 or (status_code == 422 and "already exists" in detail.lower()):
                raise RemoteConflictError(repository.full_name, branch_name)
            if status_code == 422:
                raise RevisionInvalidError(from_sha, detail)
            if status_code == 404:
                raise RepositoryNotFoundError(repository.full_name)
            raise self._handle_http_error(e, f"create branch {branch_name} in {repository}")

        sha = (response_data.get("object") or {}).get("sha") or from_sha
        logger.info(f"Successfully created branch {branch_name} in {repository}")
        return BranchRef(name=branch_name, sha=sha)

    async def update_file(
        self,
        repository: RepositoryHandle,
        path: str,
        content: str,
        message: str,
        revision: str,
        branch: str,
    ) -> str:
        """
        Replace a file on a branch, guarded by the blob SHA read earlier.

        Args:
            repository: Target repository
            path: File path inside the repository
            content: New file text (encoded for transport here)
            message: Commit message
            revision: Blob SHA the caller read; rejected by the remote if stale
            branch: Branch receiving the commit

        Returns:
            SHA of the created commit

        Raises:
            StaleRevisionError: If revision no longer matches the remote file
            WriteError: If the write is rejected for another reason
        """
        endpoint = f"/repos/{repository.full_name}/contents/{quote(path)}"
        payload = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "sha": revision,
            "branch": branch,
        }

        logger.info(f"Committing {path} to {branch} in {repository}")

        try:
            response_data = await self._make_api_request(
                method="PUT",
                endpoint=endpoint,
                json_data=payload
            )
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            detail = self._error_detail(e.response)
            if status_code == 409 or (status_code == 422 and "sha" in detail.lower()):
                raise StaleRevisionError(path, revision)
            if status_code in (401, 403):
                raise self._handle_http_error(e, f"update {path} on {branch}")
            raise WriteError(path, f"{status_code} - {detail}" if detail else str(status_code))

        commit_sha = (response_data.get("commit") or {}).get("sha", "")
        logger.info(f"Successfully committed {path} to {branch} ({commit_sha[:8]})")
        return commit_sha

    async def open_pull_request(
        self, repository: RepositoryHandle, request: PullRequestRequest
    ) -> PullRequest:
        """
        Open a pull request.

        Raises:
            RemoteError: If the remote rejects the pull request
        """
        endpoint = f"/repos/{repository.full_name}/pulls"

        logger.info(f"Opening pull request {request.head} -> {request.base} in {repository}")

        try:
            response_data = await self._make_api_request(
                method="POST",
                endpoint=endpoint,
                json_data=request.model_dump()
            )
        except httpx.HTTPStatusError as e:
            raise self._handle_http_error(e, f"open pull request from {request.head} in {repository}")

        logger.info(f"Successfully opened pull request #{response_data.get('number')} in {repository}")
        return PullRequest(
            number=response_data["number"],
            url=response_data.get("html_url"),
            head=request.head,
            base=request.base,
        )

    async def _make_api_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make one authenticated API request.

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            httpx.HTTPStatusError: For non-2xx responses, left to the caller to map
            RemoteTimeoutError: If the request exceeds the configured timeout
            RemoteError: For transport failures
        """
        url = f"{self.base_url}{endpoint}"
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.config.api_version,
            "User-Agent": self.config.user_agent,
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    params=params,
                    json=json_data,
                    timeout=self.timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(
                        method=method,
                        url=url,
                        headers=headers,
                        params=params,
                        json=json_data
                    )
        except httpx.TimeoutException as e:
            raise RemoteTimeoutError(f"{method} {endpoint}", self.config.request_timeout) from e
        except httpx.RequestError as e:
            raise RemoteError(f"Request {method} {endpoint} failed: {e}") from e

        response.raise_for_status()

        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Extract GitHub's error message from a failed response."""
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get("message", "")) or response.text
        return response.text

    def _handle_http_error(self, error: httpx.HTTPStatusError, operation: str) -> RemoteError:
        """
        Convert HTTP status error to appropriate RemoteError.

        Args:
            error: HTTP status error from httpx
            operation: Description of the operation that failed

        Returns:
            Appropriate RemoteError subclass
        """
        status_code = error.response.status_code
        detail = self._error_detail(error.response)

        if status_code == 401:
            return RemoteAuthenticationError()
        elif status_code == 403:
            return RemotePermissionError(f"Permission denied to {operation}")
        else:
            message = f"GitHub API error during {operation}: {status_code}"
            if detail:
                message += f" - {detail}"
            return RemoteError(message=message, status_code=status_code)
