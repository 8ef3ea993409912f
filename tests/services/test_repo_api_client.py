"""
Tests for the GitHub repository API client, served by httpx.MockTransport.
"""

import base64
import json

import httpx
import pytest

from src.core.dependency_update_config import GitHubAPIConfig
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
from src.models.schemas.dependency_update import PullRequestRequest
from src.services.github.repo_api_client import RepoApiClient
from tests.doubles import MAIN_SHA, MANIFEST_SHA

API = "https://api.github.com"


def _client(handler, **config):
    transport = httpx.MockTransport(handler)
    return RepoApiClient(
        token="test-token",
        config=GitHubAPIConfig(**config),
        http_client=httpx.AsyncClient(transport=transport),
    )


def _branch(name, sha=MAIN_SHA):
    return {"name": name, "commit": {"sha": sha}}


class TestRequests:

    @pytest.mark.asyncio
    async def test_sends_token_and_api_headers(self, repository):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=_branch("master"))

        await _client(handler).get_branch(repository, "master")

        request = seen[0]
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"
        assert request.headers["User-Agent"] == "santari/1.0"
        assert str(request.url) == f"{API}/repos/owner/test-repo/branches/master"

    @pytest.mark.asyncio
    async def test_timeout_becomes_remote_timeout_error(self, repository):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(RemoteTimeoutError):
            await _client(handler).get_branch(repository, "master")

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_remote_error(self, repository):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteError, match="connection refused"):
            await _client(handler).get_branch(repository, "master")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, error_type",
        [(401, RemoteAuthenticationError), (403, RemotePermissionError)],
    )
    async def test_auth_failures_are_typed(self, repository, status_code, error_type):
        def handler(request):
            return httpx.Response(status_code, json={"message": "Bad credentials"})

        with pytest.raises(error_type):
            await _client(handler).list_branches(repository)

    @pytest.mark.asyncio
    async def test_server_error_keeps_status_code(self, repository):
        def handler(request):
            return httpx.Response(502, json={"message": "Server Error"})

        with pytest.raises(RemoteError) as exc_info:
            await _client(handler).get_branch(repository, "master")

        assert exc_info.value.status_code == 502
        assert "Server Error" in str(exc_info.value)


class TestBranches:

    @pytest.mark.asyncio
    async def test_list_branches_collects_every_page(self, repository):
        pages = {
            "1": [_branch("master"), _branch("develop")],
            "2": [_branch("update-deps-santari-5")],
        }

        def handler(request):
            assert request.url.params["per_page"] == "2"
            return httpx.Response(200, json=pages.get(request.url.params["page"], []))

        branches = await _client(handler, branches_per_page=2).list_branches(repository)

        assert [b.name for b in branches] == ["master", "develop", "update-deps-santari-5"]

    @pytest.mark.asyncio
    async def test_list_branches_fails_past_page_limit(self, repository):
        requested = []

        def handler(request):
            requested.append(request.url.params["page"])
            return httpx.Response(200, json=[_branch(f"b{len(requested)}")])

        with pytest.raises(RemoteError, match="partial branch list"):
            await _client(handler, branches_per_page=1, max_branch_pages=3).list_branches(repository)

        assert requested == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_list_branches_missing_repository(self, repository):
        def handler(request):
            return httpx.Response(404, json={"message": "Not Found"})

        with pytest.raises(RepositoryNotFoundError):
            await _client(handler).list_branches(repository)

    @pytest.mark.asyncio
    async def test_get_branch_returns_head_sha(self, repository):
        def handler(request):
            return httpx.Response(200, json=_branch("master", "1" * 40))

        branch = await _client(handler).get_branch(repository, "master")

        assert branch.name == "master"
        assert branch.sha == "1" * 40

    @pytest.mark.asyncio
    async def test_get_branch_missing(self, repository):
        def handler(request):
            return httpx.Response(404, json={"message": "Branch not found"})

        with pytest.raises(BranchNotFoundError):
            await _client(handler).get_branch(repository, "master")

    @pytest.mark.asyncio
    async def test_create_branch_posts_ref(self, repository):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(201, json={"ref": "refs/heads/update-deps-santari-1", "object": {"sha": MAIN_SHA}})

        branch = await _client(handler).create_branch(repository, "update-deps-santari-1", MAIN_SHA)

        assert seen == [{"ref": "refs/heads/update-deps-santari-1", "sha": MAIN_SHA}]
        assert branch.name == "update-deps-santari-1"
        assert branch.sha == MAIN_SHA

    @pytest.mark.asyncio
    async def test_create_branch_existing_name_is_conflict(self, repository):
        def handler(request):
            return httpx.Response(422, json={"message": "Reference already exists"})

        with pytest.raises(RemoteConflictError):
            await _client(handler).create_branch(repository, "update-deps-santari-1", MAIN_SHA)

    @pytest.mark.asyncio
    async def test_create_branch_unknown_sha_is_invalid_revision(self, repository):
        def handler(request):
            return httpx.Response(422, json={"message": "Object does not exist"})

        with pytest.raises(RevisionInvalidError):
            await _client(handler).create_branch(repository, "update-deps-santari-1", "0" * 40)

    @pytest.mark.asyncio
    async def test_create_branch_without_revision_makes_no_request(self, repository):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(RevisionInvalidError):
            await _client(handler).create_branch(repository, "update-deps-santari-1", "")


class TestContents:

    @pytest.mark.asyncio
    async def test_get_file_reads_ref_and_revision(self, repository):
        encoded = base64.b64encode(b'{"version": "1.0.0"}').decode("ascii")

        def handler(request):
            assert request.url.path == "/repos/owner/test-repo/contents/package.json"
            assert request.url.params["ref"] == MAIN_SHA
            return httpx.Response(200, json={
                "type": "file",
                "path": "package.json",
                "sha": MANIFEST_SHA,
                "content": encoded,
                "encoding": "base64",
            })

        remote_file = await _client(handler).get_file(repository, "package.json", MAIN_SHA)

        assert remote_file.sha == MANIFEST_SHA
        assert remote_file.content == encoded
        assert remote_file.encoding == "base64"

    @pytest.mark.asyncio
    async def test_get_file_missing(self, repository):
        def handler(request):
            return httpx.Response(404, json={"message": "Not Found"})

        with pytest.raises(ManifestNotFoundError):
            await _client(handler).get_file(repository, "package.json", "master")

    @pytest.mark.asyncio
    async def test_get_file_on_directory(self, repository):
        def handler(request):
            return httpx.Response(200, json=[{"type": "file", "path": "package.json/a"}])

        with pytest.raises(ManifestDecodeError):
            await _client(handler).get_file(repository, "package.json", "master")

    @pytest.mark.asyncio
    async def test_update_file_sends_base64_content_and_revision(self, repository):
        seen = []

        def handler(request):
            assert request.method == "PUT"
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"commit": {"sha": "d" * 40}})

        commit_sha = await _client(handler).update_file(
            repository,
            path="package.json",
            content='{"version": "1.1.0"}\n',
            message="Updating dependencies",
            revision=MANIFEST_SHA,
            branch="update-deps-santari-1",
        )

        payload = seen[0]
        assert commit_sha == "d" * 40
        assert base64.b64decode(payload["content"]).decode("utf-8") == '{"version": "1.1.0"}\n'
        assert payload["sha"] == MANIFEST_SHA
        assert payload["branch"] == "update-deps-santari-1"
        assert payload["message"] == "Updating dependencies"

    @pytest.mark.asyncio
    async def test_update_file_stale_revision(self, repository):
        def handler(request):
            return httpx.Response(409, json={"message": "package.json does not match " + MANIFEST_SHA})

        with pytest.raises(StaleRevisionError):
            await _client(handler).update_file(
                repository, "package.json", "{}\n", "msg", MANIFEST_SHA, "update-deps-santari-1"
            )

    @pytest.mark.asyncio
    async def test_update_file_other_rejection_is_write_error(self, repository):
        def handler(request):
            return httpx.Response(422, json={"message": "Invalid request"})

        with pytest.raises(WriteError, match="Invalid request"):
            await _client(handler).update_file(
                repository, "package.json", "{}\n", "msg", MANIFEST_SHA, "update-deps-santari-1"
            )


class TestPullRequests:

    @pytest.mark.asyncio
    async def test_open_pull_request_posts_request(self, repository):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(201, json={
                "number": 17,
                "html_url": "https://github.com/owner/test-repo/pull/17",
            })

        request = PullRequestRequest(
            title="Updating Dependencies",
            body="Dependencies to Update",
            head="update-deps-santari-1",
            base="master",
        )
        pull_request = await _client(handler).open_pull_request(repository, request)

        assert seen == [request.model_dump()]
        assert pull_request.number == 17
        assert pull_request.url == "https://github.com/owner/test-repo/pull/17"
        assert pull_request.head == "update-deps-santari-1"

    @pytest.mark.asyncio
    async def test_open_pull_request_rejected(self, repository):
        def handler(request):
            return httpx.Response(422, json={"message": "Validation Failed"})

        with pytest.raises(RemoteError, match="Validation Failed"):
            await _client(handler).open_pull_request(
                repository,
                PullRequestRequest(title="t", head="update-deps-santari-1", base="master"),
            )
