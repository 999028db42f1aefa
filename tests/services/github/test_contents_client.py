"""
Tests for GitHubContentsClient

Requests are served by an httpx.MockTransport so no network is used.
"""

import base64

import httpx
import pytest

from src.services.github import GitHubAPIException, GitHubContentsClient, GitHubNotFoundException


def make_client(handler, token="ghs_test_token_1234567890"):
    http_client = httpx.Client(transport=httpx.MockTransport(handler), base_url="https://api.github.com")
    return GitHubContentsClient(token=token, http_client=http_client)


def encoded(text):
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@pytest.fixture
def recorded():
    return []


class TestPullRequests:

    def test_get_pull_request(self, recorded, sample_github_pr_details):
        def handler(request):
            recorded.append(request)
            return httpx.Response(200, json=sample_github_pr_details)

        with make_client(handler) as client:
            data = client.get_pull_request("test-owner", "test-repo", 42)

        assert data["title"] == "Add order processing"
        assert recorded[0].url.path == "/repos/test-owner/test-repo/pulls/42"
        assert recorded[0].headers["Authorization"] == "Bearer ghs_test_token_1234567890"
        assert recorded[0].headers["Accept"] == "application/vnd.github+json"

    def test_files_are_paginated(self, recorded):
        def handler(request):
            recorded.append(request)
            page = int(request.url.params["page"])
            count = 100 if page == 1 else 3
            return httpx.Response(200, json=[{"filename": f"p{page}_{i}.py"} for i in range(count)])

        files = make_client(handler).get_pull_request_files("o", "r", 7)

        assert len(files) == 103
        assert [request.url.params["page"] for request in recorded] == ["1", "2"]
        assert recorded[0].url.params["per_page"] == "100"

    def test_unexpected_files_payload(self):
        client = make_client(lambda request: httpx.Response(200, json={"message": "nope"}))

        with pytest.raises(GitHubAPIException):
            client.get_pull_request_files("o", "r", 7)

    def test_not_found(self):
        client = make_client(lambda request: httpx.Response(404, json={"message": "Not Found"}))

        with pytest.raises(GitHubNotFoundException) as exc_info:
            client.get_pull_request("o", "r", 7)

        assert exc_info.value.status_code == 404

    def test_server_error(self):
        client = make_client(lambda request: httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(GitHubAPIException) as exc_info:
            client.get_pull_request("o", "r", 7)

        assert exc_info.value.status_code == 502
        assert str(exc_info.value) == "GitHub API error 502: Bad Gateway"

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GitHubAPIException) as exc_info:
            make_client(handler).get_pull_request("o", "r", 7)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class TestFileContent:

    def test_decodes_base64_at_ref(self, recorded):
        def handler(request):
            recorded.append(request)
            return httpx.Response(200, json={
                "type": "file",
                "size": 11,
                "encoding": "base64",
                "content": encoded("hello world"),
            })

        content = make_client(handler).get_file_content("o", "r", "/docs/a.md", ref="abc123")

        assert content == "hello world"
        assert recorded[0].url.path == "/repos/o/r/contents/docs/a.md"
        assert recorded[0].url.params["ref"] == "abc123"

    def test_missing_file(self):
        client = make_client(lambda request: httpx.Response(404, json={"message": "Not Found"}))
        assert client.get_file_content("o", "r", "missing.md") is None

    def test_directory(self):
        client = make_client(lambda request: httpx.Response(200, json=[{"type": "file", "name": "a.md"}]))
        assert client.get_file_content("o", "r", "docs") is None

    def test_too_large(self):
        client = make_client(lambda request: httpx.Response(200, json={
            "type": "file", "size": 5000, "encoding": "base64", "content": encoded("x"),
        }))
        assert client.get_file_content("o", "r", "big.md", max_size=100) is None

    def test_undecodable_content(self):
        client = make_client(lambda request: httpx.Response(200, json={
            "type": "file", "size": 2, "encoding": "base64", "content": encoded("ok")[:-1] + "!",
        }))
        assert client.get_file_content("o", "r", "bad.md") is None

    def test_plain_encoding_is_returned_as_is(self):
        client = make_client(lambda request: httpx.Response(200, json={
            "type": "file", "size": 5, "encoding": "utf-8", "content": "plain",
        }))
        assert client.get_file_content("o", "r", "a.txt") == "plain"


class TestSearchCode:

    def test_search_results(self, recorded):
        def handler(request):
            recorded.append(request)
            return httpx.Response(200, json={"items": [
                {
                    "path": "src/api/orders.py",
                    "score": 3.2,
                    "text_matches": [{"fragment": "OrderProcessor()"}, {"fragment": ""}, {"fragment": "process("}],
                },
                {"path": "src/worker.py", "score": 0.4},
            ]})

        results = make_client(handler).search_code("o", "r", "new OrderProcessor", limit=10)

        assert results == [
            {"file_path": "src/api/orders.py", "content": "OrderProcessor()\nprocess(", "score": 1.0},
            {"file_path": "src/worker.py", "content": "", "score": 0.4},
        ]
        assert recorded[0].url.params["q"] == '"new OrderProcessor" repo:o/r'
        assert recorded[0].url.params["per_page"] == "10"
        assert recorded[0].headers["Accept"] == "application/vnd.github.text-match+json"

    def test_limit(self):
        items = [{"path": f"f{i}.py", "score": 1} for i in range(5)]
        client = make_client(lambda request: httpx.Response(200, json={"items": items}))

        assert len(client.search_code("o", "r", "x", limit=2)) == 2


def test_no_token_means_no_authorization_header(monkeypatch, recorded):
    monkeypatch.setattr("src.services.github.contents_client.settings.github.token", None)
    monkeypatch.setattr("src.services.github.contents_client.settings.GITHUB_TOKEN", "")

    def handler(request):
        recorded.append(request)
        return httpx.Response(200, json={})

    make_client(handler, token=None).get_pull_request("o", "r", 1)

    assert "Authorization" not in recorded[0].headers
