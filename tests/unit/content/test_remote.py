# pyright: reportAny=false
import base64
import json
from collections.abc import Callable

import httpx
import pytest

from jsoncms.config import RemoteConfig
from jsoncms.content import ContentBackend, NodeType, RemoteBackend
from jsoncms.exceptions import (
    AuthError,
    ContentNotFoundError,
    RemoteNotConfiguredError,
    RemoteUnavailableError,
)

Handler = Callable[[httpx.Request], httpx.Response]
API = "https://api.github.test"


def make_backend(handler: Handler, **kwargs: str) -> RemoteBackend:
    client = httpx.Client(base_url=API, transport=httpx.MockTransport(handler))
    options = {"owner": "acme", "repo": "site", "token": "s3cret", "directory": "content"}
    options.update(kwargs)
    return RemoteBackend(client=client, **options)


class TestConfiguration:
    def test_configured_requires_owner_repo_and_token(self) -> None:
        assert RemoteBackend(owner="a", repo="b", token="t").configured
        assert not RemoteBackend(owner="a", repo="b").configured
        assert not RemoteBackend().configured

    def test_unconfigured_backend_raises_before_any_request(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        backend = make_backend(handler, token="")

        with pytest.raises(RemoteNotConfiguredError) as exc_info:
            _ = backend.read("home.json")

        assert exc_info.value.missing == ("token",)
        assert calls == []

    def test_from_config(self) -> None:
        config = RemoteConfig(owner="acme", repo="site", token="t", branch="dev")

        with RemoteBackend.from_config(config) as backend:
            assert backend.owner == "acme"
            assert backend.branch == "dev"
            assert backend.directory == "content"
            assert backend.configured

    def test_repr_hides_token(self) -> None:
        backend = RemoteBackend(owner="acme", repo="site", token="s3cret")

        assert "s3cret" not in repr(backend)

    def test_satisfies_backend_protocol(self) -> None:
        backend = RemoteBackend()

        assert isinstance(backend, ContentBackend)
        assert backend.name == "remote"


class TestRead:
    def test_fetches_raw_content(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text='{"title": "Home"}')

        backend = make_backend(handler, branch="main")

        assert backend.read("pages/home.json") == '{"title": "Home"}'

        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/repos/acme/site/contents/content/pages/home.json"
        assert request.url.params["ref"] == "main"
        assert request.headers["Authorization"] == "token s3cret"
        assert request.headers["Accept"] == "application/vnd.github.raw"

    def test_without_directory(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, text="{}")

        _ = make_backend(handler, directory="").read("home.json")

        assert seen == ["/repos/acme/site/contents/home.json"]

    def test_not_found(self) -> None:
        backend = make_backend(lambda _: httpx.Response(404))

        with pytest.raises(ContentNotFoundError) as exc_info:
            _ = backend.read("home.json")

        assert exc_info.value.source == "remote"

    def test_unauthorized(self) -> None:
        backend = make_backend(lambda _: httpx.Response(401))

        with pytest.raises(AuthError) as exc_info:
            _ = backend.read("home.json")

        assert "GITHUB_TOKEN" in exc_info.value.remediation

    def test_server_error(self) -> None:
        backend = make_backend(lambda _: httpx.Response(503))

        with pytest.raises(RemoteUnavailableError) as exc_info:
            _ = backend.read("home.json")

        assert exc_info.value.status_code == 503
        assert exc_info.value.status_text == "Service Unavailable"

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        backend = make_backend(handler)

        with pytest.raises(RemoteUnavailableError) as exc_info:
            _ = backend.read("home.json")

        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.status_text


class TestWrite:
    def test_updates_existing_file_with_sha(self) -> None:
        puts: list[dict[str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                assert request.headers["Accept"] == "application/vnd.github+json"
                return httpx.Response(200, json={"sha": "abc123", "type": "file"})
            puts.append(json.loads(request.content))
            return httpx.Response(200, json={"content": {}})

        make_backend(handler, branch="main").write("home.json", '{"v": "é"}')

        assert len(puts) == 1
        body = puts[0]
        assert body["message"] == "Update home.json"
        assert body["branch"] == "main"
        assert body["sha"] == "abc123"
        assert base64.b64decode(body["content"]).decode("utf-8") == '{"v": "é"}'

    def test_creates_new_file_without_sha(self) -> None:
        puts: list[dict[str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(404)
            puts.append(json.loads(request.content))
            return httpx.Response(201, json={"content": {}})

        make_backend(handler).write("new.json", "{}", message="Add new.json")

        assert "sha" not in puts[0]
        assert puts[0]["message"] == "Add new.json"

    def test_sha_conflict_is_remote_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"sha": "stale"})
            return httpx.Response(409)

        with pytest.raises(RemoteUnavailableError) as exc_info:
            make_backend(handler).write("home.json", "{}")

        assert exc_info.value.status_code == 409

    def test_directory_at_path_is_rejected(self) -> None:
        backend = make_backend(lambda _: httpx.Response(200, json=[]))

        with pytest.raises(RemoteUnavailableError, match="not a file"):
            backend.write("pages", "{}")

    def test_makes_no_retries(self) -> None:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.method)
            return httpx.Response(502)

        with pytest.raises(RemoteUnavailableError):
            make_backend(handler).write("home.json", "{}")

        assert calls == ["GET"]


class TestHeadSha:
    def test_returns_branch_tip(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/repos/acme/site/git/refs/heads/main"
            return httpx.Response(200, json={"object": {"sha": "f00d"}})

        assert make_backend(handler, branch="main").head_sha() == "f00d"

    def test_malformed_body(self) -> None:
        backend = make_backend(lambda _: httpx.Response(200, text="<html>"))

        with pytest.raises(RemoteUnavailableError, match="malformed"):
            _ = backend.head_sha()


class TestListTree:
    def test_lists_recursively(self) -> None:
        listings = {
            "/repos/acme/site/contents/content": [
                {"name": "pages", "type": "dir"},
                {"name": "README.md", "type": "file"},
                {"name": ".hidden.json", "type": "file"},
                {"name": "empty", "type": "dir"},
                {"name": "site.json", "type": "file"},
            ],
            "/repos/acme/site/contents/content/pages": [
                {"name": "home.json", "type": "file"},
            ],
            "/repos/acme/site/contents/content/empty": [],
        }

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=listings[request.url.path])

        tree = make_backend(handler).list_tree()

        assert [node.to_dict() for node in tree] == [
            {
                "name": "pages",
                "path": "pages",
                "type": "directory",
                "children": [
                    {"name": "home.json", "path": "pages/home.json", "type": "file"}
                ],
            },
            {"name": "site.json", "path": "site.json", "type": "file"},
        ]
        assert tree[0].type is NodeType.DIRECTORY

    def test_missing_directory_is_empty(self) -> None:
        assert make_backend(lambda _: httpx.Response(404)).list_tree() == ()

    def test_propagates_errors(self) -> None:
        with pytest.raises(AuthError):
            _ = make_backend(lambda _: httpx.Response(401)).list_tree()
