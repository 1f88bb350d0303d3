from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import httpx
import pytest

from jsoncms.config import Settings
from jsoncms.content import (
    ContentStore,
    Failed,
    FileNode,
    Found,
    LocalBackend,
    Missing,
    NodeType,
    RemoteBackend,
    attempt_read,
)
from jsoncms.exceptions import (
    AccessDeniedError,
    ContentNotFoundError,
    InvalidJsonError,
    RemoteUnavailableError,
    SchemaViolationError,
    StorageError,
)
from jsoncms.schema import SchemaRegistry, SchemaValidator
from jsoncms.utils import ContentRoot
from tests.conftest import WriteJson

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

TITLE_SCHEMA = {
    "type": "object",
    "required": ["title"],
    "properties": {"title": {"type": "string", "minLength": 1}},
}


@pytest.fixture
def local(content_root: ContentRoot) -> LocalBackend:
    return LocalBackend(content_root)


@pytest.fixture
def validator(content_root: ContentRoot) -> SchemaValidator:
    return SchemaValidator(SchemaRegistry(content_root))


@pytest.fixture
def remote(mocker: MockerFixture) -> MagicMock:
    mock = mocker.MagicMock(spec=RemoteBackend)
    mock.name = "remote"
    mock.configured = True
    return mock


@pytest.fixture
def store(
    local: LocalBackend, validator: SchemaValidator, remote: MagicMock
) -> ContentStore:
    return ContentStore(local, validator, remote=remote)


class TestAttemptRead:
    def test_found(self, local: LocalBackend, write_json: WriteJson) -> None:
        write_json("home.json", {})

        assert attempt_read(local, "home.json") == Found(text="{}", source="local")

    def test_missing(self, local: LocalBackend) -> None:
        outcome = attempt_read(local, "home.json")

        assert isinstance(outcome, Missing)
        assert outcome.error.path == "home.json"

    def test_failed(self, remote: MagicMock) -> None:
        error = RemoteUnavailableError("down", status_code=503)
        remote.read.side_effect = error

        assert attempt_read(remote, "home.json") == Failed(error=error)


class TestRead:
    def test_local_hit_skips_remote(
        self, store: ContentStore, remote: MagicMock, write_json: WriteJson
    ) -> None:
        write_json("home.json", {"title": "Local"})

        assert store.read("home.json") == '{"title":"Local"}'
        remote.read.assert_not_called()

    def test_local_miss_falls_back_to_remote(
        self, store: ContentStore, remote: MagicMock
    ) -> None:
        remote.read.return_value = '{"title": "Remote"}'

        assert store.read("/content/home.json") == '{"title": "Remote"}'
        remote.read.assert_called_once_with("home.json")

    def test_remote_failure_surfaces_local_miss(
        self, store: ContentStore, remote: MagicMock
    ) -> None:
        remote_error = RemoteUnavailableError("down", status_code=503)
        remote.read.side_effect = remote_error

        with pytest.raises(ContentNotFoundError) as exc_info:
            _ = store.read("home.json")

        assert exc_info.value.source == "local"
        assert exc_info.value.__cause__ is remote_error

    def test_no_remote_raises_local_miss(
        self, local: LocalBackend, validator: SchemaValidator
    ) -> None:
        store = ContentStore(local, validator)

        with pytest.raises(ContentNotFoundError):
            _ = store.read("home.json")

    def test_local_storage_error_is_not_masked(
        self, store: ContentStore, remote: MagicMock, content_dir: Path
    ) -> None:
        _ = (content_dir / "bad.json").write_bytes(b"\xff")

        with pytest.raises(StorageError):
            _ = store.read("bad.json")
        remote.read.assert_not_called()

    def test_traversal_denied_before_any_backend(
        self, validator: SchemaValidator, remote: MagicMock, mocker: MockerFixture
    ) -> None:
        local = mocker.MagicMock(spec=LocalBackend)
        local.root = ContentRoot("/srv/content")
        store = ContentStore(local, validator, remote=remote)

        with pytest.raises(AccessDeniedError):
            _ = store.read("../../etc/passwd")

        local.read.assert_not_called()
        remote.read.assert_not_called()


class TestWrite:
    def test_round_trip(self, store: ContentStore) -> None:
        text = '{"title": "Home"}'

        result = store.write("pages/home.json", text)

        assert result.path == "pages/home.json"
        assert result.content == text
        assert store.read("pages/home.json") == text

    def test_mirrors_to_remote(self, store: ContentStore, remote: MagicMock) -> None:
        result = store.write("home.json", "{}")

        assert result.remote_synced
        remote.write.assert_called_once_with("home.json", "{}")

    def test_remote_failure_is_not_fatal(
        self, store: ContentStore, remote: MagicMock, content_dir: Path
    ) -> None:
        remote.write.side_effect = RemoteUnavailableError("down", status_code=502)

        result = store.write("home.json", "{}")

        assert not result.remote_synced
        assert (content_dir / "home.json").read_text() == "{}"

    def test_remote_configured_but_unreachable(
        self, local: LocalBackend, validator: SchemaValidator
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client = httpx.Client(
            base_url="https://api.github.test",
            transport=httpx.MockTransport(handler),
        )
        remote = RemoteBackend(owner="acme", repo="site", token="t", client=client)
        store = ContentStore(local, validator, remote=remote)

        result = store.write("home.json", '{"title": "x"}')

        assert not result.remote_synced
        assert store.read("home.json") == '{"title": "x"}'

    def test_invalid_json_touches_no_backend(
        self, validator: SchemaValidator, remote: MagicMock, mocker: MockerFixture
    ) -> None:
        local = mocker.MagicMock(spec=LocalBackend)
        local.root = ContentRoot("/srv/content")
        store = ContentStore(local, validator, remote=remote)

        with pytest.raises(InvalidJsonError):
            _ = store.write("home.json", "{")

        local.write.assert_not_called()
        remote.write.assert_not_called()

    def test_schema_violation_touches_no_backend(
        self,
        store: ContentStore,
        remote: MagicMock,
        write_json: WriteJson,
        content_dir: Path,
    ) -> None:
        write_json("schema/home.schema.json", TITLE_SCHEMA)

        with pytest.raises(SchemaViolationError) as exc_info:
            _ = store.write("home.json", "{}")

        assert [issue.path for issue in exc_info.value.issues] == [("title",)]
        assert not (content_dir / "home.json").exists()
        remote.write.assert_not_called()

    def test_access_denied_before_validation(
        self, store: ContentStore, remote: MagicMock
    ) -> None:
        with pytest.raises(AccessDeniedError):
            _ = store.write("../escape.json", "{")
        remote.write.assert_not_called()

    def test_concurrent_writes_to_same_path_never_mix(
        self, store: ContentStore, remote: MagicMock
    ) -> None:
        texts = [f'{{"writer": {n}, "pad": "{"x" * 4096}"}}' for n in range(8)]
        barrier = threading.Barrier(len(texts))

        def writer(text: str) -> None:
            _ = barrier.wait()
            _ = store.write("shared.json", text)

        threads = [threading.Thread(target=writer, args=(t,)) for t in texts]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.read("shared.json") in texts
        assert remote.write.call_count == len(texts)


class TestListTree:
    def test_uses_local_tree(
        self, store: ContentStore, remote: MagicMock, write_json: WriteJson
    ) -> None:
        write_json("home.json", {})

        assert [node.path for node in store.list_tree()] == ["home.json"]
        remote.list_tree.assert_not_called()

    def test_falls_back_to_remote_when_local_empty(
        self, store: ContentStore, remote: MagicMock
    ) -> None:
        remote_tree = (FileNode(name="a.json", path="a.json", type=NodeType.FILE),)
        remote.list_tree.return_value = remote_tree

        assert store.list_tree() == remote_tree

    def test_remote_listing_failure_yields_empty(
        self, store: ContentStore, remote: MagicMock
    ) -> None:
        remote.list_tree.side_effect = RemoteUnavailableError("down")

        assert store.list_tree() == ()

    def test_local_failure_falls_back_to_remote(
        self, validator: SchemaValidator, remote: MagicMock, mocker: MockerFixture
    ) -> None:
        local = mocker.MagicMock(spec=LocalBackend)
        local.list_tree.side_effect = StorageError("denied", path="", operation="list")
        remote.list_tree.return_value = ()
        store = ContentStore(local, validator, remote=remote)

        assert store.list_tree() == ()
        remote.list_tree.assert_called_once()

    def test_local_failure_without_remote_propagates(
        self, validator: SchemaValidator, mocker: MockerFixture
    ) -> None:
        local = mocker.MagicMock(spec=LocalBackend)
        local.list_tree.side_effect = StorageError("denied", path="", operation="list")

        with pytest.raises(StorageError):
            _ = ContentStore(local, validator).list_tree()


class TestConstruction:
    def test_unconfigured_remote_is_ignored(
        self, local: LocalBackend, validator: SchemaValidator
    ) -> None:
        store = ContentStore(local, validator, remote=RemoteBackend())

        assert store.remote is None

    def test_unconfigured_remote_is_logged(
        self, local: LocalBackend, validator: SchemaValidator, mocker: MockerFixture
    ) -> None:
        logger = mocker.MagicMock()

        store = ContentStore(
            local, validator, remote=RemoteBackend(owner="acme"), logger=logger
        )

        assert store.remote is None
        logger.warning.assert_called_once_with(
            "remote_not_configured", missing=["repo", "token"]
        )

    def test_from_settings_without_remote(self, tmp_path: Path) -> None:
        settings = Settings(project_root=tmp_path)

        store = ContentStore.from_settings(settings)

        assert store.local.root.path == (tmp_path / "content").resolve()
        assert store.remote is None

    def test_from_settings_with_remote(self, tmp_path: Path) -> None:
        settings = Settings.from_dict(
            {
                "project_root": tmp_path,
                "remote": {"owner": "acme", "repo": "site", "token": "t"},
            }
        )

        store = ContentStore.from_settings(settings)

        assert store.remote is not None
        assert store.remote.owner == "acme"
        store.close()
