from pathlib import Path

import pytest

from jsoncms.exceptions import SchemaLoadError
from jsoncms.schema import SchemaRegistry
from jsoncms.utils import ContentRoot
from tests.conftest import WriteJson

SCHEMA = {"type": "object", "required": ["title"]}


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestSchemaRegistry:
    def test_returns_none_without_schema(self, content_root: ContentRoot) -> None:
        registry = SchemaRegistry(content_root)

        assert registry.get("pages/home.json") is None
        assert "pages/home.json" not in registry

    def test_loads_schema_by_naming_convention(
        self, content_root: ContentRoot, write_json: WriteJson
    ) -> None:
        write_json("schema/pages/home.schema.json", SCHEMA)
        registry = SchemaRegistry(content_root)

        validator = registry.get("pages/home.json")

        assert validator is not None
        assert not validator.check({}).ok
        assert "pages/home.json" in registry

    def test_schema_files_have_no_schema(
        self, content_root: ContentRoot, write_json: WriteJson
    ) -> None:
        write_json("schema/schema/home.schema.json", SCHEMA)
        registry = SchemaRegistry(content_root)

        assert registry.get("schema/home.schema.json") is None

    def test_caches_until_invalidated(
        self, content_root: ContentRoot, write_json: WriteJson
    ) -> None:
        schema_file = write_json("schema/home.schema.json", SCHEMA)
        registry = SchemaRegistry(content_root)
        first = registry.get("home.json")

        schema_file.write_text('{"type": "object"}')
        assert registry.get("home.json") is first

        registry.invalidate("home.json")
        second = registry.get("home.json")
        assert second is not first
        assert second is not None
        assert second.check({}).ok

    def test_invalidate_all(
        self, content_root: ContentRoot, write_json: WriteJson
    ) -> None:
        write_json("schema/a.schema.json", SCHEMA)
        write_json("schema/b.schema.json", SCHEMA)
        registry = SchemaRegistry(content_root)
        _ = registry.get("a.json")
        _ = registry.get("b.json")

        registry.invalidate()

        assert "a.json" not in registry
        assert "b.json" not in registry

    def test_max_age_expires_entries(
        self, content_root: ContentRoot, write_json: WriteJson
    ) -> None:
        write_json("schema/home.schema.json", SCHEMA)
        clock = FakeClock()
        registry = SchemaRegistry(content_root, clock=clock, max_age=10)
        first = registry.get("home.json")

        clock.now = 5
        assert registry.get("home.json") is first

        clock.now = 10
        assert registry.get("home.json") is not first

    def test_newly_added_schema_takes_effect(
        self, content_root: ContentRoot, write_json: WriteJson
    ) -> None:
        registry = SchemaRegistry(content_root)
        assert registry.get("home.json") is None

        write_json("schema/home.schema.json", SCHEMA)

        assert registry.get("home.json") is not None

    def test_invalid_schema_json_raises(
        self, content_root: ContentRoot, content_dir: Path
    ) -> None:
        schema_file = content_dir / "schema" / "home.schema.json"
        schema_file.parent.mkdir()
        schema_file.write_text("{not json")

        with pytest.raises(SchemaLoadError) as exc_info:
            _ = SchemaRegistry(content_root).get("home.json")

        assert exc_info.value.schema_path == schema_file.resolve()

    def test_uncompilable_schema_raises(
        self, content_root: ContentRoot, write_json: WriteJson
    ) -> None:
        write_json("schema/home.schema.json", {"type": "string", "pattern": "["})

        with pytest.raises(SchemaLoadError, match="cannot be compiled"):
            _ = SchemaRegistry(content_root).get("home.json")
