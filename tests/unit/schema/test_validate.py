import pytest

from jsoncms.exceptions import ErrorKind, InvalidJsonError, SchemaViolationError
from jsoncms.schema import IssueCode, SchemaRegistry, SchemaValidator, parse_json
from jsoncms.utils import ContentRoot
from tests.conftest import WriteJson

TITLE_SCHEMA = {
    "type": "object",
    "required": ["title"],
    "properties": {"title": {"type": "string", "minLength": 1}},
}


@pytest.fixture
def validator(content_root: ContentRoot) -> SchemaValidator:
    return SchemaValidator(SchemaRegistry(content_root))


class TestParseJson:
    def test_parses_valid_json(self) -> None:
        assert parse_json('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_invalid_json_carries_single_issue(self) -> None:
        with pytest.raises(InvalidJsonError) as exc_info:
            parse_json("{", path="home.json")

        error = exc_info.value
        assert error.kind is ErrorKind.INVALID_JSON
        assert error.path == "home.json"
        assert len(error.issues) == 1
        assert error.issues[0].code is IssueCode.INVALID_JSON
        assert error.issues[0].path == ()

    @pytest.mark.parametrize("text", ['{"n": 1e400}', '"\\ud800"'])
    def test_values_orjson_cannot_represent_are_invalid(self, text: str) -> None:
        with pytest.raises(InvalidJsonError) as exc_info:
            parse_json(text)

        assert exc_info.value.issues[0].code is IssueCode.INVALID_JSON


class TestSchemaValidator:
    def test_any_valid_json_passes_without_schema(
        self, validator: SchemaValidator
    ) -> None:
        assert validator.validate("free.json", "[1, 2, 3]") == [1, 2, 3]
        assert validator.validate("free.json", "null") is None

    def test_syntax_checked_before_schema(
        self, validator: SchemaValidator, write_json: WriteJson
    ) -> None:
        write_json("schema/home.schema.json", TITLE_SCHEMA)

        with pytest.raises(InvalidJsonError):
            _ = validator.validate("home.json", "{")

    def test_schema_violation_lists_issues(
        self, validator: SchemaValidator, write_json: WriteJson
    ) -> None:
        write_json("schema/home.schema.json", TITLE_SCHEMA)

        with pytest.raises(SchemaViolationError) as exc_info:
            _ = validator.validate("home.json", "{}")

        error = exc_info.value
        assert error.kind is ErrorKind.SCHEMA_VIOLATION
        assert error.path == "home.json"
        assert [issue.to_dict() for issue in error.issues] == [
            {"path": ["title"], "code": "required", "message": "Required"}
        ]

    def test_returns_parsed_value_when_valid(
        self, validator: SchemaValidator, write_json: WriteJson
    ) -> None:
        write_json("schema/home.schema.json", TITLE_SCHEMA)

        assert validator.validate("home.json", '{"title": "x"}') == {"title": "x"}
