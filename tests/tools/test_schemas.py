import pytest

from tools.schemas import JokesGetInput, JokesSearchInput, parse_tool_input, validate_tool_input


def test_jokes_search_requires_query_and_limit():
    with pytest.raises(ValueError) as exc:
        validate_tool_input("jokes_search", {"q": "egg"})
    assert "limit" in str(exc.value)


@pytest.mark.parametrize("limit", [0, 11])
def test_jokes_search_limit_bounds(limit):
    with pytest.raises(ValueError):
        validate_tool_input("jokes_search", {"q": "egg", "limit": limit})


def test_extra_fields_are_forbidden():
    with pytest.raises(ValueError):
        validate_tool_input("jokes_get", {"category": "puns"})


def test_validate_tool_input_uses_schema():
    assert validate_tool_input("jokes_search", {"q": "cheese", "limit": 3}) == {"q": "cheese", "limit": 3}
    assert isinstance(parse_tool_input("jokes_get", {}), JokesGetInput)


def test_validate_tool_input_unknown_tool_pass_through():
    payload = {"custom": True}
    assert validate_tool_input("unknown", payload) == payload


def test_input_schema_shape():
    schema = JokesSearchInput.input_schema()
    assert "title" not in schema
    assert schema["type"] == "object"
    assert set(schema["properties"]) == {"q", "limit"}
    assert sorted(schema["required"]) == ["limit", "q"]

    empty = JokesGetInput.input_schema()
    assert empty["properties"] == {}
    assert empty["required"] == []
