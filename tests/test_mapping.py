import pytest

from pixiu.mapping import (
    Client,
    MappingError,
    ParamMapper,
    get_map_value,
    parse_map_source,
)


def test_parse_map_source():
    assert parse_map_source("queryStrings.id") == ("queryStrings", ["id"])
    assert parse_map_source("headers.id") == ("headers", ["id"])
    origin, keys = parse_map_source("requestBody.user.id")
    assert origin == "requestBody"
    assert keys[0] == "user"
    assert keys[1] == "id"


def test_parse_map_source_uri_and_dash():
    assert parse_map_source("uri.id") == ("uri", ["id"])
    assert parse_map_source("headers.Origin-Passcode") == ("headers", ["Origin-Passcode"])


@pytest.mark.parametrize("source", ["what.user.id", "requestBody.*userid", "queryStrings"])
def test_parse_map_source_errors(source):
    with pytest.raises(MappingError, match="Parameter mapping config incorrect. Please fix it"):
        parse_map_source(source)


TEST_MAP = {
    "Test": "test",
    "structure": {"name": "joe", "age": 77},
}


def test_get_map_value():
    assert get_map_value(TEST_MAP, ["Test"]) == "test"
    assert get_map_value(TEST_MAP, ["structure"]) == TEST_MAP["structure"]
    assert get_map_value(TEST_MAP, ["structure", "name"]) == "joe"


def test_get_map_value_all():
    assert get_map_value(TEST_MAP, ["_all"]) is TEST_MAP


def test_get_map_value_missing():
    with pytest.raises(MappingError) as info:
        get_map_value(TEST_MAP, ["test"])
    assert str(info.value) == "test does not exist in request body"
    with pytest.raises(MappingError) as info:
        get_map_value({}, ["structure"])
    assert str(info.value) == "structure does not exist in request body"


def test_get_map_value_not_a_map():
    with pytest.raises(MappingError) as info:
        get_map_value({"structure": "test"}, ["structure", "name"])
    assert str(info.value) == "structure is not a map structure. It contains test"


def test_get_map_value_empty_keys():
    with pytest.raises(MappingError):
        get_map_value(TEST_MAP, [])


def test_interfaces_are_abstract():
    with pytest.raises(TypeError):
        Client()
    with pytest.raises(TypeError):
        ParamMapper()