import json
import time

import pytest

from matrixkit.response import (
    JsonResponse,
    default_json_with_msg,
    new_json_response_from_bytes,
    new_json_response_from_str,
)


def test_set_size_info():
    resp = JsonResponse()
    resp.set_size_info(100, 2, 10)
    assert (resp.total, resp.page, resp.size) == (100, 2, 10)


def test_set_list_appends_and_counts():
    resp = JsonResponse()
    resp.set_list(["a", "b"], 50, 1)
    resp.set_list(["c"], 50, 2)
    assert resp.items == ["a", "b", "c"]
    assert resp.size == 1
    assert resp.page == 2
    assert resp.total == 50


def test_to_json_uses_wire_keys():
    resp = JsonResponse(code="OK", created_at=5, message="done")
    decoded = json.loads(resp.to_json())
    assert list(decoded) == ["code", "createdAt", "message", "list", "total", "size", "page"]
    assert decoded["createdAt"] == 5
    assert decoded["list"] == []


def test_round_trip_through_str():
    resp = JsonResponse(code="OK", created_at=123, message="hello")
    resp.set_list([{"id": 1}, {"id": 2}], 20, 3)
    assert new_json_response_from_str(resp.to_json()) == resp


def test_round_trip_through_bytes():
    resp = default_json_with_msg("E1", "failure")
    assert new_json_response_from_bytes(resp.to_json().encode("utf-8")) == resp


def test_missing_fields_take_defaults():
    resp = new_json_response_from_str('{"code": "OK"}')
    assert resp == JsonResponse(code="OK")


def test_keys_match_case_insensitively():
    resp = new_json_response_from_str('{"CODE": "OK", "createdat": 9}')
    assert resp.code == "OK"
    assert resp.created_at == 9


def test_wrong_field_type_raises():
    with pytest.raises(ValueError):
        new_json_response_from_str('{"total": "many"}')
    with pytest.raises(ValueError):
        new_json_response_from_str('{"page": 1.5}')


def test_non_object_raises():
    with pytest.raises(ValueError):
        new_json_response_from_str("[1, 2]")


def test_invalid_json_raises():
    with pytest.raises(ValueError):
        new_json_response_from_bytes(b"{")


def test_default_json_with_msg():
    before = time.time_ns() // 1_000_000
    resp = default_json_with_msg("OK", "custom")
    after = time.time_ns() // 1_000_000
    assert resp.code == "OK"
    assert resp.message == "custom"
    assert before <= resp.created_at <= after
    assert (resp.items, resp.total, resp.size, resp.page) == ([], 0, 0, 0)