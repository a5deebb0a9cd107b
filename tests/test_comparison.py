from src.verifier.comparison import first_difference, header_matches


def test_equal_values_have_no_difference():
    assert first_difference({"a": [1, {"b": "c"}]}, {"a": [1, {"b": "c"}], "extra": True}) is None


def test_nested_paths_are_named():
    assert first_difference({"a": {"b": 1}}, {"a": {"b": 2}}) == ("body.a.b", 1, 2)
    assert first_difference({"items": [1, 2]}, {"items": [1, 3]}) == ("body.items[1]", 2, 3)
    assert first_difference({"a": 1}, {}) == ("body.a", 1, None)


def test_list_length_and_type_mismatch():
    assert first_difference([1, 2], [1]) == ("body", [1, 2], [1])
    assert first_difference({"a": 1}, [1]) == ("body", {"a": 1}, [1])


def test_bool_does_not_equal_int():
    assert first_difference({"flag": True}, {"flag": 1}) == ("body.flag", True, 1)


def test_content_type_ignores_parameters():
    assert header_matches("Content-Type", "application/json", "application/json; charset=utf-8")
    assert not header_matches("Content-Type", "application/json", "text/plain")
    assert not header_matches("X-Trace", "abc", None)
    assert not header_matches("X-Trace", "abc", "ABC")
