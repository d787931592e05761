from datetime import datetime, timedelta, timezone

import pytest

from bird_peering import formatting


def test_bird_set_layout():
    assert (
        formatting.bird_set(["10.0.0.0/8", "192.168.0.0/16"])
        == "  10.0.0.0/8,\n  192.168.0.0/16"
    )


@pytest.mark.parametrize("count", [1, 2, 5])
def test_bird_set_separator_count(count):
    prefixes = [f"10.{i}.0.0/16" for i in range(count)]

    rendered = formatting.bird_set(prefixes)

    assert rendered.count(",\n") == count - 1
    assert not rendered.endswith(",")
    assert all(line.startswith("  ") for line in rendered.split("\n"))


def test_bird_set_empty():
    assert formatting.bird_set([]) == ""
    assert formatting.bird_set(None) == ""


def test_bird_as_set_layout():
    assert formatting.bird_as_set([64500, 64501]) == "  64500,\n  64501"
    assert formatting.bird_as_set([]) == ""


def test_as_set():
    assert formatting.as_set([64500, 64501]) == "[64500, 64501]"
    assert formatting.as_set([64500]) == "[64500]"
    assert formatting.as_set([]) == "[]"


def test_is_empty():
    assert formatting.is_empty(None)
    assert formatting.is_empty([])
    assert formatting.is_empty(())
    assert not formatting.is_empty(["x"])


def test_deref_zero_values():
    assert formatting.str_deref(None) == ""
    assert formatting.bool_deref(None) is False
    assert formatting.int_deref(None) == 0
    assert formatting.list_deref(None) == []
    assert formatting.map_deref(None) == {}
    assert formatting.str_list_join(None) == ""


def test_deref_passes_values_through():
    assert formatting.str_deref("peer") == "peer"
    assert formatting.bool_deref(True) is True
    assert formatting.int_deref(0) == 0
    assert formatting.int_deref(42) == 42
    assert formatting.list_deref((1, 2)) == [1, 2]
    assert formatting.map_deref({64500: [1]}) == {64500: [1]}
    assert formatting.str_list_join(["a", "b"]) == "a, b"


def test_timestamp_formats():
    now = datetime(2024, 1, 2, 3, 4, tzinfo=timezone.utc)

    assert formatting.timestamp("unix", now) == "1704164640"
    assert formatting.timestamp("rfc822", now) == "02 Jan 24 03:04 UTC"


def test_timestamp_naive_value_is_utc():
    now = datetime(2024, 1, 2, 3, 4)

    assert formatting.timestamp("unix", now) == "1704164640"
    assert formatting.timestamp("rfc822", now) == "02 Jan 24 03:04 UTC"


def test_timestamp_converts_to_utc():
    now = datetime(2024, 12, 31, 23, 30, tzinfo=timezone(timedelta(hours=-5)))

    assert formatting.timestamp("rfc822", now) == "01 Jan 25 04:30 UTC"


def test_timestamp_wall_clock():
    assert formatting.timestamp("unix").isdigit()
    assert formatting.timestamp("").endswith(" UTC")


def test_string_helpers():
    assert formatting.contains("2001:db8::1", ":")
    assert not formatting.contains("192.0.2.1", ":")
    assert formatting.split_first("rtr1.example.net", ".") == "rtr1"
    assert formatting.split_first("rtr1", ".") == "rtr1"
    assert formatting.split_first("rtr1.example.net", "") == "rtr1.example.net"
    assert formatting.split_first("", "") == ""


def test_is_last():
    assert formatting.is_last(2, 3)
    assert not formatting.is_last(0, 3)


def test_misc_helpers():
    assert formatting.iterate(3) == [0, 1, 2]
    assert formatting.iterate(None) == []
    assert formatting.make_list(1, "a") == [1, "a"]
    assert formatting.int_cmp(5, 5)
    assert not formatting.int_cmp(None, 0)
    assert formatting.map_contains(64500, {64500: [64501]})
    assert not formatting.map_contains(64500, None)


def test_bird_string_escapes():
    assert formatting.bird_string("Example transit") == '"Example transit"'
    assert formatting.bird_string('say "hi"') == '"say \\"hi\\""'
    assert formatting.bird_string("back\\slash") == '"back\\\\slash"'
    assert formatting.bird_string("two\nlines") == '"two lines"'
    assert formatting.bird_string(None) == '""'
