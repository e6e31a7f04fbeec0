"""Tests for line decoding and the two rejection kinds."""

import json

import pytest

from testtrace.filter import qualifies
from testtrace.model.errors import DecodeError, IgnoredLine
from testtrace.model.event import TestEvent
from testtrace.parser import decode_line, parse_line


@pytest.mark.short
def test_parse_pass_output_line():
    line = '{"Time":"t1","Action":"output","Package":"pkgA","Test":"TestFoo","Output":"--- PASS: TestFoo"}'

    event = parse_line(line)

    assert event.time == "t1"
    assert event.action == "output"
    assert event.package == "pkgA"
    assert event.test == "TestFoo"
    assert event.output == "--- PASS: TestFoo"


@pytest.mark.short
def test_parse_run_line_is_ignored():
    line = '{"Time":"t1","Action":"run","Package":"pkgA","Test":"TestFoo","Output":""}'

    with pytest.raises(IgnoredLine) as exc_info:
        parse_line(line)

    assert exc_info.value.event.action == "run"
    assert "run" in exc_info.value.reason


@pytest.mark.short
@pytest.mark.parametrize("action", ["run", "pause", "cont", "pass", "fail", "skip", "bench", "start"])
def test_non_output_actions_are_ignored(make_line, action):
    # Even when the output happens to contain a status marker
    with pytest.raises(IgnoredLine):
        parse_line(make_line(Action=action, Output="PASS"))


@pytest.mark.short
@pytest.mark.parametrize(
    "output",
    ["=== RUN   TestFoo\n", "    foo_test.go:12: hello\n", "pass\n", "Failed\n", ""],
)
def test_output_without_marker_is_ignored(make_line, output):
    with pytest.raises(IgnoredLine) as exc_info:
        parse_line(make_line(Output=output))

    assert "marker" in exc_info.value.reason


@pytest.mark.short
@pytest.mark.parametrize(
    "output",
    ["--- PASS: TestFoo (0.00s)\n", "--- FAIL: TestFoo (0.01s)\n", "PASS\n", "FAIL\texample.com/pkgA\t0.2s\n"],
)
def test_output_with_marker_is_parsed(make_line, output):
    event = parse_line(make_line(Output=output))

    assert event.output == output
    assert qualifies(event)


@pytest.mark.short
@pytest.mark.parametrize(
    "line",
    [
        "not json at all\n",
        "{\"Action\": \"output\"\n",
        "\n",
        "[1, 2, 3]\n",
        "\"a string\"\n",
        "null\n",
    ],
)
def test_malformed_lines_raise_decode_error(line):
    with pytest.raises(DecodeError) as exc_info:
        parse_line(line)

    assert exc_info.value.line == line


@pytest.mark.short
@pytest.mark.parametrize("missing", ["Time", "Action", "Package"])
def test_missing_required_field_is_decode_error(missing):
    record = {"Time": "t1", "Action": "output", "Package": "pkgA", "Output": "PASS"}
    del record[missing]

    with pytest.raises(DecodeError) as exc_info:
        parse_line(json.dumps(record))

    assert missing in exc_info.value.reason


@pytest.mark.short
def test_wrong_field_type_is_decode_error():
    line = json.dumps({"Time": "t1", "Action": "output", "Package": "pkgA", "Test": 7, "Output": "PASS"})

    with pytest.raises(DecodeError) as exc_info:
        parse_line(line)

    assert "Test" in exc_info.value.reason


@pytest.mark.short
def test_unknown_fields_are_ignored(make_line):
    line = json.dumps(
        {
            "Time": "t1",
            "Action": "output",
            "Package": "pkgA",
            "Test": "TestFoo",
            "Output": "--- PASS: TestFoo",
            "Elapsed": 0.25,
            "Extra": {"nested": True},
        }
    )

    event = parse_line(line)

    assert event.test == "TestFoo"
    assert not hasattr(event, "Elapsed")


@pytest.mark.short
def test_package_level_output_keeps_empty_test_name():
    line = json.dumps({"Time": "t1", "Action": "output", "Package": "pkgA", "Output": "PASS\n"})

    event = parse_line(line)

    assert event.test == ""
    assert event.is_package_level


@pytest.mark.short
def test_package_level_output_ignored_when_disabled():
    line = json.dumps({"Time": "t1", "Action": "output", "Package": "pkgA", "Output": "FAIL\n"})

    with pytest.raises(IgnoredLine) as exc_info:
        parse_line(line, package_spans=False)

    assert exc_info.value.reason == "package-level output"


@pytest.mark.short
def test_bytes_input_is_decoded(make_line):
    event = parse_line(make_line().encode("utf-8"))

    assert event.package == "example.com/pkgA"


@pytest.mark.short
def test_invalid_utf8_is_decode_error():
    with pytest.raises(DecodeError) as exc_info:
        parse_line(b'{"Action": "output", "Output": "\xff\xfe"}\n')

    assert "UTF-8" in exc_info.value.reason


@pytest.mark.short
def test_line_without_trailing_newline(make_line):
    event = parse_line(make_line().rstrip("\n"))

    assert event.test == "TestFoo"


@pytest.mark.short
def test_decode_line_does_not_filter(make_line):
    event = decode_line(make_line(Action="run", Output=""))

    assert isinstance(event, TestEvent)
    assert event.action == "run"


@pytest.mark.short
def test_decode_error_message_truncates_long_lines():
    line = "x" * 1000

    with pytest.raises(DecodeError) as exc_info:
        parse_line(line)

    assert len(str(exc_info.value)) < 300
    assert exc_info.value.line == line


@pytest.mark.short
def test_unpaired_surrogate_escape_is_replaced():
    line = '{"Time":"t1","Action":"output","Package":"pkgA","Test":"TestFoo","Output":"--- PASS \\ud800 ok"}'

    event = parse_line(line)

    assert event.output == "--- PASS \ufffd ok"
    event.output.encode("utf-8")


@pytest.mark.short
def test_surrogate_pair_escape_is_kept():
    line = '{"Time":"t1","Action":"output","Package":"pkgA","Test":"TestFoo","Output":"--- PASS \\ud83d\\ude00"}'

    event = parse_line(line)

    assert event.output == "--- PASS \U0001F600"
