import pytest

from testtrace.filter import STATUS_MARKERS, has_status_marker, qualifies
from testtrace.model.event import TestEvent


def _event(action="output", output="--- PASS: TestFoo", test="TestFoo"):
    return TestEvent(Time="t1", Action=action, Package="pkgA", Test=test, Output=output)


@pytest.mark.short
def test_status_markers():
    assert STATUS_MARKERS == ("PASS", "FAIL")


@pytest.mark.short
@pytest.mark.parametrize(
    "output,expected",
    [
        ("--- PASS: TestFoo", True),
        ("--- FAIL: TestFoo", True),
        ("ok  \tpkgA\t0.1s", False),
        ("--- SKIP: TestFoo", False),
        ("pass", False),
        ("PASSWORD rotated", True),  # substring match, no further parsing
    ],
)
def test_has_status_marker(output, expected):
    assert has_status_marker(output) is expected


@pytest.mark.short
def test_qualifies_requires_output_action():
    assert qualifies(_event())
    assert not qualifies(_event(action="pass"))
    assert not qualifies(_event(action="fail", output="FAIL"))


@pytest.mark.short
def test_qualifies_requires_marker():
    assert not qualifies(_event(output="=== RUN   TestFoo"))
    assert qualifies(_event(output="FAIL"))


@pytest.mark.short
def test_qualifies_package_level_event():
    assert qualifies(_event(test="", output="PASS\n"))


@pytest.mark.short
def test_event_accepts_python_field_names():
    event = TestEvent(time="t1", action="output", package="pkgA", test="T", output="PASS")

    assert event.package == "pkgA"
    assert qualifies(event)
