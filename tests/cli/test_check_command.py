"""Tests for the `testtrace check` command."""

import pytest
from click.testing import CliRunner

from testtrace.cli.check import check
from testtrace.cli.main import cli

PASS_LINE = '{"Time":"t1","Action":"output","Package":"pkgA","Test":"TestFoo","Output":"--- PASS: TestFoo"}\n'
RUN_LINE = '{"Time":"t1","Action":"run","Package":"pkgA","Test":"TestFoo","Output":""}\n'


@pytest.mark.short
def test_check_clean_stream():
    result = CliRunner().invoke(cli, ["check"], input=RUN_LINE + PASS_LINE)

    assert result.exit_code == 0
    assert "lines:     2" in result.output
    assert "spans:     1" in result.output
    assert "ignored:   1" in result.output
    assert "malformed: 0" in result.output


@pytest.mark.short
def test_check_malformed_stream_fails():
    result = CliRunner().invoke(check, [], input=PASS_LINE + "{oops\n")

    assert result.exit_code == 1
    assert "malformed: 1" in result.output


@pytest.mark.short
def test_check_skip_package_output(tmp_path):
    source = tmp_path / "events.jsonl"
    source.write_text('{"Time":"t3","Action":"output","Package":"pkgA","Output":"FAIL\\n"}\n')

    result = CliRunner().invoke(check, ["-i", str(source), "--skip-package-output"])

    assert result.exit_code == 0
    assert "spans:     0" in result.output
    assert "ignored:   1" in result.output
