import re

import pytest

from hw3web.spin import DEFAULT_SPIN, main, parse_spin, render_body, render_response


def test_parse_spin_first_field():
    assert parse_spin("2.5&x=1") == 2.5


def test_parse_spin_missing_query_uses_default():
    assert parse_spin(None) == DEFAULT_SPIN
    assert parse_spin(None, default=1.25) == 1.25


def test_parse_spin_only_delimiters_uses_default():
    assert parse_spin("&&&", default=3.0) == 3.0


def test_parse_spin_skips_leading_delimiters():
    assert parse_spin("&&0.75&9") == 0.75


def test_parse_spin_non_numeric_is_zero():
    assert parse_spin("abc") == 0.0


def test_parse_spin_numeric_prefix():
    assert parse_spin("4seconds") == 4.0


@pytest.mark.parametrize("seconds", [0.0, 1.234, 12.5])
def test_render_response_length_matches_body(seconds):
    response = render_response(seconds)
    head, sep, body = response.partition("\r\n\r\n")
    assert sep
    assert body == render_body(seconds)
    match = re.match(r"Content-length: (\d+)\r\nContent-type: text/html$", head)
    assert match is not None
    assert int(match.group(1)) == len(body)


def test_render_body_reports_two_decimals():
    assert "<p>I spun for 1.50 seconds</p>\r\n" in render_body(1.5)


def test_main_with_zero_spin(monkeypatch, capsys):
    monkeypatch.setenv("QUERY_STRING", "0")
    assert main([]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Content-length: ")
    assert "My only purpose is to waste time on the server!" in out
    spun = re.search(r"I spun for (\d+\.\d\d) seconds", out)
    assert spun is not None
    assert float(spun.group(1)) < 1.0