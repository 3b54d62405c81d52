"""Tests for the stdin/stdout front-end."""

import asyncio
import io

from zsh_ai_suggestions.errors import BackendError
from zsh_ai_suggestions.repl import run_repl

from conftest import FakeSuggester


def _run(suggester, text, **kwargs):
    stdin = io.StringIO(text)
    stdout = io.StringIO()
    code = asyncio.run(run_repl(suggester, stdin=stdin, stdout=stdout, **kwargs))
    return code, stdout.getvalue()


def test_one_line_per_request():
    fake = FakeSuggester()
    code, out = _run(fake, "git chec\ngit chec\n")

    assert code == 0
    assert out == "git checkout main\ngit checkout main\n"


def test_blank_lines_skipped():
    fake = FakeSuggester(reply="ls -la")
    code, out = _run(fake, "\n   \nls -\n\n")

    assert out == "ls -la\n"
    assert fake.calls == ["ls -"]


def test_failures_skipped():
    class Flaky(FakeSuggester):
        async def suggest(self, text):
            if text == "bad":
                raise BackendError("provider down")
            return await super().suggest(text)

    code, out = _run(Flaky(reply="ok"), "bad\ngood\n")

    assert code == 0
    assert out == "ok\n"


def test_deadline_skips_line():
    code, out = _run(FakeSuggester(delay=5.0), "git chec\n", request_timeout=0.05)
    assert code == 0
    assert out == ""


def test_eof_without_input():
    assert _run(FakeSuggester(), "") == (0, "")
