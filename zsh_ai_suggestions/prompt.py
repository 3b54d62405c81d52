"""Prompt template rendering."""

from functools import lru_cache
from pathlib import Path

import jinja2

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "suggestion_prompt.j2"


@lru_cache(maxsize=1)
def _get_environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(TEMPLATE_DIR),
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=False,
    )


def render_prompt(text: str) -> str:
    """Render the suggestion prompt for the given command-line prefix."""
    template = _get_environment().get_template(TEMPLATE_NAME)
    return template.render(input=text)
