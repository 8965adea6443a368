"""Kida rendering for notification bodies.

Two environments are created once per renderer: an autoescaping one for
HTML bodies and a plain one for text bodies. The default layouts live in
a ``DictLoader``; custom templates are compiled with ``from_string``.

Custom templates see every form field by name::

    renderer = TemplateRenderer()
    renderer.render("<h1>Message from {{ name }}</h1>", {"name": "Julien"}, autoescape=True)
"""

import html
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kida import DictLoader, Environment
from kida.template import Markup

DEFAULT_TITLE = "Form Submission"

_HTML_LAYOUT = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>{{ title }}</title>
</head>
<body style="font-family:-apple-system,Segoe UI,Roboto,Arial,sans-serif;background:#ffffff;color:#333;">
  <h2 style="border-bottom:2px solid #333;padding-bottom:4px;">{{ title }}</h2>
  <table style="width:100%;border-collapse:collapse;margin-top:10px;">
{% for row in rows %}    <tr><th style="text-align:left;padding:8px 10px;background:#f8f9fa;border-bottom:1px solid #ddd;">{{ row.label }}</th><td style="padding:8px 10px;border-bottom:1px solid #eee;">{{ row.value }}</td></tr>
{% end %}  </table>
  <p style="font-size:12px;color:#777;margin-top:20px;">
    Sent automatically by formmail.
  </p>
</body>
</html>
"""

_TEXT_LAYOUT = """\
{{ title }}
{{ underline }}

{% for row in rows %}{{ row.label }}: {{ row.value }}
{% end %}"""

_LAYOUTS = {
    "submission.html": _HTML_LAYOUT,
    "submission.txt": _TEXT_LAYOUT,
}


@dataclass(frozen=True, slots=True)
class Row:
    """One ``label: value`` line of a default layout."""

    label: str
    value: Any


def display_value(value: Any) -> str:
    """Flatten a submitted value for display.

    ``None`` renders empty and multi-value fields (checkbox groups) are
    joined with commas.
    """
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(display_value(item) for item in value)
    return str(value)


def _nl2br(text: str) -> str:
    return text.replace("\r\n", "<br>\n").replace("\n", "<br>\n")


class TemplateRenderer:
    """Renders submission data into HTML and plain-text bodies."""

    __slots__ = ("_html_env", "_text_env")

    def __init__(self) -> None:
        loader = DictLoader(_LAYOUTS)
        self._html_env = Environment(loader=loader, autoescape=True)
        self._text_env = Environment(loader=loader, autoescape=False)

    def render(self, source: str, data: Mapping[str, Any], *, autoescape: bool = False) -> str:
        """Render a custom template string against *data*.

        Raises kida's template errors (syntax, undefined variable) as-is.
        """
        env = self._html_env if autoescape else self._text_env
        return env.from_string(source).render(dict(data))

    def default_html(self, data: Mapping[str, Any], title: str = DEFAULT_TITLE) -> str:
        """Two-column table of every field. Values keep their line breaks."""
        rows = [
            Row(key, Markup(_nl2br(html.escape(display_value(value), quote=True))))
            for key, value in data.items()
        ]
        template = self._html_env.get_template("submission.html")
        return template.render({"title": title, "rows": rows})

    def default_text(self, data: Mapping[str, Any], title: str = DEFAULT_TITLE) -> str:
        """Title, ``=`` underline, blank line, then ``key: value`` lines."""
        rows = [Row(key, display_value(value)) for key, value in data.items()]
        template = self._text_env.get_template("submission.txt")
        return template.render({"title": title, "underline": "=" * len(title), "rows": rows})
