"""Kida-backed rendering of notification mail bodies."""

from formmail.templating.render import DEFAULT_TITLE, Row, TemplateRenderer, display_value

__all__ = ["DEFAULT_TITLE", "Row", "TemplateRenderer", "display_value"]
