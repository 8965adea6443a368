"""Built-in filters — value cleaners that never record errors.

Each filter is a small frozen dataclass with the method::

    def apply(self, value: Any, field: FieldDefinition) -> Any: ...

and satisfies ``FieldProcessor`` through ``Filter.process``, which simply
delegates to ``apply``. Filters leave non-string values untouched (unless
documented otherwise), so they can safely sit in front of any rule.

Usage::

    FieldDefinition("email", processors=[TrimFilter(), SanitizeEmailFilter()])
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from formmail.validation._text import (
    ASCII_WHITESPACE,
    category_class,
    check_flavor,
    escape_special,
    resolve_encoding,
    substitute_invalid,
    to_ascii_domain,
)
from formmail.validation.processor import ProcessorCallback, adapt_callback

if TYPE_CHECKING:
    from formmail.validation.context import FormContext
    from formmail.validation.field import FieldDefinition


class Filter:
    """Shared ``process`` for filters. Holds no state."""

    __slots__ = ()

    def apply(self, value: Any, field: FieldDefinition) -> Any:
        """Return the cleaned value. Subclasses override this."""
        raise NotImplementedError

    def process(self, value: Any, field: FieldDefinition, context: FormContext) -> Any:
        return self.apply(value, field)


# ---------------------------------------------------------------------------
# Whitespace
# ---------------------------------------------------------------------------

_TRIM_MODES = frozenset({"left", "right", "both"})


@dataclass(frozen=True, slots=True)
class TrimFilter(Filter):
    """Strip leading and/or trailing whitespace.

    Unicode-aware mode strips every separator (``Z*``) and control or
    invisible format character (``C*``), so ideographic spaces and
    zero-width characters go too. ASCII mode strips ``" \\n\\r\\t\\v\\0"``.
    """

    unicode_aware: bool = True
    mode: str = "both"

    def __post_init__(self) -> None:
        if self.mode not in _TRIM_MODES:
            msg = f"Invalid trim mode {self.mode!r}. Must be one of: both, left, right."
            raise ValueError(msg)

    def apply(self, value: Any, field: FieldDefinition) -> Any:
        if not isinstance(value, str):
            return value
        if not self.unicode_aware:
            match self.mode:
                case "left":
                    return value.lstrip(ASCII_WHITESPACE)
                case "right":
                    return value.rstrip(ASCII_WHITESPACE)
                case _:
                    return value.strip(ASCII_WHITESPACE)

        start, end = 0, len(value)
        if self.mode in ("left", "both"):
            while start < end and _is_trimmable(value[start]):
                start += 1
        if self.mode in ("right", "both"):
            while end > start and _is_trimmable(value[end - 1]):
                end -= 1
        return value[start:end]


def _is_trimmable(ch: str) -> bool:
    return category_class(ch) in ("Z", "C")


@dataclass(frozen=True, slots=True)
class NormalizeNewlinesFilter(Filter):
    """Convert CRLF and CR to LF, collapse trailing blank lines.

    With *ensure_trailing_newline* the result always ends in exactly one
    ``\\n``.
    """

    ensure_trailing_newline: bool = True

    def apply(self, value: Any, field: FieldDefinition) -> Any:
        if not isinstance(value, str):
            return value
        text = value.replace("\r\n", "\n").replace("\r", "\n")
        text = _TRAILING_NEWLINES_RE.sub("\n", text)
        if self.ensure_trailing_newline and not text.endswith("\n"):
            text += "\n"
        return text


_TRAILING_NEWLINES_RE = re.compile(r"\n{2,}\Z")


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_COMMENT_RE = re.compile(r"<!--.*?(?:-->|\Z)|<\?.*?(?:\?>|\Z)|<![^>]*>?", re.DOTALL)
# An unclosed tag at the end swallows the rest of the string
_TAG_RE = re.compile(r"</?([A-Za-z][A-Za-z0-9:-]*)\b[^>]*(?:>|\Z)")


@dataclass(frozen=True, slots=True)
class StripTagsFilter(Filter):
    """Remove HTML tags, keeping the ones named in *allowed_tags*.

    ``<script>`` and ``<style>`` blocks are removed together with their
    content; for every other tag only the markup goes and the text stays.
    Allowed names may be written ``"b"`` or ``"<b>"``. Entities are left
    as they are.
    """

    allowed_tags: Collection[str] = ()

    def __post_init__(self) -> None:
        names = frozenset(tag.strip("<>/ ").lower() for tag in self.allowed_tags)
        object.__setattr__(self, "allowed_tags", names - {""})

    def apply(self, value: Any, field: FieldDefinition) -> Any:
        if not isinstance(value, str):
            return value
        text = _SCRIPT_STYLE_RE.sub("", value)
        text = _COMMENT_RE.sub("", text)

        def keep_allowed(match: re.Match[str]) -> str:
            return match.group(0) if match.group(1).lower() in self.allowed_tags else ""

        return _TAG_RE.sub(keep_allowed, text)


@dataclass(frozen=True, slots=True)
class HtmlEscapeFilter(Filter):
    """Escape ``& < > " '`` for safe inclusion in HTML.

    ``flavor="html5"`` writes the apostrophe as ``&apos;``, ``"html401"``
    as ``&#039;``. With *double_encode* False, existing entities are left
    alone, which makes the filter idempotent. Characters not valid in
    *encoding* are replaced rather than dropped.
    """

    flavor: str = "html5"
    double_encode: bool = True
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        check_flavor(self.flavor)
        object.__setattr__(self, "encoding", resolve_encoding(self.encoding))

    def apply(self, value: Any, field: FieldDefinition) -> Any:
        if not isinstance(value, str):
            return value
        escaped = escape_special(value, flavor=self.flavor, double_encode=self.double_encode)
        return substitute_invalid(escaped, self.encoding)


# ---------------------------------------------------------------------------
# Text hygiene
# ---------------------------------------------------------------------------

# C0 controls and DEL, except \t \n \r
_CONTROL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


@dataclass(frozen=True, slots=True)
class SanitizeTextFilter(Filter):
    """Make free text safe to store and mail.

    Drops byte sequences that aren't valid in *encoding* (``bytes`` input
    is decoded here), removes control characters other than tab and line
    breaks, optionally removes U+FFFD, then trims.
    """

    remove_replacement_char: bool = True
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        object.__setattr__(self, "encoding", resolve_encoding(self.encoding))

    def apply(self, value: Any, field: FieldDefinition) -> Any:
        if isinstance(value, (bytes, bytearray)):
            text = bytes(value).decode(self.encoding, errors="ignore")
        elif isinstance(value, str):
            text = value.encode(self.encoding, errors="ignore").decode(self.encoding, errors="ignore")
        else:
            return value

        text = _CONTROL_RE.sub("", text)
        if self.remove_replacement_char:
            text = text.replace("\ufffd", "")
        return text.strip(ASCII_WHITESPACE)


_EMOJI_RE = re.compile(
    "["
    "\U0001f300-\U0001f6ff"  # symbols, pictographs, transport
    "\U0001f900-\U0001f9ff"  # supplemental symbols
    "\u2600-\u26ff"  # misc symbols
    "\u2700-\u27bf"  # dingbats
    "\U0001fa70-\U0001faff"  # extended pictographs
    "\U0001f1e6-\U0001f1ff"  # regional indicators (flags)
    "\u200d"  # zero-width joiner
    "\ufe0f"  # emoji presentation selector
    "]"
)
_MULTI_SPACE_RE = re.compile(r"\s{2,}")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([.,!?;:])")


@dataclass(frozen=True, slots=True)
class RemoveEmojiFilter(Filter):
    """Remove emoji, flags and joiners, then tidy the leftover spacing."""

    def apply(self, value: Any, field: FieldDefinition) -> Any:
        if not isinstance(value, str):
            return value
        text = _EMOJI_RE.sub("", value)
        text = _MULTI_SPACE_RE.sub(" ", text)
        text = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)
        return text.strip()


_NON_DIGIT_RE = re.compile(r"\D+", re.ASCII)


@dataclass(frozen=True, slots=True)
class SanitizePhoneFilter(Filter):
    """Keep ASCII digits only: ``"+1 (555) 010-9999"`` → ``"15550109999"``."""

    def apply(self, value: Any, field: FieldDefinition) -> Any:
        if not isinstance(value, str):
            return value
        return _NON_DIGIT_RE.sub("", value)


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

_FULLWIDTH_DOTS = str.maketrans({"\u2024": ".", "\u3002": ".", "\uff0e": "."})
_OBFUSCATED_DOT_RE = re.compile(r"\s*(?:\[\.\]|\(dot\)|\s+dot\s+)\s*", re.IGNORECASE)
_HXXP_RE = re.compile(r"\bhxxp(s)?://", re.IGNORECASE)
# Scheme or www. URLs, or bare domains not preceded by "@" (emails survive)
_URL_RE = re.compile(
    r"\b(?:(?:https?://|www\.)[^\s<]+|(?<!@)[a-z0-9.-]+\.[a-z]{2,})(?:/[^\s<]*)?",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class RemoveUrlFilter(Filter):
    """Remove links: scheme URLs, ``www.`` hosts and bare domains.

    Text is NFKC-normalized first so full-width look-alikes can't slip
    through. In *aggressive* mode common obfuscations are undone before
    matching: ``example[.]com``, ``example (dot) com``, ``hxxp://``.
    Email addresses are preserved.
    """

    replace_with_placeholder: bool = False
    placeholder: str = "[link removed]"
    aggressive: bool = True

    def apply(self, value: Any, field: FieldDefinition) -> Any:
        if not isinstance(value, str):
            return value
        text = unicodedata.normalize("NFKC", value)
        if self.aggressive:
            text = text.translate(_FULLWIDTH_DOTS)
            text = _OBFUSCATED_DOT_RE.sub(".", text)
            text = _HXXP_RE.sub(r"http\1://", text)

        replacement = self.placeholder if self.replace_with_placeholder else ""
        text = _URL_RE.sub(lambda _: replacement, text)
        return _MULTI_SPACE_RE.sub(" ", text.strip())


# ---------------------------------------------------------------------------
# Email
# ---------------------------------------------------------------------------

_ENCODED_LINE_BREAK_RE = re.compile(r"%0[ad]", re.IGNORECASE)
# Matched while line breaks still separate words
_HEADER_KEYWORD_RE = re.compile(r"\b(?:cc|bcc|to|from|subject)\s*:\s*", re.IGNORECASE)
_STRICT_LOCAL_RE = re.compile(r"[^A-Za-z0-9!#$%&'*+/=?^_`{|}~.\-]")
_RELAXED_LOCAL_SYMBOLS = frozenset("+_.'-")
_DOT_RUN_RE = re.compile(r"\.{2,}")


@dataclass(frozen=True, slots=True)
class SanitizeEmailFilter(Filter):
    """Defuse and normalize an email address before validation.

    Header injection is neutralized (encoded and raw line breaks,
    ``cc:``/``bcc:``/``to:``/``from:``/``subject:`` keywords), extra ``@``
    signs are collapsed into the domain, and the local part is reduced to
    the RFC 5322 atom set (*strict*) or to Unicode letters and digits
    plus ``+_.'-``. The domain is lower-cased and IDNA-encoded when
    enabled. This filter cleans; ``EmailRule`` decides validity.
    """

    strict: bool = True
    normalize_idn: bool = True
    normalize_case: bool = True

    def apply(self, value: Any, field: FieldDefinition) -> Any:
        if not isinstance(value, str):
            return value

        email = value.strip(ASCII_WHITESPACE)
        if not email:
            return ""

        email = _ENCODED_LINE_BREAK_RE.sub("\n", email)
        email = "".join(ch for ch in email if ch in "\t\n\r" or category_class(ch) != "C")
        email = _HEADER_KEYWORD_RE.sub("", email)
        email = email.replace("\r", "").replace("\n", "")
        email = email.replace("<", "").replace(">", "")

        if "@" not in email:
            return self._sanitize_local(email)

        local, *rest = email.split("@")
        domain = "".join(rest)
        if self.normalize_case:
            domain = domain.lower()
        if self.normalize_idn:
            domain = to_ascii_domain(domain)

        return f"{self._sanitize_local(local)}@{domain}".strip()

    def _sanitize_local(self, local: str) -> str:
        if self.strict:
            local = _STRICT_LOCAL_RE.sub("", local)
        else:
            local = "".join(
                ch for ch in local if category_class(ch) in ("L", "N") or ch in _RELAXED_LOCAL_SYMBOLS
            )
        return _DOT_RUN_RE.sub(".", local).strip(". ")


# ---------------------------------------------------------------------------
# Custom
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CallbackFilter(Filter):
    """Run a user function as a filter.

    *fn* may take ``(value)``, ``(value, field)`` or
    ``(value, field, context)``; its return value replaces the value::

        CallbackFilter(str.title)
        CallbackFilter(lambda value, field: value or field.name)
    """

    callback: ProcessorCallback

    def __init__(self, fn: Callable[..., Any]) -> None:
        object.__setattr__(self, "callback", adapt_callback(fn))

    def apply(self, value: Any, field: FieldDefinition, context: FormContext | None = None) -> Any:
        return self.callback(value, field, context)

    def process(self, value: Any, field: FieldDefinition, context: FormContext) -> Any:
        return self.callback(value, field, context)
