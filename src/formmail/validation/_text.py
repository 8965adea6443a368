"""Text helpers shared by filters, transformers, and rules.

Python's ``re`` has no ``\\p{…}`` classes, so Unicode category checks go
through ``unicodedata`` instead.
"""

import codecs
import html.entities
import re
import unicodedata

# ASCII whitespace plus NUL
ASCII_WHITESPACE = " \n\r\t\v\0"

_ENTITY = r"&(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);"
_BARE_AMPERSAND_RE = re.compile(rf"&(?!{_ENTITY[1:]})")

APOSTROPHES = {
    "html5": "&apos;",
    "html401": "&#039;",
    "xml": "&#039;",
}


def category_class(ch: str) -> str:
    """Major Unicode category letter: ``L``, ``N``, ``M``, ``Z``, ``C``..."""
    return unicodedata.category(ch)[0]


def resolve_encoding(encoding: str) -> str:
    """Canonical codec name, or ``ValueError`` for an unknown encoding."""
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        msg = f"Unknown encoding {encoding!r}"
        raise ValueError(msg) from None


def check_flavor(flavor: str) -> str:
    if flavor not in APOSTROPHES:
        options = ", ".join(sorted(APOSTROPHES))
        msg = f"Invalid entity flavor {flavor!r}. Must be one of: {options}."
        raise ValueError(msg)
    return flavor


def escape_special(value: str, *, flavor: str, double_encode: bool) -> str:
    """Escape ``& < > " '`` the way ``htmlspecialchars(ENT_QUOTES)`` does.

    With *double_encode* False, an ``&`` that already starts a character
    reference (``&lt;``, ``&#39;``, ``&#x27;``) is left alone.
    """
    if double_encode:
        text = value.replace("&", "&amp;")
    else:
        text = _BARE_AMPERSAND_RE.sub("&amp;", value)
    return (
        text.replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", APOSTROPHES[flavor])
    )


def encode_named_entities(value: str) -> str:
    """Replace every non-ASCII character that has an HTML 4 entity name."""
    return "".join(
        f"&{html.entities.codepoint2name[ord(ch)]};"
        if ord(ch) > 127 and ord(ch) in html.entities.codepoint2name
        else ch
        for ch in value
    )


def substitute_invalid(value: str, encoding: str) -> str:
    """Make *value* representable in *encoding*.

    Unicode encodings: lone surrogates (undecodable input smuggled in via
    ``surrogateescape``) become U+FFFD. Other encodings: characters the
    codec can't represent become numeric character references.
    """
    try:
        value.encode(encoding)
    except UnicodeEncodeError:
        pass
    else:
        return value

    if encoding.startswith("utf"):
        return "".join("\ufffd" if 0xD800 <= ord(ch) <= 0xDFFF else ch for ch in value)
    return value.encode(encoding, "xmlcharrefreplace").decode(encoding)


def to_ascii_domain(domain: str) -> str:
    """IDNA-encode a non-ASCII domain; leave it unchanged if that fails."""
    if not domain or domain.isascii():
        return domain
    try:
        return domain.encode("idna").decode("ascii")
    except UnicodeError:
        return domain
