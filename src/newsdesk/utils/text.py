# ABOUTME: Text helpers for web article rendering.
# ABOUTME: HTML allowlist sanitizing, language-agnostic slugs and word trimming.

import re
import unicodedata

import bleach

# Tags kept in web article HTML
ALLOWED_TAGS = ["p", "h1", "h2", "h3", "ul", "ol", "li", "strong", "em", "a", "figure", "img", "figcaption"]
ALLOWED_ATTRS = {"a": ["href"], "img": ["src", "alt", "loading"]}
ALLOWED_PROTOCOLS = ["http", "https", "mailto"]

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_LATIN_DIACRITICS_RE = re.compile(r"[\u0300-\u036f]")
_DASH_RUN_RE = re.compile(r"-{2,}")


def sanitize_html(html: str) -> str:
    """Strip everything outside the allowlist, dropping script/style blocks entirely."""
    if not html:
        return ""
    without_scripts = _SCRIPT_STYLE_RE.sub("", html)
    return bleach.clean(
        without_scripts,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )


def _is_slug_char(ch: str) -> bool:
    # Indic vowel signs and viramas are marks, not alphanumerics
    return ch.isalnum() or unicodedata.category(ch).startswith("M")


def slugify(text: str, max_length: int = 120) -> str:
    """Build a URL-safe slug, keeping letters of any script.

    Latin diacritics are folded away; Indic and other scripts are preserved
    and returned in NFC form. Slugs longer than ``max_length`` are cut back
    to the last whole word.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    folded = unicodedata.normalize("NFC", _LATIN_DIACRITICS_RE.sub("", decomposed))
    dashed = "".join(ch if _is_slug_char(ch) else "-" for ch in folded)
    slug = _DASH_RUN_RE.sub("-", dashed).strip("-").lower()
    if len(slug) > max_length:
        cut = slug[:max_length]
        # Keep the last word only when the cut lands on a word boundary
        if slug[max_length] != "-" and "-" in cut:
            cut = cut.rsplit("-", 1)[0]
        slug = cut.strip("-")
    return slug


def word_count(text: str | None) -> int:
    """Count whitespace-separated words."""
    return len((text or "").split())


def trim_words(text: str | None, max_words: int) -> str:
    """Keep the first ``max_words`` words."""
    if not text:
        return ""
    words = text.split()
    if len(words) <= max_words:
        return text.strip()
    return " ".join(words[:max_words])
