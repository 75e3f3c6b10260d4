# ABOUTME: Schema.org NewsArticle JSON-LD construction for web articles.
# ABOUTME: Resolves relative image/logo URLs against the canonical URL origin.

from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

HEADLINE_MAX_CHARS = 110
DESCRIPTION_MAX_CHARS = 160


def _origin(canonical_url: str) -> str:
    parts = urlsplit(canonical_url)
    if parts.scheme in ("http", "https") and parts.netloc:
        return f"{parts.scheme}://{parts.netloc}"
    return ""


def _absolute(url: str | None, origin: str) -> str | None:
    if not url:
        return None
    if url.lower().startswith(("http://", "https://")) or not origin:
        return url
    return f"{origin.rstrip('/')}/{url.lstrip('/')}"


def _iso(value: str | datetime | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).isoformat()
    except ValueError:
        return value


def build_news_article_json_ld(
    headline: str,
    canonical_url: str,
    description: str | None = None,
    image_urls: list[str] | None = None,
    language_code: str | None = None,
    date_published: str | datetime | None = None,
    date_modified: str | datetime | None = None,
    author_name: str | None = None,
    publisher_name: str | None = None,
    publisher_logo_url: str | None = None,
    publisher_logo_width: int | None = None,
    publisher_logo_height: int | None = None,
    keywords: list[str] | None = None,
    article_section: str | None = None,
    content_location_name: str | None = None,
) -> dict[str, Any]:
    """Build a NewsArticle JSON-LD object.

    Args:
        headline: Article headline (clipped to 110 chars)
        canonical_url: Absolute or site-relative canonical URL
        description: Meta description (clipped to 160 chars)
        image_urls: Image URLs, made absolute against the canonical origin
        language_code: ``inLanguage`` value, defaults to ``en``
        date_published: Publication timestamp
        date_modified: Last modification timestamp
        author_name: Byline, defaults to ``Reporter``
        publisher_name: Organization name; no publisher block when empty
        publisher_logo_url: Organization logo URL
        publisher_logo_width: Logo width in pixels (needs height too)
        publisher_logo_height: Logo height in pixels (needs width too)
        keywords: Keyword list
        article_section: Section/category name
        content_location_name: Place the story is about

    Returns:
        JSON-serializable dict.
    """
    origin = _origin(canonical_url)
    images = [u for u in (_absolute(u, origin) for u in image_urls or []) if u]

    article: dict[str, Any] = {
        "@context": "https://schema.org",
        "@type": "NewsArticle",
        "headline": headline[:HEADLINE_MAX_CHARS],
        "url": canonical_url,
        "mainEntityOfPage": {"@type": "WebPage", "@id": canonical_url},
        "inLanguage": language_code or "en",
        "isAccessibleForFree": True,
    }

    if description:
        article["description"] = description[:DESCRIPTION_MAX_CHARS]
    if len(images) == 1:
        article["image"] = {"@type": "ImageObject", "url": images[0]}
    elif images:
        article["image"] = images

    published = _iso(date_published)
    if published:
        article["datePublished"] = published
    modified = _iso(date_modified)
    if modified:
        article["dateModified"] = modified

    article["author"] = {"@type": "Person", "name": (author_name or "").strip() or "Reporter"}

    if publisher_name:
        publisher: dict[str, Any] = {"@type": "Organization", "name": publisher_name}
        logo_url = _absolute(publisher_logo_url, origin)
        if logo_url:
            logo: dict[str, Any] = {"@type": "ImageObject", "url": logo_url}
            if publisher_logo_width and publisher_logo_height:
                logo["width"] = publisher_logo_width
                logo["height"] = publisher_logo_height
            publisher["logo"] = logo
        article["publisher"] = publisher

    if keywords:
        article["keywords"] = keywords
    if article_section:
        article["articleSection"] = article_section
    if content_location_name:
        article["contentLocation"] = {"@type": "Place", "name": content_location_name}

    return article
