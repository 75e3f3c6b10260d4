# ABOUTME: Turns a submission into canonical text, media URLs and a web-ready article.
# ABOUTME: Also formats print datelines and normalizes free-text publish status.

from datetime import datetime
from zoneinfo import ZoneInfo

from newsdesk.config import Settings, get_settings
from newsdesk.models import ArticleStatus, MediaBlock, Submission, WebArticleDraft
from newsdesk.seo import build_news_article_json_ld
from newsdesk.utils.text import sanitize_html, slugify, trim_words

MONTHS_EN = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
# Abbreviations commonly used in Telugu news
MONTHS_TE = [
    "జన",
    "ఫిబ్ర",
    "మార్చి",
    "ఏప్రి",
    "మే",
    "జూన్",
    "జూలై",
    "ఆగ",
    "సెప్టెం",
    "అక్టో",
    "నవం",
    "డిసెం",
]


def is_http_url(value: str | None) -> bool:
    """True for absolute http(s) URLs."""
    return bool(value) and value.lower().startswith(("http://", "https://"))


def normalize_status(raw: str | None) -> ArticleStatus | str:
    """Map free-text publish intent to a status.

    Unknown values are upper-cased and passed through.
    """
    value = (raw or "").strip().lower()
    if value in ("published", "publish"):
        return ArticleStatus.PUBLISHED
    if value in ("pending", "review"):
        return ArticleStatus.PENDING
    if value in ("draft", ""):
        return ArticleStatus.DRAFT
    return value.upper()


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO timestamp, None when absent or unparseable."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_dateline(
    place_name: str | None, when: datetime, language_code: str | None = None
) -> str:
    """Format a print dateline: ``Place, Mon D, YYYY``."""
    months = MONTHS_TE if (language_code or "").strip().lower() == "te" else MONTHS_EN
    head = f"{place_name}, " if place_name else ""
    return f"{head}{months[when.month - 1]} {when.day}, {when.year}".strip()


class ContentNormalizer:
    """Builds the derivatives of a submission that get persisted."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.tz = ZoneInfo(self.settings.newsroom_timezone)

    def now(self) -> datetime:
        """Current time on the newsroom clock."""
        return datetime.now(self.tz)

    def dateline(self, submission: Submission, place_name: str | None) -> str:
        """Explicit dateline if given, otherwise built from place and publish date."""
        if submission.dateline:
            return submission.dateline
        published = parse_timestamp(submission.published_at)
        when = published.astimezone(self.tz) if published and published.tzinfo else published
        return format_dateline(place_name, when or self.now(), submission.language_code)

    def collect_media_urls(self, submission: Submission) -> list[str]:
        """Every absolute http(s) image/video URL in the submission, deduplicated in order."""
        candidates: list[str | None] = [submission.cover_image_url]
        candidates.extend(submission.images)
        candidates.extend(submission.media_urls)
        candidates.extend(ref.url for ref in submission.media.images)
        candidates.extend(ref.url for ref in submission.media.videos)
        candidates.extend(b.url for b in submission.content if isinstance(b, MediaBlock))

        urls: dict[str, None] = {}
        for url in candidates:
            if is_http_url(url):
                urls.setdefault(url, None)
        return list(urls)

    def plain_text(self, submission: Submission) -> str:
        """Title, subtitle, lead, paragraphs and ``- `` prefixed bullets, one per line."""
        parts = [
            submission.title,
            submission.sub_title or "",
            submission.lead or "",
            *submission.paragraphs,
            *(f"- {p}" for p in submission.bullet_points),
        ]
        return "\n".join(p for p in parts if p)

    def blocks(self, submission: Submission) -> list[dict]:
        """Minimal block list for web rendering."""
        blocks: list[dict] = [{"type": "h1", "text": submission.title}]
        if submission.sub_title:
            blocks.append({"type": "h2", "text": submission.sub_title})
        if submission.lead:
            blocks.append({"type": "p", "text": submission.lead})
        blocks.extend({"type": "p", "text": p} for p in submission.paragraphs)
        if submission.bullet_points:
            blocks.append(
                {"type": "list", "style": "unordered", "items": list(submission.bullet_points)}
            )
        return blocks

    def content_html(self, submission: Submission) -> str:
        parts = [f"<h1>{submission.title}</h1>"]
        if submission.sub_title:
            parts.append(f"<h2>{submission.sub_title}</h2>")
        if submission.lead:
            parts.append(f"<p>{submission.lead}</p>")
        parts.extend(f"<p>{p}</p>" for p in submission.paragraphs)
        if submission.bullet_points:
            items = "".join(f"<li>{p}</li>" for p in submission.bullet_points)
            parts.append(f"<ul>{items}</ul>")
        return sanitize_html("".join(parts))

    def build_web_article(
        self,
        submission: Submission,
        domain_name: str | None = None,
        category_ids: list[str] | None = None,
        media_urls: list[str] | None = None,
    ) -> WebArticleDraft:
        """Build the web representation used when the web article is created synchronously."""
        s = self.settings
        title = submission.title
        slug = slugify(title, s.slug_max_length)
        plain_text = self.plain_text(submission)
        tags = submission.tags[: s.tags_max_items]

        meta_description = submission.seo.meta_description or trim_words(
            plain_text, s.meta_description_max_words
        )[: s.meta_description_max_chars]
        seo_title = submission.seo.meta_title or title[: s.seo_title_max_chars]

        origin = f"https://{domain_name}" if domain_name else s.app_base_url.rstrip("/")
        canonical_url = f"{origin}/articles/{slug}"

        media = media_urls if media_urls is not None else self.collect_media_urls(submission)
        cover_url = next(
            (ref.url for ref in submission.media.images if is_http_url(ref.url)),
            media[0] if media else None,
        )

        now_iso = self.now().isoformat()
        json_ld = build_news_article_json_ld(
            headline=title,
            canonical_url=canonical_url,
            description=meta_description,
            image_urls=[cover_url] if cover_url else [],
            language_code=submission.language_code,
            date_published=submission.published_at,
            date_modified=now_iso,
            publisher_name=s.seo_publisher_name,
            publisher_logo_url=s.seo_publisher_logo or None,
            publisher_logo_width=s.seo_publisher_logo_width,
            publisher_logo_height=s.seo_publisher_logo_height,
            keywords=tags,
        )

        return WebArticleDraft(
            title=title,
            slug=slug,
            content_html=self.content_html(submission),
            plain_text=plain_text,
            language_code=submission.language_code or "",
            categories=list(category_ids or []),
            tags=tags,
            meta={"seoTitle": seo_title, "metaDescription": meta_description},
            json_ld=json_ld,
            cover_image={"url": cover_url} if cover_url else None,
            blocks=self.blocks(submission),
            audit={"createdAt": now_iso, "updatedAt": now_iso},
        )
