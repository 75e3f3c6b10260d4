# ABOUTME: Pydantic models for submissions, resolved context and publication results.
# ABOUTME: Normalizes loosely-shaped request payloads into canonical typed structures.

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Literal, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class RoleName(str, Enum):
    """Roles that may act on newspaper articles."""

    SUPER_ADMIN = "SUPER_ADMIN"
    TENANT_ADMIN = "TENANT_ADMIN"
    REPORTER = "REPORTER"
    ADMIN_EDITOR = "ADMIN_EDITOR"
    NEWS_MODERATOR = "NEWS_MODERATOR"


TENANT_SCOPED_ROLES = frozenset(
    {
        RoleName.TENANT_ADMIN.value,
        RoleName.REPORTER.value,
        RoleName.ADMIN_EDITOR.value,
        RoleName.NEWS_MODERATOR.value,
    }
)


class ArticleStatus(str, Enum):
    """Publication status of an article."""

    DRAFT = "DRAFT"
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"


class AIMode(str, Enum):
    """How much AI rewriting a submission receives."""

    FULL = "FULL"
    LIMITED = "LIMITED"


class DecisionSource(str, Enum):
    """Where an AI mode decision came from."""

    TENANT_FLAG = "tenant-flag"
    OVERRIDE = "override"


class CreationStatus(str, Enum):
    """Whether every synchronous artifact was written."""

    FULLY_CREATED = "FULLY_CREATED"
    PARTIALLY_CREATED = "PARTIALLY_CREATED"


def _clean_str(value: Any) -> str | None:
    """Coerce scalars to stripped strings, empty to None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _clean_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [s for s in (_clean_str(v) for v in value) if s]


class CamelModel(BaseModel):
    """Base model accepting and dumping camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Content blocks: a tagged union keyed by ``type``


class ParagraphBlock(CamelModel):
    type: Literal["paragraph"] = "paragraph"
    text: str = ""


class MediaBlock(CamelModel):
    type: Literal["image", "video"]
    url: str | None = None


class OtherBlock(CamelModel):
    type: str = ""
    text: str | None = None


ContentBlock = ParagraphBlock | MediaBlock | OtherBlock


def parse_block(raw: Any) -> ContentBlock | None:
    """Turn one raw content item into its typed block, None for non-objects."""
    if not isinstance(raw, dict):
        return None
    kind = (_clean_str(raw.get("type")) or "").lower()
    if kind == "paragraph":
        return ParagraphBlock(text=_clean_str(raw.get("text")) or "")
    if kind in ("image", "img", "video"):
        return MediaBlock(
            type="video" if kind == "video" else "image",
            url=_clean_str(raw.get("url")) or _clean_str(raw.get("src")),
        )
    return OtherBlock(type=kind, text=_clean_str(raw.get("text")))


class MediaRef(CamelModel):
    url: str | None = None


class MediaPayload(CamelModel):
    """Structured ``media`` object: ``{"images": [{"url": ...}], "videos": [...]}``."""

    images: list[MediaRef] = []
    videos: list[MediaRef] = []

    @field_validator("images", "videos", mode="before")
    @classmethod
    def _only_objects(cls, value: Any) -> list[dict]:
        if not isinstance(value, list):
            return []
        return [{"url": _clean_str(v.get("url"))} for v in value if isinstance(v, dict)]


class SeoPayload(CamelModel):
    meta_title: str | None = None
    meta_description: str | None = None

    @field_validator("meta_title", "meta_description", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str | None:
        return _clean_str(value)


class LocationPayload(CamelModel):
    """Partial location input; any subset of ids and free-text names."""

    village_id: str | None = None
    mandal_id: str | None = None
    district_id: str | None = None
    state_id: str | None = None
    village_name: str | None = None
    mandal_name: str | None = None
    district_name: str | None = None
    state_name: str | None = None
    city: str | None = Field(default=None, validation_alias=AliasChoices("city", "placeName", "place"))
    place_id: str | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str | None:
        return _clean_str(value)


class Submission(CamelModel):
    """A reporter's single content payload, normalized once at the edge."""

    title: str = ""
    sub_title: str | None = None
    heading: str | None = None
    lead: str | None = None
    content: list[ContentBlock] = []
    bullet_points: list[str] = []
    location: LocationPayload = LocationPayload()
    language_code: str | None = Field(
        default=None, validation_alias=AliasChoices("language", "languageCode", "language_code")
    )
    domain_id: str | None = None
    category_id: str | None = None
    category: str | None = None
    tags: list[str] = []
    cover_image_url: str | None = None
    images: list[str] = []
    media_urls: list[str] = []
    media: MediaPayload = MediaPayload()
    status: str | None = None
    published_at: str | None = None
    dateline: str | None = Field(
        default=None, validation_alias=AliasChoices("dateLine", "dateline")
    )
    seo: SeoPayload = SeoPayload()
    callback_url: str | None = None

    @field_validator(
        "sub_title",
        "heading",
        "lead",
        "language_code",
        "domain_id",
        "category_id",
        "category",
        "cover_image_url",
        "status",
        "published_at",
        "dateline",
        "callback_url",
        mode="before",
    )
    @classmethod
    def _strip_optional(cls, value: Any) -> str | None:
        return _clean_str(value)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> str:
        return _clean_str(value) or ""

    @field_validator("bullet_points", "tags", "images", "media_urls", mode="before")
    @classmethod
    def _strip_lists(cls, value: Any) -> list[str]:
        return _clean_str_list(value)

    @field_validator("content", mode="before")
    @classmethod
    def _parse_blocks(cls, value: Any) -> list[ContentBlock]:
        if not isinstance(value, list):
            return []
        return [b for b in (parse_block(v) for v in value) if b is not None]

    @field_validator("location", "media", "seo", mode="before")
    @classmethod
    def _objects_only(cls, value: Any) -> Any:
        return value if isinstance(value, dict | BaseModel) else {}

    @property
    def paragraphs(self) -> list[str]:
        """Non-empty paragraph texts in submission order."""
        return [b.text for b in self.content if isinstance(b, ParagraphBlock) and b.text]

    @property
    def content_text(self) -> str:
        """Lead and paragraphs joined by blank lines."""
        parts = [self.lead or "", *self.paragraphs]
        return "\n\n".join(p for p in parts if p).strip()


class NewspaperArticlePatch(CamelModel):
    """Partial edit of a print article.

    Only keys present in the body change. Text fields must be strings;
    ``points`` that is not a list is ignored.
    """

    title: str | None = None
    sub_title: str | None = None
    heading: str | None = None
    dateline: str | None = Field(
        default=None, validation_alias=AliasChoices("dateLine", "dateline")
    )
    place_name: str | None = None
    content: str | None = None
    status: str | None = None
    points: list[str] | None = None

    @field_validator("points", mode="before")
    @classmethod
    def _points_list_only(cls, value: Any) -> list[str] | None:
        if not isinstance(value, list):
            return None
        return _clean_str_list(value)


# Resolved context


class LocationRef(CamelModel):
    """Resolved location with the most specific display name."""

    village_id: str | None = None
    village_name: str | None = None
    mandal_id: str | None = None
    mandal_name: str | None = None
    district_id: str | None = None
    district_name: str | None = None
    state_id: str | None = None
    state_name: str | None = None
    city: str | None = None
    place_id: str | None = None
    display_name: str | None = None
    address: str | None = None
    degraded: list[str] = []


class TenantContext(CamelModel):
    tenant_id: str
    domain_id: str | None = None
    domain_name: str | None = None


class Principal(CamelModel):
    """The authenticated caller as seen by the publishing core."""

    user_id: str
    role: str | None = None
    reporter_tenant_id: str | None = None


class AIDecision(CamelModel):
    mode: AIMode
    tenant_ai_rewrite_enabled: bool
    source: DecisionSource
    prompts_to_run: list[str] = []


class QueueDescriptor(CamelModel):
    web: bool = True
    short: bool = True
    newspaper: bool = False


class WebArticleDraft(CamelModel):
    """Web-ready representation built from a submission."""

    title: str
    slug: str
    content_html: str
    plain_text: str
    language_code: str = ""
    categories: list[str] = []
    tags: list[str] = []
    meta: dict[str, str]
    json_ld: dict[str, Any]
    cover_image: dict[str, str] | None = None
    blocks: list[dict[str, Any]] = []
    audit: dict[str, str] = {}


class PublicationResult(CamelModel):
    """Response contract for a newspaper submission."""

    success: bool = True
    message: str
    external_article_id: str
    article_id: str
    base_article_id: str
    newspaper_article_id: str
    web_article_id: str | None = None
    tenant_ai_rewrite_enabled: bool
    ai_mode: AIMode
    queued: QueueDescriptor
    status_url: str
    callback_url_accepted: bool
    creation_status: CreationStatus


@dataclass
class Lookup(Generic[T]):
    """Outcome of a best-effort lookup; ``degraded`` marks a swallowed failure."""

    value: T | None = None
    degraded: bool = False
    error: str | None = None

    @classmethod
    def ok(cls, value: T | None) -> "Lookup[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, error: Exception) -> "Lookup[T]":
        return cls(value=None, degraded=True, error=f"{type(error).__name__}: {error}")
