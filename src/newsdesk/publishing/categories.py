# ABOUTME: Fuzzy category resolution by name with guarded auto-creation.
# ABOUTME: Scores candidates with the Sorensen-Dice coefficient over character bigrams.

import re
from collections import Counter
from dataclasses import dataclass

import structlog

from newsdesk.db.repository import CategoryRepository, LanguageRepository
from newsdesk.utils.text import slugify

log = structlog.get_logger()

MIN_NEW_NAME_CHARS = 3
MAX_NEW_NAME_CHARS = 40
MAX_NEW_NAME_WORDS = 4
MAX_SLUG_ATTEMPTS = 50


@dataclass
class CategoryMatch:
    category_id: str
    category_name: str
    created: bool
    match_score: float


def normalize_category_name(name: str) -> str:
    """Lowercase, spell out ``&`` and collapse punctuation to single spaces."""
    text = name.strip().lower().replace("&", " and ")
    return " ".join(re.sub(r"[\W_]+", " ", text).split())


def _bigrams(text: str) -> list[str]:
    return [text[i : i + 2] for i in range(len(text) - 1)]


def dice_similarity(a: str, b: str) -> float:
    """Sorensen-Dice similarity of two names, 0.0 to 1.0."""
    left = normalize_category_name(a)
    right = normalize_category_name(b)
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    if len(left) < 3 or len(right) < 3:
        return 0.0

    left_bigrams = Counter(_bigrams(left))
    right_bigrams = Counter(_bigrams(right))
    intersection = sum((left_bigrams & right_bigrams).values())
    return 2 * intersection / (sum(left_bigrams.values()) + sum(right_bigrams.values()))


class CategoryResolver:
    """Maps a free-text category name to an existing or newly created category."""

    def __init__(self, repo: CategoryRepository, languages: LanguageRepository) -> None:
        self.repo = repo
        self.languages = languages

    async def resolve(
        self,
        suggested_name: str,
        language_code: str | None = None,
        similarity_threshold: float = 0.9,
        auto_create: bool = True,
    ) -> CategoryMatch | None:
        """Find the best-matching category or create one.

        Names that are too short, too long or too wordy are never auto-created.
        """
        suggested = suggested_name.strip()
        if not suggested:
            return None
        language = (language_code or "").strip().lower() or "en"

        categories = await self.repo.list_active()
        translations = await self.repo.list_translations(language)

        names_by_id: dict[str, list[str]] = {c.id: [c.name] for c in categories}
        for tr in translations:
            names_by_id.setdefault(tr.category_id, []).append(tr.name or "")

        best: CategoryMatch | None = None
        for category_id, names in names_by_id.items():
            for name in names:
                score = dice_similarity(suggested, name)
                if best is None or score > best.match_score:
                    best = CategoryMatch(category_id, name, False, score)

        if best is not None and best.match_score >= similarity_threshold:
            log.debug("category_matched", name=suggested, category_id=best.category_id, score=best.match_score)
            return best

        if not auto_create:
            return None

        normalized = normalize_category_name(suggested)
        if not MIN_NEW_NAME_CHARS <= len(normalized) <= MAX_NEW_NAME_CHARS:
            return None
        if len(normalized.split()) > MAX_NEW_NAME_WORDS:
            return None

        base_slug = slugify(suggested, max_length=60) or "category"
        existing_slugs = await self.repo.list_slugs_like(base_slug)
        slug = base_slug
        attempt = 1
        while slug in existing_slugs and attempt < MAX_SLUG_ATTEMPTS:
            slug = f"{base_slug}-{attempt}"
            attempt += 1

        created = await self.repo.create(name=suggested, slug=slug)
        codes = list(await self.languages.list_active_codes())
        await self.repo.add_translations(created.id, suggested, codes)
        log.info("category_created", name=suggested, category_id=created.id, slug=slug)
        return CategoryMatch(created.id, created.name, True, 0.0)
