"""
Brand and batch-tag hints derived from feed titles.

Feed titles follow a few loose conventions:
    "Nike: Just Do It - Super Bowl LX"   -> brand "Nike"
    "Coca-Cola - Share a Coke"           -> brand "Coca-Cola"
    "Wegovy"                             -> brand "Wegovy"
"""

import re


UNKNOWN_BRAND = "Unknown"

# Trailing campaign suffix, stripped first so colons in it are ignored
_CAMPAIGN_SUFFIX = re.compile(r"\s*-?\s*Super Bowl.*$", re.IGNORECASE)
_COLON_PREFIX = re.compile(r"^([^:]+):")
_DASH_PREFIX = re.compile(r"^(.+?)\s+-\s+")

# (title pattern, edition pattern searched in title + tag, label)
BATCH_TAG_RULES = [
    (
        re.compile(r"super\s*bowl", re.IGNORECASE),
        re.compile(r"\b(?:2026|lx)\b", re.IGNORECASE),
        "2026 Super Bowl LX",
    ),
    (
        re.compile(r"super\s*bowl", re.IGNORECASE),
        re.compile(r"\b(?:2025|lix)\b", re.IGNORECASE),
        "2025 Super Bowl LIX",
    ),
]


def extract_brand(title: str) -> str:
    """
    Guess the advertiser from a feed title.

    Rules, first match wins on the title with its campaign suffix removed:
    text before the first colon, text before the first " - ", the whole
    text. Returns "Unknown" when nothing is left.
    """
    cleaned = _CAMPAIGN_SUFFIX.sub("", title or "")

    match = _COLON_PREFIX.match(cleaned)
    if match:
        return match.group(1).strip() or UNKNOWN_BRAND

    match = _DASH_PREFIX.match(cleaned)
    if match:
        return match.group(1).strip()

    return cleaned.strip() or UNKNOWN_BRAND


def is_known_brand(brand: str) -> bool:
    return bool(brand and brand.strip()) and brand.strip() != UNKNOWN_BRAND


def infer_batch_tags(title: str, tag: str) -> set[str]:
    """
    Canonical collection labels for a title within a batch.

    Only labels from BATCH_TAG_RULES are produced; a title no rule
    recognizes gets no label.
    """
    context = f"{title} {(tag or '').replace('-', ' ')}"
    return {
        label
        for title_pattern, edition_pattern, label in BATCH_TAG_RULES
        if title_pattern.search(title or "") and edition_pattern.search(context)
    }
