"""
Canonicalize free-text option and return-reason strings.

Marketplace exports spell the same option a dozen ways ("색상:블랙(특가)/FREE",
"블랙 / free size", ...). simplify_option() reduces them to a short
"{color}/{size}" display value; simplify_return_reason() folds reasons into a
small controlled vocabulary. Both are idempotent.
"""

from __future__ import annotations

import re

# Ordered: first hit wins. No keyword is a substring of another.
COLOR_KEYWORDS: tuple[str, ...] = (
    "블랙",
    "화이트",
    "네이비",
    "그레이",
    "베이지",
    "레드",
    "블루",
    "그린",
    "옐로우",
    "퍼플",
    "핑크",
    "브라운",
    "오렌지",
    "민트",
    "라벤더",
    "와인",
    "아이보리",
    "크림",
    "차콜",
    "카키",
    "골드",
    "실버",
)

# English names need word boundaries ("red" must not hit "bordered").
ENGLISH_COLOR_KEYWORDS: tuple[str, ...] = (
    "Black",
    "White",
    "Navy",
    "Gray",
    "Grey",
    "Beige",
    "Red",
    "Blue",
    "Green",
    "Yellow",
    "Purple",
    "Pink",
    "Brown",
    "Orange",
    "Mint",
    "Ivory",
    "Khaki",
)
_ENGLISH_COLOR_PATTERNS = [
    (name, re.compile(rf"\b{name}\b", re.IGNORECASE | re.ASCII)) for name in ENGLISH_COLOR_KEYWORDS
]

_BRACKETED = re.compile(r"\([^)]*\)|\[[^\]]*\]")
_LABEL_PREFIX = re.compile(
    r"(?:color-select|color|size|option|색상선택|색상|사이즈|옵션)\s*:\s*",
    re.IGNORECASE,
)
_FILLERS = (
    re.compile(r"\bfree\s*size\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\bone\s*size\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\bfree\b", re.IGNORECASE | re.ASCII),
)
_SLASH = re.compile(r"\s*/+\s*")
_WHITESPACE = re.compile(r"\s+")

# Priority order: S/M/L, S/M/L + XL, XL, XXL, bare number.
_SIZE_PATTERNS = (
    re.compile(r"\b([SML])\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\b([SML]XL)\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\b(XL)\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\b(XXL)\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\b([0-9]+)\b", re.ASCII),
)


def _clean_pass(text: str) -> str:
    text = _BRACKETED.sub("", text)
    text = _LABEL_PREFIX.sub("", text)
    for pattern in _FILLERS:
        text = pattern.sub("", text)
    text = _SLASH.sub("/", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip(" /")


def clean_option(option: str | None) -> str:
    """Strip brackets, label prefixes and filler tokens until nothing changes."""
    if not option:
        return ""
    text = option
    # Removing one prefix can expose another ("색색상:상:"), so run to a fixed point.
    while True:
        cleaned = _clean_pass(text)
        if cleaned == text:
            return text
        text = cleaned


def extract_color(text: str | None) -> str | None:
    """First color keyword found in ``text`` (Korean list first, then English)."""
    if not text:
        return None
    for color in COLOR_KEYWORDS:
        if color in text:
            return color
    for name, pattern in _ENGLISH_COLOR_PATTERNS:
        if pattern.search(text):
            return name
    return None


def extract_size(text: str | None) -> str | None:
    if not text:
        return None
    for pattern in _SIZE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1).upper()
    return None


def simplify_option(option: str | None) -> str:
    """
    Reduce an option string to its display form.

    Examples:
        "색상:블랙(특가)/FREE" -> "블랙"
        "사이즈: L / 네이비"  -> "네이비/L"
        "기본"                -> "기본" (nothing extracted, cleaned text kept)
    """
    cleaned = clean_option(option)
    if not cleaned:
        return ""

    color = extract_color(cleaned)
    size = extract_size(cleaned)

    if color and size:
        return f"{color}/{size}"
    if color:
        return color
    if size:
        return size
    return cleaned


REASON_CHANGE_OF_MIND = "단순 변심"
REASON_DAMAGED = "파손 및 불량"
REASON_ORDER_MISTAKE = "주문실수"


def simplify_return_reason(reason: str | None) -> str:
    """Fold a free-text return reason into the controlled vocabulary; first rule wins."""
    if not reason:
        return reason or ""

    if "변심" in reason or "단순" in reason:
        return REASON_CHANGE_OF_MIND
    if "파손" in reason or "불량" in reason:
        return REASON_DAMAGED
    if "잘못" in reason and "주문" in reason:
        return REASON_ORDER_MISTAKE
    return reason
