"""
Keyword Patterns - Rule tables for beat classification

Compiled once at import time and never mutated. Patterns are tuned for
ad/film scripts (including Hinglish dialogue) and are matched
case-insensitively on whole words.
"""

import re
from types import MappingProxyType


# ============================================
# BEAT PATTERNS
# ============================================

CLOSE_UP = re.compile(
    r"\b(close-?up|cu|face|expression|eyes|reaction|stare(s|d)?|smile(s|d)?"
    r"|frown(s|ed)?|annoyed|intense|confused)\b",
    re.IGNORECASE,
)

PRODUCT = re.compile(
    r"\b(product|pack|box|bottle|shoe(s)?|toothpaste|muesli|bowl)\b",
    re.IGNORECASE,
)

INSERT = re.compile(
    r"\b(milk|pour|spoon|crunch|texture|detail|macro|hand|tap(s|ped)?)\b",
    re.IGNORECASE,
)

ACTION = re.compile(
    r"\b(bowl(ing)?|run-?up|runs?|running|walk(ing)?|rush(es|ed)?|move(s|d)?"
    r"|workout|vlog(ging)?)\b",
    re.IGNORECASE,
)

DIALOGUE_QUOTES = re.compile(r"[\"“”]")
DIALOGUE_PREFIX = re.compile(r"^\s*[A-Za-z][A-Za-z\s]*:\s+")

# Intent-only patterns
REACTION = re.compile(
    r"\b(stares|looks|expression|reaction|confused|annoyed|smiles)\b",
    re.IGNORECASE,
)
PRESENTATION = re.compile(
    r"\b(hold(s|ing)?|opens|present(s|ing)?|shows)\b",
    re.IGNORECASE,
)


# ============================================
# NAME / PRODUCT VOCABULARY
# ============================================

CHARACTER_NAMES = ("Arshdeep", "Manager", "Director", "Brand Manager")
PRODUCT_NOUNS = ("toothpaste", "shoe", "bottle", "muesli", "bowl", "spoon", "pack")

CHARACTER_NAME = re.compile(
    r"\b(" + "|".join(re.escape(n) for n in CHARACTER_NAMES) + r")\b",
    re.IGNORECASE,
)
PRODUCT_NOUN = re.compile(
    r"\b(" + "|".join(re.escape(n) for n in PRODUCT_NOUNS) + r")\b",
    re.IGNORECASE,
)

DEFAULT_SUBJECT = "character"
DEFAULT_PRODUCT = "product"


# ============================================
# CONTINUITY VOCABULARY
# ============================================

CONTINUITY_NOTES = MappingProxyType({
    "line_of_action": ("Action axis maintained", "Standard"),
    "eyelines": ("Match eyelines", "N/A"),
    "match_action": ("Cut on action", "N/A"),
    "props_wardrobe": ("Hero product visible", "Check continuity"),
})


def is_dialogue(text: str) -> bool:
    """Quoted speech or a ``Name:`` prefix."""
    return bool(DIALOGUE_QUOTES.search(text) or DIALOGUE_PREFIX.search(text))


def find_subject(text: str) -> str:
    """First recognized character name, else the generic subject."""
    match = CHARACTER_NAME.search(text)
    return match.group(0) if match else DEFAULT_SUBJECT


def find_product(text: str) -> str:
    """First recognized product noun, else the generic product."""
    match = PRODUCT_NOUN.search(text)
    return match.group(0) if match else DEFAULT_PRODUCT
