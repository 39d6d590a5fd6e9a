import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_NON_DIGITS = re.compile(r"[^0-9]")


def strip_accents(text: str) -> str:
    """Decompose to NFD and drop combining marks"""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def only_digits(value) -> str:
    """Keep ASCII digits only; None becomes an empty string"""
    if value is None:
        return ""
    return _NON_DIGITS.sub("", str(value))
