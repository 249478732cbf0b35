"""
Turkish-aware name collation.

Player names are compared and ordered the way a Turkish locale does it:
- dotted/dotless i are distinct letters ("ı" < "i"), and case-map in pairs
  I <-> ı, İ <-> i
- ç, ğ, ö, ş, ü sort directly after c, g, o, s, u
- comparison is case-insensitive at the primary level; lowercase sorts
  before uppercase only when the letters are otherwise identical
"""
import unicodedata
from typing import Tuple

TURKISH_ALPHABET = "abcçdefgğhıijklmnoöpqrsştuüvwxyz"

_LETTER_INDEX = {ch: i for i, ch in enumerate(TURKISH_ALPHABET)}

# Non-letters (digits, spaces, punctuation) sort before letters,
# letters outside the Turkish alphabet sort after it.
_CLASS_OTHER = 0
_CLASS_LETTER = 1
_CLASS_FOREIGN = 2


def turkish_lower(value: str) -> str:
    """Lowercase using Turkish case pairs (I -> ı, İ -> i)."""
    return value.replace("I", "ı").replace("İ", "i").lower()


def normalize_name(value: str) -> str:
    """Canonical form used for uniqueness checks."""
    return unicodedata.normalize("NFC", turkish_lower(value.strip()))


def names_equal(a: str, b: str) -> bool:
    return normalize_name(a) == normalize_name(b)


def _primary_weight(ch: str) -> Tuple[int, int]:
    if ch in _LETTER_INDEX:
        return (_CLASS_LETTER, _LETTER_INDEX[ch])
    if not ch.isalpha():
        return (_CLASS_OTHER, ord(ch))
    # Accented letters (á, é, ...) collate with their base letter
    base = unicodedata.normalize("NFD", ch)[0]
    if base in _LETTER_INDEX:
        return (_CLASS_LETTER, _LETTER_INDEX[base])
    return (_CLASS_FOREIGN, ord(ch))


def collation_key(name: str) -> tuple:
    """
    Sort key for a player name under Turkish collation.

    Order: primary letters (case-insensitive), then case (lower first),
    then the raw string so that distinct names never compare equal.
    """
    lowered = unicodedata.normalize("NFC", turkish_lower(name))
    primary = tuple(_primary_weight(ch) for ch in lowered)
    tertiary = tuple(ch.isupper() for ch in name)
    return (primary, tertiary, name)
