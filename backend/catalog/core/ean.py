"""EAN normalization: the only identifier check needed to form cache keys."""
from catalog.core.constants import EAN_PATTERN
from catalog.core.errors import MalformedKey


def normalize_ean(ean: str | None) -> str | None:
    """Strip whitespace; empty or missing EAN means "no filter" and returns None."""
    if ean is None:
        return None
    ean = ean.strip()
    return ean or None


def validate_ean(ean: str | None) -> str | None:
    """
    Normalize and check format. Returns None for an absent/blank EAN.
    Raises MalformedKey when a non-blank EAN is not 8 or 13 digits.
    """
    ean = normalize_ean(ean)
    if ean is not None and not EAN_PATTERN.match(ean):
        raise MalformedKey(ean)
    return ean
