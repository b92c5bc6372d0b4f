"""Password strength scoring shared by every sign-up entry point."""

import re

from racebook.core.config import settings
from racebook.models.accounts import PasswordStrength

MIN_PASSWORD_LENGTH = 8

_DIGIT = re.compile(r"\d")
_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_SPECIAL = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


def classify_strength(password: str, *, medium_min_length: int | None = None) -> PasswordStrength:
    """Score a password as weak, medium or strong.

    Strong needs a digit, an upper-case letter, a lower-case letter and a
    special character. Medium needs one of the pairs digit+upper,
    upper+special or lower+digit, and at least ``medium_min_length``
    characters (``PASSWORD_MEDIUM_MIN_LENGTH`` when not given). Anything
    shorter than 8 characters is weak.
    """
    if medium_min_length is None:
        medium_min_length = settings.password_medium_min_length

    if len(password) < MIN_PASSWORD_LENGTH:
        return PasswordStrength.WEAK

    has_digit = bool(_DIGIT.search(password))
    has_upper = bool(_UPPER.search(password))
    has_lower = bool(_LOWER.search(password))
    has_special = bool(_SPECIAL.search(password))

    if has_digit and has_upper and has_lower and has_special:
        return PasswordStrength.STRONG

    pair_match = (
        (has_digit and has_upper) or (has_upper and has_special) or (has_lower and has_digit)
    )
    if pair_match and len(password) >= medium_min_length:
        return PasswordStrength.MEDIUM
    return PasswordStrength.WEAK
