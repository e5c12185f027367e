"""ID and secret generators (CUID record ids, temporary IdP passwords)."""

import secrets
import string

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

# One of each class keeps generated passwords inside typical IdP policies
# (Auth0 "good"/"excellent" strength requires lower, upper, digit, special).
_PASSWORD_CLASSES = (
    string.ascii_lowercase,
    string.ascii_uppercase,
    string.digits,
    "!@#$%^&*-_=+",
)


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_temporary_password(length: int = 24) -> str:
    """Return a random password containing every character class at least once.

    Used when a remote identity must be (re)created and the caller supplied no
    password; the user is expected to go through the IdP reset flow.
    """
    if length < len(_PASSWORD_CLASSES):
        raise ValueError(f"length must be at least {len(_PASSWORD_CLASSES)}")
    alphabet = "".join(_PASSWORD_CLASSES)
    chars = [secrets.choice(group) for group in _PASSWORD_CLASSES]
    chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
