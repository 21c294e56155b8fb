"""Username candidate patterns used during onboarding."""

import random
import string
from datetime import date

SUFFIX_ALPHABET = string.ascii_lowercase + string.digits

_rng = random.SystemRandom()


def random_suffix(length: int = 3) -> str:
    return "".join(_rng.choice(SUFFIX_ALPHABET) for _ in range(length))


def generate_candidates(base: str, first_name: str | None = None, attempt: int = 1, year: int | None = None) -> list[str]:
    """Ordered candidates for one attempt of unique-username generation.

    Patterns: base_<year><rand3>, <first_name>_<rand3> (only with a first name),
    base<attempt>, base_<rand3>.
    """
    year = year or date.today().year
    candidates = [f"{base}_{year}{random_suffix()}"]
    if first_name:
        candidates.append(f"{first_name.lower()}_{random_suffix()}")
    candidates.append(f"{base}{attempt}")
    candidates.append(f"{base}_{random_suffix()}")
    return candidates


def suggestion_round(base: str, attempt: int, year: int | None = None) -> list[str]:
    """Five differently patterned suggestions for one round."""
    year = year or date.today().year
    return [
        f"{base}_{random_suffix()}",
        f"{base}{attempt}",
        f"{base}_{str(year)[2:]}{attempt}",
        f"{base}_{attempt}{random_suffix()}",
        f"{base}_{_rng.randrange(1000)}",
    ]
