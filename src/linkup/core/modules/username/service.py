import structlog

from linkup.core.core import Service
from linkup.core.modules.username.generators import generate_candidates, suggestion_round

logger = structlog.get_logger(__name__)

MAX_GENERATE_ATTEMPTS = 50
MAX_SUGGESTION_ROUNDS = 30


class UsernameService(Service):
    """Negotiates available usernames against the credential store.

    Every search is bounded so a pathological base name cannot loop forever.
    """

    async def exists(self, candidate: str) -> bool:
        return await self.core.services.user.username_exists(candidate)

    async def generate_unique(
        self, base: str, first_name: str | None = None, max_attempts: int = MAX_GENERATE_ATTEMPTS
    ) -> str | None:
        """Return base if free, else the first free generated candidate, or None when exhausted."""
        if not await self.exists(base):
            return base

        for attempt in range(1, max_attempts + 1):
            for candidate in generate_candidates(base, first_name, attempt):
                if not await self.exists(candidate):
                    logger.debug("username_generated", base=base, username=candidate, attempt=attempt)
                    return candidate

        logger.warning("username_generation_exhausted", base=base, max_attempts=max_attempts)
        return None

    async def suggest(self, base: str, max_suggestions: int = 5) -> list[str]:
        """Up to max_suggestions distinct, currently available usernames derived from base."""
        suggestions: list[str] = []
        for attempt in range(1, MAX_SUGGESTION_ROUNDS + 1):
            if len(suggestions) >= max_suggestions:
                break
            for candidate in suggestion_round(base, attempt):
                if len(suggestions) >= max_suggestions:
                    break
                if candidate not in suggestions and not await self.exists(candidate):
                    suggestions.append(candidate)
        return suggestions
