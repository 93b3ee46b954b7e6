"""
Film Ledger — Preference Service
================================

What:  Owns a user's favor tags and liked movie ids.
How:   Read the user, extend the decoded TokenSet, write one merged update
       back through the repository. Nothing is cached; every call re-reads.
Who:   Called by the request layer with favor / liked-movie commands.

Concurrency:
    Read-modify-write on the encoded columns races when two calls hit the
    same user. With `preference_optimistic_lock` on (default) the write is
    conditional on the version that was read and a lost race surfaces as
    ConflictError. With it off, the last writer wins and the other update
    is lost.
"""

import logging
from typing import Iterable, Optional

from film_ledger.config import settings
from film_ledger.repositories.base import LedgerRepository
from film_ledger.schemas.ledger import FavorCommand, UserPreferences
from film_ledger.schemas.records import UserRecord
from film_ledger.tokens import TokenSet

logger = logging.getLogger(__name__)


class PreferenceService:
    """
    Additive, deduplicated updates of the two preference token sets.

    Both sets only grow: existing tokens keep their position and new ones
    are appended in the order first seen.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        optimistic_lock: Optional[bool] = None,
    ):
        self.repository = repository
        self.optimistic_lock = (
            settings.preference_optimistic_lock if optimistic_lock is None else optimistic_lock
        )

    async def add_favor_tags(self, user_id: int, tags: Iterable[str]) -> None:
        """
        Merge `tags` into the user's favor tags.

        Args:
            user_id: target user
            tags:    tag strings; each may itself be whitespace-separated
                     free text and may repeat tags already stored

        Raises:
            NotFoundError: unknown user
            ConflictError: concurrent preference write (optimistic lock on)
        """
        user = await self.repository.get_user(user_id)
        favor = TokenSet.from_raw(user.favor)
        added = favor.extend(tags)
        if not added:
            logger.debug("User %s favor tags unchanged", user_id)
            return

        await self._write(user, {"favor": favor.to_raw()})
        logger.info("User %s favor tags extended with %s", user_id, added)

    async def add_liked_movie(self, user_id: int, movie_id: int) -> None:
        """
        Append `movie_id` to the user's liked movies; a repeat is a no-op.

        Raises:
            NotFoundError: unknown user
            ConflictError: concurrent preference write (optimistic lock on)
        """
        user = await self.repository.get_user(user_id)
        movies = TokenSet.from_raw(user.movie_ids)
        if not movies.add(str(movie_id)):
            logger.debug("User %s already likes movie %s", user_id, movie_id)
            return

        await self._write(user, {"movie_ids": movies.to_raw()})
        logger.info("User %s liked movie %s", user_id, movie_id)

    async def collect_favor(self, command: FavorCommand) -> None:
        """Apply a combined favor-tags + liked-movie command."""
        if command.tags:
            await self.add_favor_tags(command.user_id, command.tags)
        if command.movie_id is not None:
            await self.add_liked_movie(command.user_id, command.movie_id)

    async def get_preferences(self, user_id: int) -> UserPreferences:
        user = await self.repository.get_user(user_id)
        return UserPreferences(
            user_id=user.id,
            favor_tags=list(TokenSet.from_raw(user.favor)),
            liked_movie_ids=list(TokenSet.from_raw(user.movie_ids)),
        )

    async def _write(self, user: UserRecord, fields: dict) -> None:
        await self.repository.update_user(
            user.id,
            fields,
            expected_version=user.version if self.optimistic_lock else None,
        )
