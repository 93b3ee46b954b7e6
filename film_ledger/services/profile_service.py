"""
Film Ledger — Profile Service
=============================

What:  Points a user's avatar or cover at an already-stored image URL.
How:   AssetKind selects the column; storing the upload itself happens in
       the request layer before this is called.
"""

import enum
import logging
from typing import Union

from film_ledger.exceptions import ValidationError
from film_ledger.repositories.base import LedgerRepository
from film_ledger.schemas.records import UserRecord

logger = logging.getLogger(__name__)


class AssetKind(str, enum.Enum):
    AVATAR = "avatar"
    COVER = "cover"

    @classmethod
    def parse(cls, value: Union[str, "AssetKind"]) -> "AssetKind":
        """
        Raises:
            ValidationError: anything other than "avatar" or "cover"
        """
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                message=f"Unknown asset kind '{value}'. Allowed: avatar, cover",
                field="kind",
            )

    @property
    def column(self) -> str:
        return self.value


class ProfileService:

    def __init__(self, repository: LedgerRepository):
        self.repository = repository

    async def update_asset(
        self, user_id: int, kind: Union[str, AssetKind], url: str
    ) -> UserRecord:
        """
        Raises:
            ValidationError: unknown kind
            NotFoundError:   unknown user
        """
        kind = AssetKind.parse(kind)
        await self.repository.update_user(user_id, {kind.column: url})
        logger.info("User %s %s set to %s", user_id, kind.value, url)
        return await self.repository.get_user(user_id)
