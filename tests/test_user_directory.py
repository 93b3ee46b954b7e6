"""
Film Ledger — User Directory Unit Tests
=======================================

What:  Tests for the paginated user listing.
How:   Mock repository; the scheduler is a MagicMock.

What we test:
    ✅ Offset from page/limit, total count passed through
    ✅ A reconcile pass is scheduled for a non-empty page only
    ✅ page < 1 / limit < 1 rejected
"""

from unittest.mock import MagicMock

import pytest

from film_ledger.exceptions import ValidationError
from film_ledger.services.user_directory import UserDirectory


class TestListUsers:
    """Tests for UserDirectory.list_users."""

    @pytest.mark.asyncio
    async def test_list_schedules_page(self, mock_repository, make_user):
        """Page 2 of 10 reads from offset 10 and schedules those users."""
        users = [make_user(id=11), make_user(id=12)]
        mock_repository.list_users.return_value = (25, users)
        scheduler = MagicMock()
        directory = UserDirectory(mock_repository, scheduler)

        page = await directory.list_users(page=2, limit=10)

        assert page.count == 25
        assert [u.id for u in page.users] == [11, 12]
        mock_repository.list_users.assert_awaited_once_with(10, 10)
        scheduler.schedule.assert_called_once_with(users)

    @pytest.mark.asyncio
    async def test_skipped_pass_still_returns_page(self, mock_repository, make_user):
        """A pass the scheduler declines does not affect the listing."""
        mock_repository.list_users.return_value = (1, [make_user(id=11)])
        scheduler = MagicMock()
        scheduler.schedule.return_value = None

        page = await UserDirectory(mock_repository, scheduler).list_users()

        assert page.count == 1

    @pytest.mark.asyncio
    async def test_empty_page_schedules_nothing(self, mock_repository):
        """No users means no reconcile pass."""
        mock_repository.list_users.return_value = (0, [])
        scheduler = MagicMock()

        page = await UserDirectory(mock_repository, scheduler).list_users()

        assert page.count == 0
        scheduler.schedule.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0)])
    async def test_rejects_bad_paging(self, mock_repository, page, limit):
        """Non-positive page or limit should raise ValidationError."""
        directory = UserDirectory(mock_repository, MagicMock())

        with pytest.raises(ValidationError):
            await directory.list_users(page=page, limit=limit)
