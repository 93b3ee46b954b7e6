# Repositories package init
"""
Film Ledger — Storage Layer
===========================

    - LedgerRepository (abstract): the contract services depend on
    - SqlAlchemyLedgerRepository: async SQLAlchemy implementation
"""

from film_ledger.repositories.base import LedgerRepository
from film_ledger.repositories.sqlalchemy_repository import SqlAlchemyLedgerRepository

__all__ = ["LedgerRepository", "SqlAlchemyLedgerRepository"]
