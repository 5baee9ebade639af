"""
Infrastructure Layer - Repository implementations over the SQLAlchemy session.
"""

from .repositories import (
    BaseRepository,
    ContractRepository,
    DeliverableRepository,
    BudgetRepository,
)

__all__ = [
    'BaseRepository',
    'ContractRepository',
    'DeliverableRepository',
    'BudgetRepository',
]
