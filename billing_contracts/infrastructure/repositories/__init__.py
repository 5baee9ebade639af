"""
Repository implementations for data access layer.
"""
from .base_repository import BaseRepository
from .contract_repository import ContractRepository
from .deliverable_repository import DeliverableRepository, DELIVERABLE_TYPES
from .budget_repository import BudgetRepository, BUDGET_TYPES

__all__ = [
    'BaseRepository',
    'ContractRepository',
    'DeliverableRepository',
    'BudgetRepository',
    'DELIVERABLE_TYPES',
    'BUDGET_TYPES',
]
