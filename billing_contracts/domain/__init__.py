"""
Domain Layer - Business rules and services for contract billing.

This module contains:
- entities/: Report objects (DeliverableReport, ContractSummary)
- events/: SQLAlchemy listeners enforcing validation and locking
- services/: Domain services (ContractService, DeliverableReportService)
"""

from .entities import ActivityLine, SpendLine, DeliverableReport, ContractSummary

__all__ = [
    'ActivityLine', 'SpendLine', 'DeliverableReport', 'ContractSummary',
]
