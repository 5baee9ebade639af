"""
Domain Entities - Report objects built from contracts and deliverables.
"""

from .deliverable_report import ActivityLine, SpendLine, DeliverableReport, ContractSummary

__all__ = [
    'ActivityLine', 'SpendLine', 'DeliverableReport', 'ContractSummary',
]
