"""
Domain Services - Contract lifecycle and deliverable reporting.
"""

from .contract_service import ContractService, STATUS_ACTIONS
from .deliverable_report_service import DeliverableReportService

__all__ = [
    'ContractService',
    'STATUS_ACTIONS',
    'DeliverableReportService',
]
