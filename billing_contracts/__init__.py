"""
Billing contracts plugin: contracts, deliverables and budgets tracked
against a project-management application's issues and time entries.
"""

__version__ = "1.0.0"
