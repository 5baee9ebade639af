"""
CLI Module - Command-line interface for the billing contracts plugin.

Provides management commands for:
- Database setup
- Contract status changes
- Contract and deliverable reports
"""

from .contract_commands import cli, main

__all__ = ['cli', 'main']
