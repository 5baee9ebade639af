"""
HTTP API for the billing contracts plugin.
"""
