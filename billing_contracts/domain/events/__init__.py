"""
Domain Events - ORM listeners for contract, deliverable and budget rules.
"""
