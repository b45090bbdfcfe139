"""
WIMS - Warehouse Inventory Management System.

Local-first stock ledger and salesman order pricing workflow.
"""

__version__ = "0.4.0"
