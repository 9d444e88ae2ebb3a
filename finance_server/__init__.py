"""
MCP Finance Server - Source Package

A personal-finance record keeper exposed as a catalog of named operations
over users, categories and ledger entries, plus balance queries.

DESIGN PRINCIPLES:
1. Validate input before touching stored data
2. Fail early, fail visibly (every failure has a kind)
3. One JSON document is the single source of truth
4. Every mutation is auditable
5. Transport is swappable
"""

__version__ = "0.2.0"
__author__ = "MCP Finance Server Team"
