"""Adapters that turn external data (CSV exports) into engine input.

Keep these modules small and testable:
- No FastAPI request/response objects
- No scoring concerns
- Parsing helpers plus the thin file-reading wrapper
"""
