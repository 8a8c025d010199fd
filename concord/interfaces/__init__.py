"""
Concord - Interfaces Package
============================

Contains all user-facing interfaces (presentation layer).

Structure:
- api/: FastAPI HTTP interface used by the backend
"""
