"""
Domain utilities module.

Provides shared utilities for the domain layer that remain
independent of infrastructure concerns.
"""

from .passwords import generate_salt, hash_password, verify_password

__all__ = ["generate_salt", "hash_password", "verify_password"]
