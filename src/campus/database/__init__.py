"""
Database module for the Campus backend
"""

from .connection import create_engine, create_session_factory, session_scope

__all__ = ["create_engine", "create_session_factory", "session_scope"]
