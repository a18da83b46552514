"""
Campus GraphQL backend
Typed query/mutation interface over students, departments, teachers and courses
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
