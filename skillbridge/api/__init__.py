# skillbridge/api/__init__.py
# This file makes the api directory a Python package.

from . import admin
from . import goals
from . import mentorship
from . import ratings
from . import reputation

__all__ = [
    "admin",
    "goals",
    "mentorship",
    "ratings",
    "reputation",
]
