"""
Processor and modifier sets that can be registered on a model.
"""

from .builtin import DEFAULT_PROCESSORS, DEFAULT_MODIFIERS
from .case import CASE_PROCESSORS

__all__ = [
    'DEFAULT_PROCESSORS',
    'DEFAULT_MODIFIERS',
    'CASE_PROCESSORS',
]
