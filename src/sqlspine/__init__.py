"""
sqlspine - schema-agnostic record access across SQL dialects.

Re-exports the public API of ``sqlspine.core``.
"""

__version__ = "0.1.0"

from sqlspine.core import *  # noqa
