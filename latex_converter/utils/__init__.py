"""
Shared utilities for latex_converter.

Common functionality used across contexts:
- Logger setup
- Plugin settings
- Timestamps
- PDF inspection
"""

from latex_converter.utils.timestamp import now, now_exact

__all__ = ["now", "now_exact"]
