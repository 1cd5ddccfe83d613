"""
Shared utilities for cvsmith.

Common functionality used across contexts:
- Logging and pipeline event logging
- Configuration loading
- Timestamps and date arithmetic
- Text-generation service access
"""

from cvsmith.utils.timestamp import months_between, now, now_exact, to_date

__all__ = ["months_between", "now", "now_exact", "to_date"]
