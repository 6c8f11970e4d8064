"""
Utility functions for flexidate.

This package contains:
- datetime_utils: Calendar validity, field rollover, offset and zone names
- date_patterns: Pattern engine (tokenize, render, strict parse)
- granularity: Granularity model and pattern limiting
- calendar_utils: Week numbering, day counts, option lists
- translation_utils: Babel locale lookups and the name translation hook
"""
