"""
Rate Desk - margin and client rate calculator for onshore / offshore /
nearshore staffing.
"""

__version__ = "1.0.0"
