"""
Content slots: grid-positioned components with per-slot options.
"""

__version__ = "1.0.0"
