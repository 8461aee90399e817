"""
configwatch - polling AI configuration cache with an HTTP display
"""

__version__ = "1.0.0"
