"""
DisasterAlert - emergency incident reporting with location and photo enrichment.
"""

__version__ = "1.0.0"
