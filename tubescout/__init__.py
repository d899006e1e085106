"""
TubeScout
Query-expanded YouTube search with comment enrichment
"""

__version__ = "0.1.0"
