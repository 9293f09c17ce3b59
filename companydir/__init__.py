"""
Local persistent company directory with materialized statistics.
"""

__version__ = "0.3.0"
