"""
Template Studio core — resolve wizard selections into generation plans.
"""

__version__ = "0.1.0"
