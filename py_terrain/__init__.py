"""
Procedural noise terrain with constrained scatter placement.
"""

__version__ = "0.1.0"
