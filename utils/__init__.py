"""
Utility modules for the print desk.
"""

from .config import Config

__all__ = ["Config"]
