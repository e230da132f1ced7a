"""
Rotate Dir Utility

Утилита для переноса устаревших записей каталога в историю по датам (YYYY-MM-DD).
"""

__version__ = "1.0.0"
__author__ = "Rotate Dir Team"
__description__ = "Utility for archiving stale directory entries into a date-based history tree"
