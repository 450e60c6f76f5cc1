"""
hail-sync: synchronizes Hail content (articles, images, videos, tags) into a local database.
"""

__version__ = "1.0.0"
