"""Landify API - AI-generated landing pages for local businesses"""

__version__ = "0.1.0"
