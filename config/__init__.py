"""
Configuration package.

Usage:
    from config.settings import WHIP_INGEST_URL
"""
