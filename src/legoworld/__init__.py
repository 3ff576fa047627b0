"""
legoworld - Aiden's Lego World media gallery

A Streamlit application for showcasing Lego creations with features including:
- Photo and video upload to Cloudinary
- Creation metadata persisted in Supabase
- Local DuckDB cache used as an offline fallback
- Admin-only editing, public browsing
"""

__version__ = "0.1.0"
__author__ = "legoworld"
__description__ = "Media gallery for Lego creations with Streamlit"
