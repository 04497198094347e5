"""
Drive Gallery API - lists and streams images from a Google Drive folder.
"""
__version__ = "0.1.0"
