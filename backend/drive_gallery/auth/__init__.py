"""
Service account credential loading.
"""
