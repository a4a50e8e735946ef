"""
ModelVault - shared model file storage with per-user permissions.
"""

__version__ = "1.0.0"
