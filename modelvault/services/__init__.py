"""
Use-case services composed from the kernel.
"""

from modelvault.services.lifecycle_service import ModelLifecycleService, sanitize_model_create

__all__ = ["ModelLifecycleService", "sanitize_model_create"]
