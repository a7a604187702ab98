"""Service layer for fftsweep.

Services wrap the core pipeline and return ServiceResult objects so the
CLI can report outcomes consistently.
"""

from fftsweep.services.base import BaseService, BatchProgress, ServiceResult
from fftsweep.services.sweep import SweepService

__all__ = [
    "BaseService",
    "BatchProgress",
    "ServiceResult",
    "SweepService",
]
