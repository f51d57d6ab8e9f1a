"""
Integration layer: collaborator interfaces, engine shell, signed calls
"""

from .price_feed import CumulativePricePool, ManualClock, PoolRegistry
from .reserve_engine import InMemoryDeployment, ReserveEngine, deploy_in_memory

__all__ = [
    "CumulativePricePool",
    "ManualClock",
    "PoolRegistry",
    "InMemoryDeployment",
    "ReserveEngine",
    "deploy_in_memory",
]
