"""
Configuration modules for terrain generation.
"""

from .config import settings, Settings
from .terrain_config import (
    DebugDrawSettings,
    FlattenRegion,
    GridConfig,
    SlabSettings,
    TerrainSettings,
    WaterSettings,
)

__all__ = ['settings', 'Settings', 'DebugDrawSettings', 'FlattenRegion', 'GridConfig',
           'SlabSettings', 'TerrainSettings', 'WaterSettings']
