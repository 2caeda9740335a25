"""Core data model for the GLIDE pipeline.

- volume: (t, y, x) xarray volumes and frame normalization
- growth_line: Point, LineFrame and GrowthLine track types
"""

from glide.core.growth_line import Point, LineFrame, GrowthLine
from glide.core.volume import make_volume, replace_data, volume_size, normalize_frames

__all__ = [
    'Point',
    'LineFrame',
    'GrowthLine',
    'make_volume',
    'replace_data',
    'volume_size',
    'normalize_frames',
]
