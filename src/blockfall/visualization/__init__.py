"""Rendering for blockfall: numpy rasters and the pygame front end."""

from .raster import BACKGROUND, COLOR_RGB, compose, rasterize, rgb_for

__all__ = ["BACKGROUND", "COLOR_RGB", "compose", "rasterize", "rgb_for"]
