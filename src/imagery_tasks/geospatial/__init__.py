"""
Geospatial helpers for raster processing.

This module contains:
- GDAL resampling method validation
- GDAL command construction (gdal_translate, gdalwarp, gdalbuildvrt)
"""
