"""
Core Package

This package contains the core algorithmic logic for the tidepool client.

Structure:
- tiling.py - Coordinate to coarse grid cell mapping
- presence/ - Home hysteresis gate and jittered, throttled tile reporter
- interest/ - Tag aggregation, interest vectors and similarity
- heat/ - Convex hull, viewport projection and heat blob compositing
"""
