"""
RoadGuard translation layer.

Client-side translation cache and coordination for the RoadGuard
roadside-assistance app.
"""

__version__ = "0.1.0"
