"""
photoshelf - Object-storage photo catalog and gallery server

Two processes share one JSON snapshot:
- The catalog builder lists an S3-compatible bucket and groups image keys by folder
- The gallery server serves CDN thumbnail URLs, on-demand EXIF data and
  server-sent notifications
"""

__version__ = "0.1.0"
__author__ = "photoshelf"
__description__ = "Object-storage photo catalog and gallery server"
