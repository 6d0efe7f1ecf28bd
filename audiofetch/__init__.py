"""
audiofetch - Media-to-audio conversion service.

Takes a URL or search query, probes it with yt-dlp, and publishes an audio
rendition to object storage through a short pipeline: binary resolution →
metadata probe → duration gate → extraction/transcode → publish.
"""

__version__ = "0.1.0"
