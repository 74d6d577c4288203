"""
cspgen - Content-Security-Policy generator driven by a headless browser crawl
"""

__version__ = "0.1.0"
