"""
probectl - command line client for siteprobe
"""

__version__ = "0.1.0"
