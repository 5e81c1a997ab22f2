"""
Settings synchronization with a GitHub Gist.
"""

__version__ = "0.1.0"
