"""Paper Engine - local document search backed by an in-process TF-IDF index"""

__version__ = "0.1.0"
