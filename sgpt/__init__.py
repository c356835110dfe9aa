"""sgpt - pipe text through hosted language models"""

__version__ = "0.2.0"
