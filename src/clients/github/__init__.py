from .client import ContentsClient

__all__ = ["ContentsClient"]
