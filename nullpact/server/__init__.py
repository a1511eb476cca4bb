"""nullpact FastAPI Server"""
from .client import NullpactClient

__all__ = ['NullpactClient']
