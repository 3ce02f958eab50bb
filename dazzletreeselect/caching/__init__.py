"""Caching layer for DazzleTreeSelect resolutions."""

from .resolution_cache import IdentityKey, Resolution, ResolutionCache

__all__ = ['IdentityKey', 'Resolution', 'ResolutionCache']
