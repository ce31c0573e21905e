"""
FavTube - Utilities
"""
