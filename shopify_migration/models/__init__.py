"""
Typed views over the loosely shaped GraphQL records that need exhaustive
matching (files) or rebuilding (menus).
"""

from .files import GenericFile, ImageSource, MediaImage, StoreFile, parse_file
from .menus import Menu, MenuItem

__all__ = ["GenericFile", "ImageSource", "MediaImage", "StoreFile", "parse_file", "Menu", "MenuItem"]
