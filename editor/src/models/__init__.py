"""
Brand Kit Editor - Data Models

This module contains the data model classes for brand kits.
This is the MODEL in MVC architecture.

Public API: BrandElement, ElementType, BrandKitConfig, TransformSession,
Vec2, Transform
"""

from .transform import Vec2, Transform
from .brand_element import BrandElement, ElementType
from .brand_kit import BrandKitConfig
from .session import TransformSession

__all__ = ['Vec2', 'Transform', 'BrandElement', 'ElementType', 'BrandKitConfig', 'TransformSession']
