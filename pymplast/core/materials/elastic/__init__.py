# 文件: pymplast/core/materials/elastic/__init__.py
"""
弹性律模块

提供:
- LinearIsotropic3D: 各向同性线弹性
"""

from .isotropic import LinearIsotropic3D

__all__ = ['LinearIsotropic3D']
