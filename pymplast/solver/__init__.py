# 文件: pymplast/solver/__init__.py
"""
材料点驱动器
"""

from .strain_driver import StrainDriver, StrainPathResult, uniaxial_strain_path, cyclic_strain_path

__all__ = ['StrainDriver', 'StrainPathResult', 'uniaxial_strain_path', 'cyclic_strain_path']
