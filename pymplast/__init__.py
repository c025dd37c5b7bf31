# 文件: pymplast/__init__.py
"""
PyMPlast: 小变形弹塑性本构积分库

- core.materials: 材料点、返回映射引擎、材料工厂
- solver: 应变路径驱动器
"""

__version__ = "0.1.0"
