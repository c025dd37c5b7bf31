# 文件: pymplast/core/materials/models/__init__.py
"""
预置材料模型

提供组装好的、可直接使用的材料模型:
- PlasticMaterial: 通用组合式弹塑性材料点
- VonMisesLinearHardening: Von Mises + 线性混合硬化
- VonMisesArmstrongFrederick: Von Mises + 非线性随动硬化
- DruckerPragerLinearHardening: Drucker-Prager (可非关联) + 线性混合硬化
"""

from .plastic_material import PlasticMaterial
from .von_mises import VonMisesLinearHardening, VonMisesArmstrongFrederick
from .drucker_prager import DruckerPragerLinearHardening

# 模型名 → 类，供工厂与反序列化使用
MODEL_REGISTRY = {
    cls.model_name: cls
    for cls in (VonMisesLinearHardening, VonMisesArmstrongFrederick, DruckerPragerLinearHardening)
}

__all__ = [
    'PlasticMaterial',
    'VonMisesLinearHardening',
    'VonMisesArmstrongFrederick',
    'DruckerPragerLinearHardening',
    'MODEL_REGISTRY',
]
