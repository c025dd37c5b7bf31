# 文件: pymplast/core/__init__.py
"""
PyMPlast 核心模块

导出材料系统的常用类
"""

# ==============================================================================
# 材料系统
# ==============================================================================
from pymplast.core.materials import (
    # 核心接口
    Material,
    StressResult,

    # 状态
    PlasticState,
    MaterialState,

    # 工厂
    MaterialFactory,

    # 预置模型
    PlasticMaterial,
    VonMisesLinearHardening,
    VonMisesArmstrongFrederick,
    DruckerPragerLinearHardening,

    # 异常
    PlasticityError,
    IntegrationError,

    # 辅助函数
    tensor_to_voigt,
    voigt_to_tensor,
)


__all__ = [
    'Material',
    'StressResult',
    'PlasticState',
    'MaterialState',
    'MaterialFactory',
    'PlasticMaterial',
    'VonMisesLinearHardening',
    'VonMisesArmstrongFrederick',
    'DruckerPragerLinearHardening',
    'PlasticityError',
    'IntegrationError',
    'tensor_to_voigt',
    'voigt_to_tensor',
]
