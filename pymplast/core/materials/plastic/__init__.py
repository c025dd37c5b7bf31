# 文件: pymplast/core/materials/plastic/__init__.py
"""
塑性模型组件模块

提供塑性本构的核心组件:
- 屈服函数 (yield_functions): VonMises, DruckerPrager
- 流动方向 (flow_rules): VonMisesFlow, DruckerPragerFlow
- 内变量 (hardening): LinearHardeningTensor, LinearHardeningScalar,
  ArmstrongFrederickTensor, InternalVariables
- 返回映射 (return_mapping): ReturnMappingEngine
"""

from .yield_functions import VonMises, DruckerPrager
from .flow_rules import VonMisesFlow, DruckerPragerFlow
from .hardening import (
    LinearHardeningTensor,
    LinearHardeningScalar,
    ArmstrongFrederickTensor,
    InternalVariables,
)
from .return_mapping import ReturnMappingEngine, DEFAULT_INTEGRATION_OPTIONS

__all__ = [
    # 屈服函数
    'VonMises',
    'DruckerPrager',

    # 流动方向
    'VonMisesFlow',
    'DruckerPragerFlow',

    # 内变量
    'LinearHardeningTensor',
    'LinearHardeningScalar',
    'ArmstrongFrederickTensor',
    'InternalVariables',

    # 返回映射
    'ReturnMappingEngine',
    'DEFAULT_INTEGRATION_OPTIONS',
]
