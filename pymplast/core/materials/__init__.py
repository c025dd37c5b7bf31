# 文件: pymplast/core/materials/__init__.py
"""
PyMPlast 材料系统

分层架构:
- interfaces.py: 抽象基类、协议和 Voigt 辅助函数
- errors.py: 异常层次
- parameters.py: 不可变本构参数
- state.py: 材料状态管理 (committed / trial)
- elastic/: 弹性律
- plastic/: 塑性组件 (屈服函数、流动方向、内变量、返回映射)
- models/: 预置材料模型
- factory.py: 材料工厂

使用方法:
    from pymplast.core.materials import MaterialFactory

    # 创建材料
    mat = MaterialFactory.create_von_mises_linear_hardening(
        tag=1, k0=10.0, H_alpha=0.0, H_k=1000.0, E=30000.0, nu=0.25, rho=1.0
    )

    # 计算试探应力
    result = mat.set_trial_strain([1e-3, 0, 0, 0, 0, 0])
    print(result.stress)       # 应力 Voigt 向量
    print(result.tangent)      # 一致切线模量
    print(result.is_plastic)   # 是否塑性

    # 接受或放弃
    mat.commit_state()

扩展指南:
    添加新屈服准则:
        1. 在 plastic/yield_functions.py 添加新类
        2. 实现 evaluate()、gradient() 和 gradient_vars()

    添加新流动方向:
        1. 在 plastic/flow_rules.py 添加新类
        2. 实现 direction()、derivative() 和 derivative_vars()

    添加新硬化规律:
        1. 在 plastic/hardening.py 添加新演化律
        2. 实现 rate()、rate_derivative_direction() 和 rate_derivative_self()

    添加新材料模型:
        1. 在 models/ 目录添加新文件
        2. 继承 PlasticMaterial，选择组件并实现 from_parameters()
        3. 在 models/__init__.py 的 MODEL_REGISTRY 中登记
"""

# 核心接口
from .interfaces import (
    Material,
    StressResult,
    ElasticityLaw,
    YieldFunction,
    PlasticFlowDirection,
    EvolutionLaw,
    tensor_to_voigt,
    voigt_to_tensor,
    stress_to_tensor,
)

# 异常
from .errors import (
    PlasticityError,
    ConfigurationError,
    InvalidStateError,
    IntegrationError,
    NonConvergenceError,
    SingularJacobianError,
    NegativeMultiplierError,
)

# 参数
from .parameters import ConstitutiveParameters

# 弹性组件
from .elastic import LinearIsotropic3D

# 塑性组件
from .plastic import (
    VonMises,
    DruckerPrager,
    VonMisesFlow,
    DruckerPragerFlow,
    LinearHardeningTensor,
    LinearHardeningScalar,
    ArmstrongFrederickTensor,
    InternalVariables,
    ReturnMappingEngine,
    DEFAULT_INTEGRATION_OPTIONS,
)

# 状态管理
from .state import PlasticState, MaterialState

# 预置模型
from .models import (
    PlasticMaterial,
    VonMisesLinearHardening,
    VonMisesArmstrongFrederick,
    DruckerPragerLinearHardening,
)

# 工厂
from .factory import MaterialFactory


__all__ = [
    # 核心接口
    'Material',
    'StressResult',
    'ElasticityLaw',
    'YieldFunction',
    'PlasticFlowDirection',
    'EvolutionLaw',

    # 辅助函数
    'tensor_to_voigt',
    'voigt_to_tensor',
    'stress_to_tensor',

    # 异常
    'PlasticityError',
    'ConfigurationError',
    'InvalidStateError',
    'IntegrationError',
    'NonConvergenceError',
    'SingularJacobianError',
    'NegativeMultiplierError',

    # 参数与状态
    'ConstitutiveParameters',
    'PlasticState',
    'MaterialState',

    # 弹性组件
    'LinearIsotropic3D',

    # 塑性组件
    'VonMises',
    'DruckerPrager',
    'VonMisesFlow',
    'DruckerPragerFlow',
    'LinearHardeningTensor',
    'LinearHardeningScalar',
    'ArmstrongFrederickTensor',
    'InternalVariables',
    'ReturnMappingEngine',
    'DEFAULT_INTEGRATION_OPTIONS',

    # 预置模型
    'PlasticMaterial',
    'VonMisesLinearHardening',
    'VonMisesArmstrongFrederick',
    'DruckerPragerLinearHardening',

    # 工厂
    'MaterialFactory',
]
