# 文件: pymplast/core/materials/errors.py
"""
材料系统异常定义

层次结构:
    PlasticityError
    ├── ConfigurationError      构造参数非法 (同时是 ValueError)
    ├── InvalidStateError       违反 trial/commit 协议
    └── IntegrationError        局部积分失败，调用方可细分应变增量重试
        ├── NonConvergenceError
        ├── SingularJacobianError
        └── NegativeMultiplierError
"""


class PlasticityError(Exception):
    """材料系统所有异常的基类"""


class ConfigurationError(PlasticityError, ValueError):
    """材料参数或积分选项非法，在构造时抛出"""


class InvalidStateError(PlasticityError, RuntimeError):
    """
    状态协议错误

    例如在没有 trial 状态时调用 commit() 或 revert_to_last_commit()。
    """


class IntegrationError(PlasticityError, RuntimeError):
    """返回映射失败的基类"""


class NonConvergenceError(IntegrationError):
    """
    局部 Newton 迭代在最大迭代次数内未收敛

    Attributes:
        iterations: 已执行的迭代次数
        residual: 最后一次的残差范数
    """

    def __init__(self, message: str, iterations: int = 0, residual: float = float('nan')):
        super().__init__(message)
        self.iterations = iterations
        self.residual = residual


class SingularJacobianError(IntegrationError):
    """局部 Jacobian 奇异或病态 (如屈服面尖点)"""


class NegativeMultiplierError(IntegrationError):
    """收敛后塑性乘子为负，说明模型或容差设置有问题"""

    def __init__(self, message: str, multiplier: float):
        super().__init__(message)
        self.multiplier = multiplier
