# 文件: pymplast/core/materials/plastic/flow_rules.py
"""
塑性流动方向模块

提供:
- VonMisesFlow: 偏量流动 m = ∂q/∂σ
- DruckerPragerFlow: 带剪胀的流动，剪胀系数与摩擦系数不同时为非关联流动

流动方向给出塑性应变增量 Δεp = Δλ m (工程 Voigt)，
约定偏量部分满足 √(2/3 m:m) = 1，即 Δλ 等于等效塑性应变增量 (纯偏量时)。

返回映射不假设 m = ∂f/∂σ。
"""

import numpy as np
from typing import Dict, Optional

from ..interfaces import DEV_PROJECTOR, IDENTITY_VOIGT, VOIGT_WEIGHTS
from .yield_functions import Q_TINY, deviatoric_normal, relative_deviator

# W @ P，∂m/∂σ 的常数部分
_WP = np.diag(VOIGT_WEIGHTS) @ DEV_PROJECTOR


def _deviatoric_hessian(q: float, n: np.ndarray) -> np.ndarray:
    """
    ∂n/∂σ，n = (3/2) W ξ / q

    ∂n/∂σ = (3/2q) W P - (n ⊗ n) / q
    """
    if q < Q_TINY:
        return np.zeros((6, 6))
    return 1.5 * _WP / q - np.outer(n, n) / q


class VonMisesFlow:
    """
    Von Mises 流动 (J2)

    m = (3/2) W ξ / q，ξ = dev(σ - α)

    与 VonMises 屈服函数配合时为关联流动，但这由具体模型选择决定。
    """

    def __init__(self, backstress: Optional[str] = 'alpha'):
        self.backstress = backstress

    def direction(self, stress: np.ndarray, internal_variables) -> np.ndarray:
        xi = relative_deviator(stress, internal_variables, self.backstress)
        _, n = deviatoric_normal(xi)
        return n

    def derivative(self, stress: np.ndarray, internal_variables) -> np.ndarray:
        xi = relative_deviator(stress, internal_variables, self.backstress)
        q, n = deviatoric_normal(xi)
        return _deviatoric_hessian(q, n)

    def derivative_vars(self, stress: np.ndarray, internal_variables) -> Dict[str, np.ndarray]:
        # ξ 依赖 σ - α，所以 ∂m/∂α = -∂m/∂σ
        if self.backstress is None or self.backstress not in internal_variables:
            return {}
        return {self.backstress: -self.derivative(stress, internal_variables)}

    def __repr__(self) -> str:
        return f"VonMisesFlow(backstress={self.backstress!r})"


class DruckerPragerFlow:
    """
    Drucker-Prager 塑性势流动

    m = (3/2) W ξ / q + β/3 · 1

    β 为剪胀系数。β 等于屈服函数的摩擦系数 η 时为关联流动，
    β < η 可避免关联 Drucker-Prager 的过度剪胀。
    """

    def __init__(self, dilatancy: float, backstress: Optional[str] = 'alpha'):
        self.dilatancy = float(dilatancy)
        self.backstress = backstress

    def direction(self, stress: np.ndarray, internal_variables) -> np.ndarray:
        xi = relative_deviator(stress, internal_variables, self.backstress)
        _, n = deviatoric_normal(xi)
        return n + (self.dilatancy / 3.0) * IDENTITY_VOIGT

    def derivative(self, stress: np.ndarray, internal_variables) -> np.ndarray:
        # 体积部分为常数
        xi = relative_deviator(stress, internal_variables, self.backstress)
        q, n = deviatoric_normal(xi)
        return _deviatoric_hessian(q, n)

    def derivative_vars(self, stress: np.ndarray, internal_variables) -> Dict[str, np.ndarray]:
        if self.backstress is None or self.backstress not in internal_variables:
            return {}
        return {self.backstress: -self.derivative(stress, internal_variables)}

    def __repr__(self) -> str:
        return f"DruckerPragerFlow(dilatancy={self.dilatancy:.4g}, backstress={self.backstress!r})"
