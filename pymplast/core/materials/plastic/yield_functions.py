# 文件: pymplast/core/materials/plastic/yield_functions.py
"""
屈服函数模块

提供各种屈服准则:
- VonMises: Von Mises (J2) 屈服准则，带背应力
- DruckerPrager: Drucker-Prager 屈服准则，带背应力

屈服函数是纯函数：内变量 (背应力 α、屈服半径 k) 在调用时显式传入，
对象只保存内变量的名称和材料常数。

扩展指南:
    要添加新的屈服函数，只需创建一个类实现以下方法:
    - evaluate(stress, internal_variables) -> float
    - gradient(stress, internal_variables) -> np.ndarray (6,)
    - gradient_vars(stress, internal_variables) -> {name: derivative}
    有尖点/锥顶的屈服面还可实现 (可选):
    - crosses_vertex(stress, internal_variables, reference_stress, reference_variables) -> bool
"""

import numpy as np
from typing import Dict, Optional, Tuple

from ..interfaces import DEV_PROJECTOR, IDENTITY_VOIGT, VOIGT_WEIGHTS, von_mises

# q 低于该值时视为位于偏平面原点 (尖点)，偏量梯度取 0
Q_TINY = 1e-12


def relative_deviator(stress: np.ndarray, internal_variables, backstress: Optional[str]) -> np.ndarray:
    """
    相对偏应力 ξ = dev(σ - α)

    backstress 为 None 或容器中没有该内变量时 α = 0。
    """
    if backstress is not None and backstress in internal_variables:
        return DEV_PROJECTOR @ (stress - internal_variables[backstress])
    return DEV_PROJECTOR @ stress


def deviatoric_normal(xi: np.ndarray) -> Tuple[float, np.ndarray]:
    """
    Von Mises 等效值及其梯度

    Args:
        xi: 相对偏应力 (张量分量 Voigt)

    Returns:
        q: √(3/2 ξ:ξ)
        n: ∂q/∂σ = (3/2) W ξ / q (工程 Voigt)，q < Q_TINY 时为零向量
    """
    q = von_mises(xi)
    if q < Q_TINY:
        return q, np.zeros(6)
    return q, 1.5 * VOIGT_WEIGHTS * xi / q


def deviator_reversed(xi: np.ndarray, xi_reference: np.ndarray) -> bool:
    """
    ξ 与参考 ξ_ref 是否反向 (ξ : ξ_ref < 0)

    从 ξ_ref 连续走到 ξ 必然经过偏平面原点，即屈服面的尖点/锥顶。
    ξ_ref = 0 时返回 False。
    """
    return float(xi @ (VOIGT_WEIGHTS * xi_reference)) < 0.0


class VonMises:
    """
    Von Mises (J2) 屈服准则

    屈服函数: f = q(ξ) - k
    其中 ξ = dev(σ - α)，q = √(3/2 ξ:ξ)

    适用于金属材料。单轴应力下 f = |σ - α_xx·3/2| - k。

    Example:
        yf = VonMises()
        f = yf.evaluate(stress, internal_variables)
        if f > 0:
            n = yf.gradient(stress, internal_variables)
    """

    def __init__(self, backstress: Optional[str] = 'alpha', radius: str = 'k'):
        """
        Args:
            backstress: 背应力内变量名 (None 表示无随动硬化)
            radius: 屈服半径内变量名
        """
        self.backstress = backstress
        self.radius = radius

    def evaluate(self, stress: np.ndarray, internal_variables) -> float:
        """
        计算屈服函数值

        Returns:
            f <= 0: 弹性状态
            f > 0: 需要塑性修正
        """
        xi = relative_deviator(stress, internal_variables, self.backstress)
        return von_mises(xi) - internal_variables[self.radius]

    def gradient(self, stress: np.ndarray, internal_variables) -> np.ndarray:
        """
        屈服函数对应力的梯度

        n = ∂f/∂σ = (3/2) W ξ / q

        剪切分量带因子 2，使得 df = n · dσ (σ 为 Voigt 独立分量)。
        """
        xi = relative_deviator(stress, internal_variables, self.backstress)
        _, n = deviatoric_normal(xi)
        return n

    def gradient_vars(self, stress: np.ndarray, internal_variables) -> Dict[str, np.ndarray]:
        """∂f/∂α = -n, ∂f/∂k = -1"""
        derivatives = {self.radius: np.array([-1.0])}
        if self.backstress is not None and self.backstress in internal_variables:
            derivatives[self.backstress] = -self.gradient(stress, internal_variables)
        return derivatives

    def crosses_vertex(self, stress, internal_variables, reference_stress, reference_variables) -> bool:
        """相对偏应力相对参考点反向，见 deviator_reversed"""
        return deviator_reversed(
            relative_deviator(stress, internal_variables, self.backstress),
            relative_deviator(reference_stress, reference_variables, self.backstress),
        )

    @staticmethod
    def equivalent_stress(stress: np.ndarray) -> float:
        """
        Von Mises 等效应力 (无背应力)

        σ_eq = √(3/2 s:s) = √(3 J2)
        """
        return von_mises(DEV_PROJECTOR @ stress)

    def __repr__(self) -> str:
        return f"VonMises(backstress={self.backstress!r}, radius={self.radius!r})"


class DruckerPrager:
    """
    Drucker-Prager 屈服准则

    屈服函数: f = q(ξ) + η · tr(σ)/3 - k

    拉为正：静水压 (tr σ < 0) 提高剪切强度。适用于岩土材料。
    在锥顶 (q → 0) 处不可微，此时偏量梯度取 0。
    纯静水试探应力 (ξ_tr = 0) 沿体积方向返回到锥顶；
    其余需要越过锥顶的返回由 crosses_vertex 识别，
    返回映射报告 SingularJacobianError。

    Attributes:
        friction: 摩擦系数 η (>= 0)
    """

    def __init__(self, friction: float, backstress: Optional[str] = 'alpha', radius: str = 'k'):
        """
        Args:
            friction: 摩擦系数 η，控制围压敏感性
            backstress: 背应力内变量名
            radius: 屈服半径 (内聚力相关) 内变量名
        """
        self.friction = float(friction)
        self.backstress = backstress
        self.radius = radius

    def evaluate(self, stress: np.ndarray, internal_variables) -> float:
        """计算屈服函数值"""
        xi = relative_deviator(stress, internal_variables, self.backstress)
        mean = (stress[0] + stress[1] + stress[2]) / 3.0
        return von_mises(xi) + self.friction * mean - internal_variables[self.radius]

    def gradient(self, stress: np.ndarray, internal_variables) -> np.ndarray:
        """n = (3/2) W ξ / q + η/3 · 1"""
        xi = relative_deviator(stress, internal_variables, self.backstress)
        _, n_dev = deviatoric_normal(xi)
        return n_dev + (self.friction / 3.0) * IDENTITY_VOIGT

    def gradient_vars(self, stress: np.ndarray, internal_variables) -> Dict[str, np.ndarray]:
        """∂f/∂α = -n_dev, ∂f/∂k = -1"""
        derivatives = {self.radius: np.array([-1.0])}
        if self.backstress is not None and self.backstress in internal_variables:
            xi = relative_deviator(stress, internal_variables, self.backstress)
            _, n_dev = deviatoric_normal(xi)
            derivatives[self.backstress] = -n_dev
        return derivatives

    def crosses_vertex(self, stress, internal_variables, reference_stress, reference_variables) -> bool:
        """
        偏应力相对参考点反向，即经过锥顶

        试探应力靠近锥顶时，锥面返回所需的偏量修正 3GΔλ 超过 q_tr，
        Newton 迭代点会越过锥顶，锥面上不存在解。
        """
        return deviator_reversed(
            relative_deviator(stress, internal_variables, self.backstress),
            relative_deviator(reference_stress, reference_variables, self.backstress),
        )

    def __repr__(self) -> str:
        return f"DruckerPrager(friction={self.friction:.4g}, backstress={self.backstress!r}, radius={self.radius!r})"
