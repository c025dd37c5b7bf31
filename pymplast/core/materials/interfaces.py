# 文件: pymplast/core/materials/interfaces.py
"""
材料系统核心接口定义

设计原则:
1. Material: 材料点的抽象基类，定义嵌入求解器所需的统一接口
   (set_trial_strain / commit_state / revert_to_last_commit ...)
2. StressResult: 标准化的返回映射结果
3. Protocol: 四个扩展点 (弹性律、屈服函数、塑性流动方向、内变量演化律)，
   使用鸭子类型实现松耦合

Voigt 约定:
    应力: [σxx, σyy, σzz, σyz, σxz, σxy]      (张量分量)
    应变: [εxx, εyy, εzz, γyz, γxz, γxy]      (工程剪应变 γ = 2ε)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Optional, Protocol, Tuple, runtime_checkable
import numpy as np

if TYPE_CHECKING:
    from .plastic.hardening import InternalVariables
    from .state import PlasticState


@dataclass
class StressResult:
    """
    统一的应力积分结果

    Attributes:
        stress: 应力 Voigt 向量 (6,)
        tangent: 一致切线模量 (6,6)
        state: 积分后的材料点快照 (PlasticState)
        is_plastic: 本增量是否发生塑性流动
        plastic_multiplier: 塑性乘子增量 Δλ (弹性步为 0)
        iterations: 局部 Newton 迭代次数 (弹性步为 0)
        yield_value: 最终应力处的屈服函数值
    """
    stress: np.ndarray
    tangent: np.ndarray
    state: Optional['PlasticState'] = None
    is_plastic: bool = False
    plastic_multiplier: float = 0.0
    iterations: int = 0
    yield_value: float = 0.0


class Material(ABC):
    """
    材料点抽象基类

    嵌入的有限元求解器只通过这些方法与材料交互:
    - set_trial_strain(): 计算试探状态
    - commit_state() / revert_to_last_commit() / revert_to_start(): 状态协议
    - get_stress() / get_tangent(): 读取结果
    - get_copy(): 为新的积分点创建独立副本

    Example:
        mat = VonMisesLinearHardening(1, k0=10.0, H_alpha=0.0, H_k=1000.0,
                                      E=30000.0, nu=0.25, rho=1.0)
        mat.set_trial_strain(strain)
        sigma = mat.get_stress()
        mat.commit_state()
    """

    @abstractmethod
    def set_trial_strain(self, strain: np.ndarray) -> StressResult:
        """
        以已提交状态为起点积分到给定的总应变

        Args:
            strain: 总应变 Voigt 向量 (6,) 或对称张量 (3,3)

        Returns:
            StressResult: 试探状态的应力、切线等
        """
        pass

    @abstractmethod
    def get_stress(self) -> np.ndarray:
        """当前 (试探或已提交) 应力 (6,)"""
        pass

    @abstractmethod
    def get_tangent(self) -> np.ndarray:
        """当前一致切线模量 (6,6)"""
        pass

    @abstractmethod
    def commit_state(self) -> None:
        """试探状态成为已提交状态"""
        pass

    @abstractmethod
    def revert_to_last_commit(self) -> None:
        """丢弃试探状态"""
        pass

    @abstractmethod
    def revert_to_start(self) -> None:
        """回到初始 (ground) 状态"""
        pass

    @abstractmethod
    def get_copy(self) -> 'Material':
        """返回独立的深拷贝"""
        pass


# =============================================================================
# 组件协议 (Protocol for duck typing)
# 屈服函数和流动方向是纯函数：内变量作为参数显式传入，组件本身不持有状态
# =============================================================================

@runtime_checkable
class ElasticityLaw(Protocol):
    """
    弹性律协议

    - compute_stress(): σ = D : εe
    - D: 弹性刚度 (6,6)
    - compliance: 柔度 D⁻¹ (6,6)，修正步使用应变形式的残差
    """

    @property
    def D(self) -> np.ndarray:
        ...

    @property
    def compliance(self) -> np.ndarray:
        ...

    def compute_stress(self, strain_voigt: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        ...


@runtime_checkable
class YieldFunction(Protocol):
    """
    屈服函数协议

    f(σ, q) <= 0 为容许应力区域。
    """

    def evaluate(self, stress: np.ndarray, internal_variables: 'InternalVariables') -> float:
        """屈服函数值"""
        ...

    def gradient(self, stress: np.ndarray, internal_variables: 'InternalVariables') -> np.ndarray:
        """∂f/∂σ (6,)，满足 df = gradient · dσ"""
        ...

    def gradient_vars(
        self, stress: np.ndarray, internal_variables: 'InternalVariables'
    ) -> Mapping[str, np.ndarray]:
        """∂f/∂q，按内变量名返回，缺省的内变量视为 0"""
        ...


@runtime_checkable
class PlasticFlowDirection(Protocol):
    """
    塑性流动方向协议

    Δεp = Δλ m，m 为工程 Voigt 向量。可以与屈服函数梯度不同 (非关联流动)。
    """

    def direction(self, stress: np.ndarray, internal_variables: 'InternalVariables') -> np.ndarray:
        """m (6,)"""
        ...

    def derivative(self, stress: np.ndarray, internal_variables: 'InternalVariables') -> np.ndarray:
        """∂m/∂σ (6,6)"""
        ...

    def derivative_vars(
        self, stress: np.ndarray, internal_variables: 'InternalVariables'
    ) -> Mapping[str, np.ndarray]:
        """∂m/∂q，按内变量名返回 (6, size)"""
        ...


@runtime_checkable
class EvolutionLaw(Protocol):
    """
    内变量演化律协议

    q_{n+1} = q_n + Δλ h(m, q_{n+1})
    """

    name: str
    size: int

    @property
    def initial_value(self) -> np.ndarray:
        ...

    def rate(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        """演化率 h (size,)"""
        ...

    def rate_derivative_direction(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        """∂h/∂m (size, 6)"""
        ...

    def rate_derivative_self(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        """∂h/∂q (size, size)"""
        ...


# =============================================================================
# Voigt 常量
# =============================================================================

# 工程应变与张量分量之间的权重: ||s||² = s · (W s)
VOIGT_WEIGHTS = np.array([1.0, 1.0, 1.0, 2.0, 2.0, 2.0])

# 二阶单位张量 (Voigt)
IDENTITY_VOIGT = np.array([1.0, 1.0, 1.0, 0.0, 0.0, 0.0])

# 偏应力投影 (应力空间): dev(σ) = P @ σ
DEV_PROJECTOR = np.eye(6) - np.outer(IDENTITY_VOIGT, IDENTITY_VOIGT) / 3.0


# =============================================================================
# 辅助函数
# =============================================================================

def tensor_to_voigt(T: np.ndarray, engineering: bool = True) -> np.ndarray:
    """
    将 3x3 对称张量转换为 Voigt 向量

    Args:
        T: 对称张量 (3,3)
        engineering: True 返回工程形式 [T11,T22,T33,2T23,2T13,2T12]
                    False 返回张量形式 [T11,T22,T33,T23,T13,T12]
    """
    factor = 2.0 if engineering else 1.0
    return np.array([
        T[0, 0], T[1, 1], T[2, 2],
        factor * T[1, 2], factor * T[0, 2], factor * T[0, 1]
    ])


def voigt_to_tensor(v: np.ndarray, engineering: bool = True) -> np.ndarray:
    """
    将 Voigt 向量转换为 3x3 对称张量

    Args:
        v: Voigt 向量 (6,)
        engineering: True 输入为工程形式，False 输入为张量形式
    """
    factor = 0.5 if engineering else 1.0
    return np.array([
        [v[0], factor * v[5], factor * v[4]],
        [factor * v[5], v[1], factor * v[3]],
        [factor * v[4], factor * v[3], v[2]]
    ])


def stress_to_tensor(s: np.ndarray) -> np.ndarray:
    """将应力 Voigt 向量转换为 3x3 张量 (应力不需要因子)"""
    return voigt_to_tensor(s, engineering=False)


def as_strain_voigt(strain) -> np.ndarray:
    """
    规范化应变输入

    接受 Voigt 向量 (6,) 或对称张量 (3,3)，返回 float 类型的工程 Voigt 向量副本。
    """
    strain = np.asarray(strain, dtype=float)
    if strain.shape == (3, 3):
        return tensor_to_voigt(strain, engineering=True)
    if strain.shape != (6,):
        raise ValueError(f"Strain must have shape (6,) or (3, 3), got {strain.shape}")
    return strain.copy()


def to_tensor_components(v: np.ndarray) -> np.ndarray:
    """工程 Voigt (剪切分量加倍) → 张量分量"""
    return v / VOIGT_WEIGHTS


def double_contraction(a: np.ndarray, b: np.ndarray) -> float:
    """两个张量分量 Voigt 向量的双点积 a:b"""
    return float(a @ (VOIGT_WEIGHTS * b))


def von_mises(xi: np.ndarray) -> float:
    """
    Von Mises 等效值

    q = √(3/2 ξ:ξ)，ξ 为偏张量 (张量分量 Voigt)
    """
    return np.sqrt(max(1.5 * double_contraction(xi, xi), 0.0))
