# 文件: pymplast/core/materials/plastic/hardening.py
"""
硬化规律 (内变量演化律) 模块

提供:
- LinearHardeningTensor: 线性随动硬化 (Prager 规则)，背应力 α
- LinearHardeningScalar: 线性等向硬化，屈服半径 k
- ArmstrongFrederickTensor: 非线性随动硬化 (带动态回复项)
- InternalVariables: 一个材料点全部内变量的值容器

演化律对象只保存模量，不保存内变量的值，可在多个材料点之间共享。
内变量的值只存放在 InternalVariables 中，由 MaterialState 独占。

隐式更新: q_{n+1} = q_n + Δλ h(m, q_{n+1})

扩展指南:
    要添加新的演化律，只需创建一个类实现:
    - name, size, initial_value
    - rate(m, value) -> (size,)
    - rate_derivative_direction(m, value) -> (size, 6)
    - rate_derivative_self(m, value) -> (size, size)
"""

import numpy as np
from typing import Dict, Iterable, Mapping, Tuple

from ..errors import ConfigurationError
from ..interfaces import DEV_PROJECTOR, VOIGT_WEIGHTS, to_tensor_components

# 工程 Voigt 流动方向 → 偏张量分量
_DEV_FROM_ENGINEERING = DEV_PROJECTOR @ np.diag(1.0 / VOIGT_WEIGHTS)


def equivalent_rate(m: np.ndarray) -> Tuple[float, np.ndarray]:
    """
    等效塑性应变率 √(2/3 m:m) 及其对 m 的导数

    Args:
        m: 工程 Voigt 流动方向 (6,)

    Returns:
        norm: √(2/3 m:m)
        dnorm_dm: (6,)，norm 接近 0 时返回零向量
    """
    m_tensor = to_tensor_components(m)
    norm = np.sqrt(max(2.0 / 3.0 * float(m @ m_tensor), 0.0))
    if norm < 1e-14:
        return norm, np.zeros(6)
    return norm, (2.0 / 3.0) * m_tensor / norm


def _check_modulus(name: str, value: float) -> float:
    value = float(value)
    if not np.isfinite(value) or value < 0:
        raise ConfigurationError(f"Hardening parameter '{name}' must be finite and non-negative, got {value}")
    return value


class LinearHardeningTensor:
    """
    线性随动硬化 (Prager 规则)

    α̇ = (2/3) H dev(ε̇p)

    单轴加载下表观屈服应力 σ = k + H εp。

    Example:
        alpha = LinearHardeningTensor('alpha', H=500.0)
    """

    size = 6

    def __init__(self, name: str, H: float):
        self.name = name
        self.H = _check_modulus('H', H)

    @property
    def initial_value(self) -> np.ndarray:
        return np.zeros(6)

    def rate(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        return (2.0 / 3.0) * self.H * (_DEV_FROM_ENGINEERING @ m)

    def rate_derivative_direction(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        return (2.0 / 3.0) * self.H * _DEV_FROM_ENGINEERING

    def rate_derivative_self(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        return np.zeros((6, 6))

    def __repr__(self) -> str:
        return f"LinearHardeningTensor({self.name!r}, H={self.H:.4g})"


class LinearHardeningScalar:
    """
    线性等向硬化

    k̇ = H √(2/3 ε̇p:ε̇p)

    即 k = k0 + H ε̄p，ε̄p 为累积等效塑性应变。

    Example:
        k = LinearHardeningScalar('k', H=1000.0, initial=10.0)
    """

    size = 1

    def __init__(self, name: str, H: float, initial: float):
        self.name = name
        self.H = _check_modulus('H', H)
        self.initial = float(initial)
        if not np.isfinite(self.initial):
            raise ConfigurationError(f"Initial value of '{name}' must be finite, got {initial}")

    @property
    def initial_value(self) -> np.ndarray:
        return np.array([self.initial])

    def rate(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        norm, _ = equivalent_rate(m)
        return np.array([self.H * norm])

    def rate_derivative_direction(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        _, dnorm_dm = equivalent_rate(m)
        return self.H * dnorm_dm.reshape(1, 6)

    def rate_derivative_self(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        return np.zeros((1, 1))

    def __repr__(self) -> str:
        return f"LinearHardeningScalar({self.name!r}, H={self.H:.4g}, initial={self.initial:.4g})"


class ArmstrongFrederickTensor:
    """
    Armstrong-Frederick 非线性随动硬化

    α̇ = (2/3) H dev(ε̇p) - c_r √(2/3 ε̇p:ε̇p) α

    背应力饱和值为 (2/3) H / c_r · √(3/2) (单轴下 H / c_r)。
    c_r = 0 时退化为 LinearHardeningTensor。
    """

    size = 6

    def __init__(self, name: str, H: float, saturation: float):
        self.name = name
        self.H = _check_modulus('H', H)
        self.saturation = _check_modulus('saturation', saturation)

    @property
    def initial_value(self) -> np.ndarray:
        return np.zeros(6)

    def rate(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        norm, _ = equivalent_rate(m)
        return (2.0 / 3.0) * self.H * (_DEV_FROM_ENGINEERING @ m) - self.saturation * norm * value

    def rate_derivative_direction(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        _, dnorm_dm = equivalent_rate(m)
        return (2.0 / 3.0) * self.H * _DEV_FROM_ENGINEERING - self.saturation * np.outer(value, dnorm_dm)

    def rate_derivative_self(self, m: np.ndarray, value: np.ndarray) -> np.ndarray:
        norm, _ = equivalent_rate(m)
        return -self.saturation * norm * np.eye(6)

    def __repr__(self) -> str:
        return f"ArmstrongFrederickTensor({self.name!r}, H={self.H:.4g}, saturation={self.saturation:.4g})"


class InternalVariables:
    """
    内变量容器

    将所有内变量的值按演化律顺序拼接为一个私有的一维向量。
    演化律 (不可变) 在副本之间共享，数值数组永不共享。

    屈服函数和流动方向只通过 __getitem__ 读取副本，不能修改。

    Example:
        iv = InternalVariables([
            LinearHardeningTensor('alpha', H=0.0),
            LinearHardeningScalar('k', H=1000.0, initial=10.0),
        ])
        iv['k']          # 10.0
        iv.size          # 7
        iv2 = iv.copy()  # 独立存储
    """

    def __init__(self, laws: Iterable, values=None):
        """
        Args:
            laws: 演化律序列
            values: 拼接后的内变量值 (size,)；None 表示使用各演化律的初始值

        Raises:
            ConfigurationError: 名称重复或 values 尺寸不符
        """
        self._laws = tuple(laws)
        self._slices: Dict[str, slice] = {}
        offset = 0
        for law in self._laws:
            if law.name in self._slices:
                raise ConfigurationError(f"Duplicate internal variable name '{law.name}'")
            self._slices[law.name] = slice(offset, offset + law.size)
            offset += law.size
        self._size = offset

        if values is None:
            values = self._initial_values()
        values = np.array(values, dtype=float)
        if values.shape != (self._size,):
            raise ConfigurationError(
                f"Internal variable vector must have shape ({self._size},), got {values.shape}"
            )
        self._values = values

    def _initial_values(self) -> np.ndarray:
        if not self._laws:
            return np.zeros(0)
        return np.concatenate([np.asarray(law.initial_value, dtype=float) for law in self._laws])

    @property
    def laws(self) -> tuple:
        return self._laws

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(law.name for law in self._laws)

    @property
    def size(self) -> int:
        return self._size

    @property
    def values(self) -> np.ndarray:
        """拼接后的数值 (副本)"""
        return self._values.copy()

    def __getitem__(self, name: str):
        """按名称读取：张量内变量返回数组副本，标量内变量返回 float"""
        if name not in self._slices:
            raise KeyError(f"Unknown internal variable '{name}', available: {self.names}")
        v = self._values[self._slices[name]]
        if v.size == 1:
            return float(v[0])
        return v.copy()

    def __contains__(self, name: str) -> bool:
        return name in self._slices

    def with_values(self, values) -> 'InternalVariables':
        """相同演化律、新数值的独立实例"""
        return InternalVariables(self._laws, values)

    def copy(self) -> 'InternalVariables':
        return self.with_values(self._values)

    def reset(self) -> 'InternalVariables':
        """初始值的新实例"""
        return InternalVariables(self._laws)

    # ------------------------------------------------------------------
    # 演化律
    # ------------------------------------------------------------------

    def rates(self, m: np.ndarray) -> np.ndarray:
        """所有内变量的演化率 h(m, q) (size,)"""
        out = np.zeros(self._size)
        for law in self._laws:
            sl = self._slices[law.name]
            out[sl] = law.rate(m, self._values[sl])
        return out

    def rates_derivative_direction(self, m: np.ndarray) -> np.ndarray:
        """∂h/∂m (size, 6)"""
        out = np.zeros((self._size, 6))
        for law in self._laws:
            sl = self._slices[law.name]
            out[sl, :] = law.rate_derivative_direction(m, self._values[sl])
        return out

    def rates_derivative_self(self, m: np.ndarray) -> np.ndarray:
        """∂h/∂q 的显式部分 (size, size)，块对角"""
        out = np.zeros((self._size, self._size))
        for law in self._laws:
            sl = self._slices[law.name]
            out[sl, sl] = law.rate_derivative_self(m, self._values[sl])
        return out

    def rates_derivative_stress(self, m: np.ndarray, dm_dsigma: np.ndarray) -> np.ndarray:
        """dh/dσ = ∂h/∂m · ∂m/∂σ (size, 6)"""
        return self.rates_derivative_direction(m) @ dm_dsigma

    def rates_derivative_vars(self, m: np.ndarray, dm_dvars: np.ndarray) -> np.ndarray:
        """dh/dq = ∂h/∂m · ∂m/∂q + ∂h/∂q (size, size)"""
        return self.rates_derivative_direction(m) @ dm_dvars + self.rates_derivative_self(m)

    # ------------------------------------------------------------------
    # 按名称的导数 → 拼接布局
    # ------------------------------------------------------------------

    def pack_vector(self, named: Mapping[str, np.ndarray]) -> np.ndarray:
        """{name: (size_i,)} → (size,)，缺省项为 0"""
        out = np.zeros(self._size)
        for name, value in named.items():
            out[self._slices[name]] = value
        return out

    def pack_matrix(self, named: Mapping[str, np.ndarray], rows: int = 6) -> np.ndarray:
        """{name: (rows, size_i)} → (rows, size)，缺省项为 0"""
        out = np.zeros((rows, self._size))
        for name, value in named.items():
            out[:, self._slices[name]] = np.asarray(value).reshape(rows, -1)
        return out

    def to_dict(self) -> Dict[str, object]:
        """{name: float 或 list}，用于序列化"""
        out = {}
        for name, sl in self._slices.items():
            v = self._values[sl]
            out[name] = float(v[0]) if v.size == 1 else [float(x) for x in v]
        return out

    def __repr__(self) -> str:
        parts = []
        for name in self.names:
            v = self[name]
            if isinstance(v, float):
                parts.append(f"{name}={v:.4g}")
            else:
                parts.append(f"|{name}|={np.linalg.norm(v):.3e}")
        return f"InternalVariables({', '.join(parts)})"
