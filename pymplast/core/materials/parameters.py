# 文件: pymplast/core/materials/parameters.py
"""
本构参数

ConstitutiveParameters 是构造时固定的物理常数，不可变，
同一材料定义的所有副本共享同一个实例。
"""

from dataclasses import dataclass, asdict
import math
from typing import Dict

from .errors import ConfigurationError


@dataclass(frozen=True)
class ConstitutiveParameters:
    """
    不可变本构参数

    Attributes:
        E: 杨氏模量 (> 0)
        nu: 泊松比 (-1 < ν < 0.5)
        rho: 密度 (>= 0)
        k0: 初始屈服半径 (> 0)
        H_alpha: 随动硬化模量 (>= 0)
        H_k: 等向硬化模量 (>= 0)
        saturation: Armstrong-Frederick 动态回复系数 (>= 0)
        friction: Drucker-Prager 摩擦系数 (>= 0)
        dilatancy: Drucker-Prager 剪胀系数 (非关联流动)

    Raises:
        ConfigurationError: 任一参数非有限值或超出物理范围
    """
    E: float
    nu: float
    rho: float = 0.0
    k0: float = 1.0
    H_alpha: float = 0.0
    H_k: float = 0.0
    saturation: float = 0.0
    friction: float = 0.0
    dilatancy: float = 0.0

    def __post_init__(self):
        for name, value in asdict(self).items():
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Parameter '{name}' must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigurationError(f"Parameter '{name}' must be finite, got {value}")
            object.__setattr__(self, name, value)

        if self.E <= 0:
            raise ConfigurationError(f"Young's modulus must be positive, got {self.E}")
        if not (-1.0 < self.nu < 0.5):
            raise ConfigurationError(f"Poisson's ratio must be in (-1, 0.5), got {self.nu}")
        if self.rho < 0:
            raise ConfigurationError(f"Density must be non-negative, got {self.rho}")
        if self.k0 <= 0:
            raise ConfigurationError(f"Initial yield threshold must be positive, got {self.k0}")
        for name in ('H_alpha', 'H_k', 'saturation', 'friction'):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"Parameter '{name}' must be non-negative, got {getattr(self, name)}")

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)
