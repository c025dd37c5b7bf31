# 文件: pymplast/core/materials/elastic/isotropic.py
"""
各向同性弹性律

提供:
- LinearIsotropic3D: 三维各向同性线弹性 (Hooke's Law)，含闭式柔度矩阵
"""

import math
import numpy as np
from typing import Tuple

from ..errors import ConfigurationError


class LinearIsotropic3D:
    """
    各向同性线弹性律 (Hooke's Law)

    本构关系: σ = D : εe

    弹性矩阵 D 为 6x6 矩阵，使用 Voigt 记号:
    [σxx, σyy, σzz, σyz, σxz, σxy]^T = D @ [εxx, εyy, εzz, γyz, γxz, γxy]^T

    无内部状态：同一实例可被多个材料点共享。

    Attributes:
        E: 杨氏模量
        nu: 泊松比
        mu: 剪切模量 G = E / (2(1+ν))
        K: 体积模量 K = E / (3(1-2ν))
        lam: Lamé 第一参数 λ = Eν / ((1+ν)(1-2ν))
        D: 弹性矩阵 (6,6)
        compliance: 柔度矩阵 D⁻¹ (6,6)

    Example:
        elastic = LinearIsotropic3D(E=30000.0, nu=0.25)
        stress, D = elastic.compute_stress(strain_voigt)
    """

    def __init__(self, E: float, nu: float):
        """
        Args:
            E: 杨氏模量 (Young's modulus), > 0
            nu: 泊松比 (Poisson's ratio), 需满足 -1 < ν < 0.5

        Raises:
            ConfigurationError: 参数非有限或超出物理范围
        """
        if not (math.isfinite(E) and math.isfinite(nu)):
            raise ConfigurationError(f"Elastic constants must be finite, got E={E}, nu={nu}")
        if E <= 0:
            raise ConfigurationError(f"Young's modulus must be positive, got {E}")
        if not (-1.0 < nu < 0.5):
            raise ConfigurationError(f"Poisson's ratio must be in (-1, 0.5), got {nu}")

        self.E = float(E)
        self.nu = float(nu)

        # 导出参数
        self._mu = self.E / (2 * (1 + self.nu))
        self._K = self.E / (3 * (1 - 2 * self.nu))
        self._lam = self.E * self.nu / ((1 + self.nu) * (1 - 2 * self.nu))

        self._D = self._build_D_matrix()
        self._C = self._build_compliance()
        self._D.flags.writeable = False
        self._C.flags.writeable = False

    @property
    def mu(self) -> float:
        """剪切模量 G"""
        return self._mu

    @property
    def K(self) -> float:
        """体积模量 K"""
        return self._K

    @property
    def lam(self) -> float:
        """Lamé 第一参数 λ"""
        return self._lam

    @property
    def D(self) -> np.ndarray:
        """弹性矩阵 (6,6)，只读"""
        return self._D

    @property
    def compliance(self) -> np.ndarray:
        """柔度矩阵 D⁻¹ (6,6)，只读"""
        return self._C

    def compute_stress(self, strain_voigt: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        计算弹性应力

        Args:
            strain_voigt: 弹性应变 Voigt 向量 (6,)
                         [εxx, εyy, εzz, γyz, γxz, γxy]

        Returns:
            stress: 应力 Voigt 向量 (6,)
            tangent: 弹性刚度 (6,6) 的副本
        """
        stress = self._D @ strain_voigt
        return stress, self._D.copy()

    def compute_strain(self, stress: np.ndarray) -> np.ndarray:
        """逆关系: εe = D⁻¹ : σ"""
        return self._C @ stress

    def _build_D_matrix(self) -> np.ndarray:
        """
        构建 6x6 弹性矩阵

        | c1  c2  c2  0   0   0  |
        | c2  c1  c2  0   0   0  |
        | c2  c2  c1  0   0   0  |
        |  0   0   0  c3  0   0  |
        |  0   0   0   0  c3  0  |
        |  0   0   0   0   0  c3 |

        c1 = E(1-ν) / ((1+ν)(1-2ν)),  c2 = Eν / ((1+ν)(1-2ν)),  c3 = G
        """
        E, nu = self.E, self.nu
        factor = E / ((1 + nu) * (1 - 2 * nu))

        D = np.zeros((6, 6))
        D[:3, :3] = nu * factor
        np.fill_diagonal(D[:3, :3], (1 - nu) * factor)
        D[3, 3] = D[4, 4] = D[5, 5] = self._mu
        return D

    def _build_compliance(self) -> np.ndarray:
        """
        闭式柔度矩阵

        正应变: ε = (σ - ν(σ₂+σ₃)) / E,  工程剪应变: γ = τ / G
        """
        E, nu = self.E, self.nu
        C = np.zeros((6, 6))
        C[:3, :3] = -nu / E
        np.fill_diagonal(C[:3, :3], 1.0 / E)
        C[3, 3] = C[4, 4] = C[5, 5] = 1.0 / self._mu
        return C

    def __repr__(self) -> str:
        return f"LinearIsotropic3D(E={self.E:.4g}, nu={self.nu:.3f})"
