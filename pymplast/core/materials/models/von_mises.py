# 文件: pymplast/core/materials/models/von_mises.py
"""
Von Mises 弹塑性材料模型

- VonMisesLinearHardening: 线性随动 + 线性等向硬化
- VonMisesArmstrongFrederick: Armstrong-Frederick 非线性随动 + 线性等向硬化

两者均为关联流动，内变量为背应力 'alpha' (6) 和屈服半径 'k' (1)。
"""

from typing import Any, Dict, Optional

from ..elastic.isotropic import LinearIsotropic3D
from ..parameters import ConstitutiveParameters
from ..plastic.flow_rules import VonMisesFlow
from ..plastic.hardening import (
    ArmstrongFrederickTensor,
    InternalVariables,
    LinearHardeningScalar,
    LinearHardeningTensor,
)
from ..plastic.yield_functions import VonMises
from .plastic_material import PlasticMaterial


class VonMisesLinearHardening(PlasticMaterial):
    """
    Von Mises 屈服 + 线性混合硬化

    组件:
    - 弹性: LinearIsotropic3D(E, nu)
    - 屈服: f = q(dev(σ - α)) - k
    - 流动: 关联 (m = ∂f/∂σ)
    - 内变量: α̇ = (2/3) H_alpha ε̇p_dev，k̇ = H_k ε̄̇p，k(0) = k0

    单轴单调加载时 k = k0 + H_k ε̄p，表观硬化模量 H_alpha + H_k。

    Example:
        mat = VonMisesLinearHardening(1, k0=10.0, H_alpha=0.0, H_k=1000.0,
                                      E=30000.0, nu=0.25, rho=1.0)
    """

    model_name = 'VonMisesLinearHardening'

    def __init__(
        self,
        tag: int,
        k0: float,
        H_alpha: float,
        H_k: float,
        E: float,
        nu: float,
        rho: float = 0.0,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            tag: 整数标识
            k0: 初始屈服半径 (等效应力)
            H_alpha: 随动硬化模量
            H_k: 等向硬化模量
            E: 杨氏模量
            nu: 泊松比
            rho: 密度
            config: 积分选项

        Raises:
            ConfigurationError: 参数非法
        """
        parameters = ConstitutiveParameters(E=E, nu=nu, rho=rho, k0=k0, H_alpha=H_alpha, H_k=H_k)
        internal_variables = InternalVariables([
            LinearHardeningTensor('alpha', parameters.H_alpha),
            LinearHardeningScalar('k', parameters.H_k, initial=parameters.k0),
        ])
        super().__init__(
            tag,
            parameters,
            elastic=LinearIsotropic3D(parameters.E, parameters.nu),
            yield_fn=VonMises(backstress='alpha', radius='k'),
            flow=VonMisesFlow(backstress='alpha'),
            internal_variables=internal_variables,
            config=config,
        )

    @classmethod
    def from_parameters(cls, tag, parameters, config=None):
        p = parameters
        return cls(tag, k0=p.k0, H_alpha=p.H_alpha, H_k=p.H_k, E=p.E, nu=p.nu, rho=p.rho, config=config)


class VonMisesArmstrongFrederick(PlasticMaterial):
    """
    Von Mises 屈服 + Armstrong-Frederick 非线性随动硬化

    α̇ = (2/3) H_alpha ε̇p_dev - saturation · ε̄̇p · α

    单轴下背应力饱和于 H_alpha / saturation，适用于循环加载 (Bauschinger 效应)。
    saturation = 0 时与 VonMisesLinearHardening 相同。
    """

    model_name = 'VonMisesArmstrongFrederick'

    def __init__(
        self,
        tag: int,
        k0: float,
        H_alpha: float,
        saturation: float,
        H_k: float,
        E: float,
        nu: float,
        rho: float = 0.0,
        config: Optional[Dict[str, Any]] = None,
    ):
        parameters = ConstitutiveParameters(
            E=E, nu=nu, rho=rho, k0=k0, H_alpha=H_alpha, H_k=H_k, saturation=saturation,
        )
        internal_variables = InternalVariables([
            ArmstrongFrederickTensor('alpha', parameters.H_alpha, parameters.saturation),
            LinearHardeningScalar('k', parameters.H_k, initial=parameters.k0),
        ])
        super().__init__(
            tag,
            parameters,
            elastic=LinearIsotropic3D(parameters.E, parameters.nu),
            yield_fn=VonMises(backstress='alpha', radius='k'),
            flow=VonMisesFlow(backstress='alpha'),
            internal_variables=internal_variables,
            config=config,
        )

    @classmethod
    def from_parameters(cls, tag, parameters, config=None):
        p = parameters
        return cls(tag, k0=p.k0, H_alpha=p.H_alpha, saturation=p.saturation, H_k=p.H_k,
                   E=p.E, nu=p.nu, rho=p.rho, config=config)

    def describe(self, verbosity: int = 0) -> str:
        text = super().describe(verbosity)
        head, _, tail = text.partition("\n\tIsotropic_hardening_rate")
        return f"{head}\n\tSaturation: {self.parameters.saturation}\n\tIsotropic_hardening_rate{tail}"
