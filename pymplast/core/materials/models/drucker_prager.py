# 文件: pymplast/core/materials/models/drucker_prager.py
"""
Drucker-Prager 弹塑性材料模型

适用于岩土、混凝土等压力相关材料。
"""

from typing import Any, Dict, Optional

from ..elastic.isotropic import LinearIsotropic3D
from ..parameters import ConstitutiveParameters
from ..plastic.flow_rules import DruckerPragerFlow
from ..plastic.hardening import InternalVariables, LinearHardeningScalar, LinearHardeningTensor
from ..plastic.yield_functions import DruckerPrager
from .plastic_material import PlasticMaterial


class DruckerPragerLinearHardening(PlasticMaterial):
    """
    Drucker-Prager 屈服 + 线性混合硬化

    屈服: f = q(dev(σ - α)) + friction · tr(σ)/3 - k
    流动: m = ∂q/∂σ + dilatancy/3 · 1

    dilatancy == friction 时为关联流动，否则为非关联流动，
    此时一致切线不对称。

    Example:
        soil = DruckerPragerLinearHardening(
            1, k0=10.0, friction=0.6, dilatancy=0.2,
            H_alpha=0.0, H_k=500.0, E=30000.0, nu=0.25, rho=1.8,
        )
    """

    model_name = 'DruckerPragerLinearHardening'

    def __init__(
        self,
        tag: int,
        k0: float,
        friction: float,
        dilatancy: float,
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
            k0: 初始屈服半径 (零围压下的等效剪切强度)
            friction: 摩擦系数 η
            dilatancy: 剪胀系数 β
            H_alpha: 随动硬化模量
            H_k: 等向硬化模量
            E: 杨氏模量
            nu: 泊松比
            rho: 密度
            config: 积分选项
        """
        parameters = ConstitutiveParameters(
            E=E, nu=nu, rho=rho, k0=k0, H_alpha=H_alpha, H_k=H_k,
            friction=friction, dilatancy=dilatancy,
        )
        internal_variables = InternalVariables([
            LinearHardeningTensor('alpha', parameters.H_alpha),
            LinearHardeningScalar('k', parameters.H_k, initial=parameters.k0),
        ])
        super().__init__(
            tag,
            parameters,
            elastic=LinearIsotropic3D(parameters.E, parameters.nu),
            yield_fn=DruckerPrager(parameters.friction, backstress='alpha', radius='k'),
            flow=DruckerPragerFlow(parameters.dilatancy, backstress='alpha'),
            internal_variables=internal_variables,
            config=config,
        )

    @property
    def is_associated(self) -> bool:
        return self.parameters.friction == self.parameters.dilatancy

    @classmethod
    def from_parameters(cls, tag, parameters, config=None):
        p = parameters
        return cls(tag, k0=p.k0, friction=p.friction, dilatancy=p.dilatancy,
                   H_alpha=p.H_alpha, H_k=p.H_k, E=p.E, nu=p.nu, rho=p.rho, config=config)

    def describe(self, verbosity: int = 0) -> str:
        text = super().describe(verbosity)
        head, sep, tail = text.partition("\n\tKinematic_hardening_rate")
        extra = (
            f"\n\tFriction: {self.parameters.friction}"
            f"\n\tDilatancy: {self.parameters.dilatancy}"
        )
        return f"{head}{extra}{sep}{tail}"
