# 文件: pymplast/core/materials/models/plastic_material.py
"""
通用弹塑性材料点

使用组合模式将弹性律、屈服函数、流动方向、内变量和返回映射引擎
组合成完整的材料点，对外提供嵌入求解器所需的接口。

具体模型 (von_mises.py, drucker_prager.py) 只负责选择组件和参数。
"""

import sys
import numpy as np
from typing import Any, Dict, Optional

from ..errors import ConfigurationError
from ..interfaces import Material, StressResult, stress_to_tensor, voigt_to_tensor
from ..parameters import ConstitutiveParameters
from ..plastic.hardening import InternalVariables
from ..plastic.return_mapping import ReturnMappingEngine
from ..state import MaterialState, PlasticState


class PlasticMaterial(Material):
    """
    通用小变形、率无关、单屈服面弹塑性材料点

    组件在构造时选定，之后不可更换:
    - elastic: 弹性律
    - yield_fn: 屈服函数 (纯函数，内变量显式传入)
    - flow: 塑性流动方向 (纯函数，内变量显式传入)
    - internal_variables: 内变量布局与初始值，由本材料点的 MaterialState 独占

    Attributes:
        tag: 整数标识
        parameters: 不可变本构参数 (副本之间共享)
        engine: 返回映射引擎 (副本之间共享)
        state: 本材料点的 MaterialState

    Example:
        mat = VonMisesLinearHardening(1, k0=10.0, H_alpha=0.0, H_k=1000.0,
                                      E=30000.0, nu=0.25, rho=1.0)
        result = mat.set_trial_strain([1e-3, 0, 0, 0, 0, 0])
        mat.commit_state()
    """

    # 子类覆盖，用于序列化和工厂
    model_name = 'PlasticMaterial'

    def __init__(
        self,
        tag: int,
        parameters: ConstitutiveParameters,
        elastic,
        yield_fn,
        flow,
        internal_variables: InternalVariables,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            tag: 整数标识
            parameters: 本构参数
            elastic: 弹性律
            yield_fn: 屈服函数
            flow: 塑性流动方向
            internal_variables: 内变量 (只使用其副本)
            config: 积分选项，见 DEFAULT_INTEGRATION_OPTIONS

        Raises:
            ConfigurationError: tag 不是整数或积分选项非法
        """
        try:
            valid_tag = not isinstance(tag, bool) and int(tag) == tag
        except (TypeError, ValueError):
            valid_tag = False
        if not valid_tag:
            raise ConfigurationError(f"Material tag must be an integer, got {tag!r}")
        self.tag = int(tag)
        self.parameters = parameters
        self.engine = ReturnMappingEngine(elastic, yield_fn, flow, config)
        self.state = MaterialState(self.engine, internal_variables)

    # ------------------------------------------------------------------
    # 组件访问
    # ------------------------------------------------------------------

    @property
    def elastic(self):
        return self.engine.elastic

    @property
    def yield_fn(self):
        return self.engine.yield_fn

    @property
    def flow(self):
        return self.engine.flow

    @property
    def config(self) -> Dict[str, Any]:
        return dict(self.engine.options)

    # ------------------------------------------------------------------
    # 嵌入求解器接口
    # ------------------------------------------------------------------

    def set_trial_strain(self, strain) -> StressResult:
        """
        以已提交状态为起点积分到总应变 strain

        Raises:
            IntegrationError: 返回映射失败 (不保留试探状态)
        """
        return self.state.set_trial_strain(strain)

    def set_trial_strain_increment(self, strain_increment) -> StressResult:
        """以已提交状态为起点施加应变增量"""
        return self.state.set_trial_strain_increment(strain_increment)

    def get_stress(self) -> np.ndarray:
        return self.state.current.stress.copy()

    def get_strain(self) -> np.ndarray:
        return self.state.current.strain.copy()

    def get_plastic_strain(self) -> np.ndarray:
        return self.state.current.plastic_strain.copy()

    def get_internal_variables(self) -> InternalVariables:
        """当前内变量的副本"""
        return self.state.current.internal_variables.copy()

    def get_tangent(self) -> np.ndarray:
        return self.state.current.tangent.copy()

    def get_initial_tangent(self) -> np.ndarray:
        """弹性刚度"""
        return np.array(self.elastic.D)

    def get_rho(self) -> float:
        return self.parameters.rho

    def get_yield_value(self) -> float:
        """当前状态的屈服函数值"""
        current = self.state.current
        return self.yield_fn.evaluate(current.stress, current.internal_variables)

    def commit_state(self) -> None:
        self.state.commit()

    def revert_to_last_commit(self) -> None:
        self.state.revert_to_last_commit()

    def revert_to_start(self) -> None:
        self.state.revert_to_start()

    def get_copy(self) -> 'PlasticMaterial':
        """
        独立副本

        参数、组件与引擎共享 (不可变)，MaterialState 深拷贝，
        两个材料点之后的加载历史互不影响。
        """
        other = self.__class__.__new__(self.__class__)
        other.__dict__.update(self.__dict__)
        other.state = self.state.clone()
        return other

    def get_response(self, name: str):
        """
        按名称查询响应量

        支持: 'stress', 'strain', 'plastic_strain', 'elastic_strain',
        'stress_tensor', 'strain_tensor', 'tangent', 'yield_value',
        以及任一内变量名。

        Raises:
            KeyError: 未知名称
        """
        current = self.state.current
        responses = {
            'stress': lambda: current.stress.copy(),
            'strain': lambda: current.strain.copy(),
            'plastic_strain': lambda: current.plastic_strain.copy(),
            'elastic_strain': lambda: current.elastic_strain,
            'stress_tensor': lambda: stress_to_tensor(current.stress),
            'strain_tensor': lambda: voigt_to_tensor(current.strain, engineering=True),
            'tangent': lambda: current.tangent.copy(),
            'yield_value': self.get_yield_value,
        }
        if name in responses:
            return responses[name]()
        if name in current.internal_variables:
            return current.internal_variables[name]
        raise KeyError(f"Unknown response '{name}' for {self.model_name}")

    # ------------------------------------------------------------------
    # 诊断输出
    # ------------------------------------------------------------------

    def describe(self, verbosity: int = 0) -> str:
        """
        诊断文本 (无副作用)

        Args:
            verbosity: 0 只输出参数，1 追加当前状态，2 追加组件与积分选项
        """
        p = self.parameters
        lines = [
            f"{self.model_name}::",
            f"\tTag: {self.tag}",
            f"\tElastic_Modulus: {p.E}",
            f"\tPoissons_Ratio: {p.nu}",
            f"\tDensity: {p.rho}",
            f"\tInitial_Yield_Radius: {p.k0}",
            f"\tKinematic_hardening_rate: {p.H_alpha}",
            f"\tIsotropic_hardening_rate: {p.H_k}",
        ]
        if verbosity >= 1:
            current = self.state.current
            lines.append(f"\tStress: {np.array2string(current.stress, precision=6)}")
            lines.append(f"\tStrain: {np.array2string(current.strain, precision=6)}")
            lines.append(f"\tPlastic_Strain: {np.array2string(current.plastic_strain, precision=6)}")
            for name in current.internal_variables.names:
                value = current.internal_variables[name]
                if isinstance(value, float):
                    lines.append(f"\t{name}: {value:.6g}")
                else:
                    lines.append(f"\t{name}: {np.array2string(value, precision=6)}")
            lines.append(f"\tYield_Function: {self.get_yield_value():.6e}")
        if verbosity >= 2:
            lines.append(f"\tEngine: {self.engine!r}")
            lines.append(f"\tIntegration: {self.config}")
        return "\n".join(lines)

    def print(self, target=None, verbosity: int = 0) -> None:
        """
        输出诊断文本

        Args:
            target: 可调用对象 (如 print、logger 回调) 或带 write() 的文件对象；
                    None 表示标准输出
            verbosity: 见 describe()
        """
        text = self.describe(verbosity)
        if target is None:
            target = sys.stdout
        if callable(target):
            target(text)
        else:
            target.write(text + "\n")

    # ------------------------------------------------------------------
    # 序列化
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        已提交状态的纯 Python 表示

        所有浮点数以 Python float 存储，可用 json 无损往返。
        """
        committed = self.state.committed
        return {
            'model': self.model_name,
            'tag': self.tag,
            'rho': self.parameters.rho,
            'parameters': self.parameters.to_dict(),
            'integration': self.config,
            'stress': [float(x) for x in committed.stress],
            'strain': [float(x) for x in committed.strain],
            'plastic_strain': [float(x) for x in committed.plastic_strain],
            'internal_variables': committed.internal_variables.to_dict(),
        }

    @classmethod
    def from_parameters(cls, tag: int, parameters: ConstitutiveParameters,
                        config: Optional[Dict[str, Any]] = None) -> 'PlasticMaterial':
        """
        由参数对象构造

        子类必须重写此钩子，from_dict() 依赖它。通用的 PlasticMaterial
        不知道组件的选择，无法仅由参数重建。

        Raises:
            ConfigurationError: 该类没有重写此方法
        """
        raise ConfigurationError(f"{cls.__name__} cannot be rebuilt from parameters")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlasticMaterial':
        """
        由 to_dict() 的输出重建材料点，已提交状态逐位恢复

        Raises:
            ConfigurationError: 模型名不匹配或字段缺失
        """
        if data.get('model') != cls.model_name:
            raise ConfigurationError(
                f"Cannot restore model '{data.get('model')}' with {cls.__name__}"
            )
        try:
            parameters = ConstitutiveParameters(**data['parameters'])
            material = cls.from_parameters(data['tag'], parameters, data.get('integration'))

            ground = material.state.committed
            iv = ground.internal_variables
            values = iv.values
            for name, value in data['internal_variables'].items():
                values = _assign(iv, values, name, value)

            committed = PlasticState(
                stress=np.array(data['stress'], dtype=float),
                strain=np.array(data['strain'], dtype=float),
                plastic_strain=np.array(data['plastic_strain'], dtype=float),
                internal_variables=iv.with_values(values),
                tangent=np.array(material.elastic.D),
            )
        except KeyError as e:
            raise ConfigurationError(f"Missing field in material data: {e}") from e

        material.state.restore(committed)
        return material

    def __repr__(self) -> str:
        p = self.parameters
        return (
            f"{self.model_name}(tag={self.tag}, E={p.E:.4g}, nu={p.nu:.3f}, "
            f"k0={p.k0:.4g}, H_alpha={p.H_alpha:.4g}, H_k={p.H_k:.4g})"
        )


def _assign(iv: InternalVariables, values: np.ndarray, name: str, value) -> np.ndarray:
    """将命名内变量写入拼接向量 (返回新数组)"""
    named = {name: np.atleast_1d(np.asarray(value, dtype=float))}
    mask = iv.pack_vector({name: np.ones_like(named[name])}) != 0.0
    out = values.copy()
    out[mask] = iv.pack_vector(named)[mask]
    return out
