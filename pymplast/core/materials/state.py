# 文件: pymplast/core/materials/state.py
"""
材料状态管理

- PlasticState: 积分点某一时刻的快照 (应力、应变、塑性应变、内变量、切线)
- MaterialState: 一个材料点的 committed / trial 状态与提交协议
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Optional
import numpy as np

from .errors import InvalidStateError
from .interfaces import StressResult, as_strain_voigt

if TYPE_CHECKING:
    from .plastic.hardening import InternalVariables
    from .plastic.return_mapping import ReturnMappingEngine


@dataclass
class PlasticState:
    """
    塑性材料点快照

    只存储总应变和塑性应变，弹性应变由两者之差导出。

    Attributes:
        stress: 应力 Voigt 向量 [σxx, σyy, σzz, σyz, σxz, σxy]
        strain: 总应变 (工程 Voigt)
        plastic_strain: 塑性应变 (工程 Voigt)
        internal_variables: 内变量 (本快照独占)
        tangent: 一致切线模量 (6,6)

    Example:
        state = PlasticState.ground(internal_variables, tangent=elastic.D)
        committed = state.copy()
    """

    stress: np.ndarray
    strain: np.ndarray
    plastic_strain: np.ndarray
    internal_variables: 'InternalVariables'
    tangent: Optional[np.ndarray] = None

    @classmethod
    def ground(cls, internal_variables: 'InternalVariables',
               tangent: Optional[np.ndarray] = None) -> 'PlasticState':
        """
        初始 (ground) 状态：应力、应变、塑性应变为 0，内变量取初始值

        Args:
            internal_variables: 提供演化律的容器 (数值会被重置)
            tangent: 初始切线，通常为弹性刚度
        """
        return cls(
            stress=np.zeros(6),
            strain=np.zeros(6),
            plastic_strain=np.zeros(6),
            internal_variables=internal_variables.reset(),
            tangent=None if tangent is None else np.array(tangent, dtype=float),
        )

    @property
    def elastic_strain(self) -> np.ndarray:
        return self.strain - self.plastic_strain

    def copy(self) -> 'PlasticState':
        """
        深拷贝

        Returns:
            PlasticState: 与原对象不共享任何数组的副本
        """
        return PlasticState(
            stress=self.stress.copy(),
            strain=self.strain.copy(),
            plastic_strain=self.plastic_strain.copy(),
            internal_variables=self.internal_variables.copy(),
            tangent=None if self.tangent is None else self.tangent.copy(),
        )

    def __repr__(self) -> str:
        return (
            f"PlasticState(|eps_p|={np.linalg.norm(self.plastic_strain):.6e}, "
            f"stress_max={np.max(np.abs(self.stress)):.3e}, {self.internal_variables!r})"
        )


class MaterialState:
    """
    材料点状态容器

    每个材料点恰有一个 MaterialState，不在积分点之间共享。

    协议:
        set_trial_strain()  ->  commit()                 试探状态成为已提交状态
                            ->  revert_to_last_commit()  丢弃试探状态
        revert_to_start()                                任何时候都可回到初始状态

    Attributes:
        engine: 返回映射引擎 (只含不可变参数，可共享)
        committed: 最近一次提交的状态
        trial: 试探状态，不存在时为 None
    """

    def __init__(self, engine: 'ReturnMappingEngine', internal_variables: 'InternalVariables'):
        """
        Args:
            engine: 返回映射引擎
            internal_variables: 提供内变量布局与初始值，本对象只使用其副本
        """
        self.engine = engine
        self._ground = PlasticState.ground(internal_variables, tangent=engine.elastic.D)
        self.committed = self._ground.copy()
        self.trial: Optional[PlasticState] = None

    @property
    def current(self) -> PlasticState:
        """试探状态 (若存在) 否则为已提交状态"""
        return self.trial if self.trial is not None else self.committed

    @property
    def has_trial(self) -> bool:
        return self.trial is not None

    def set_trial_strain(self, strain) -> StressResult:
        """
        从已提交状态积分到总应变 strain

        失败时 (IntegrationError) 不保留任何试探状态，异常继续向上抛出。

        Args:
            strain: 总应变 Voigt 向量 (6,) 或张量 (3,3)

        Returns:
            StressResult，其中 state 为试探状态的副本，修改它不影响本对象
        """
        strain = as_strain_voigt(strain)
        self.trial = None
        result = self.engine.integrate(self.committed, strain - self.committed.strain)
        self.trial = result.state
        return replace(result, state=result.state.copy())

    def set_trial_strain_increment(self, strain_increment) -> StressResult:
        """以已提交状态为起点施加应变增量"""
        return self.set_trial_strain(self.committed.strain + as_strain_voigt(strain_increment))

    def commit(self) -> None:
        """
        提交试探状态

        Raises:
            InvalidStateError: 没有可提交的试探状态
        """
        if self.trial is None:
            raise InvalidStateError("commit() called without a trial state")
        self.committed = self.trial
        self.trial = None

    def revert_to_last_commit(self) -> None:
        """
        丢弃试探状态，已提交状态保持不变

        Raises:
            InvalidStateError: 没有试探状态可丢弃
        """
        if self.trial is None:
            raise InvalidStateError("revert_to_last_commit() called without a trial state")
        self.trial = None

    def revert_to_start(self) -> None:
        """重置为初始状态"""
        self.committed = self._ground.copy()
        self.trial = None

    def restore(self, committed: PlasticState) -> None:
        """用给定快照替换已提交状态 (反序列化使用)"""
        self.committed = committed.copy()
        self.trial = None

    def clone(self) -> 'MaterialState':
        """
        深拷贝

        引擎共享，所有状态数组 (含内变量) 独立。
        """
        other = MaterialState.__new__(MaterialState)
        other.engine = self.engine
        other._ground = self._ground.copy()
        other.committed = self.committed.copy()
        other.trial = None if self.trial is None else self.trial.copy()
        return other

    def __repr__(self) -> str:
        return f"MaterialState(committed={self.committed!r}, has_trial={self.has_trial})"
