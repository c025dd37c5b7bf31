# 文件: pymplast/core/materials/plastic/return_mapping.py
"""
返回映射算法模块

提供:
- ReturnMappingEngine: 通用隐式 (向后 Euler) 返回映射，
  由弹性律、屈服函数、流动方向和内变量演化律四个组件参数化

算法步骤:
1. 弹性预测: σ_tr = D (ε_n + Δε - εp_n)，q_tr = q_n
2. 屈服判定: f(σ_tr, q_n) <= tol 则为弹性步，直接返回
3. 塑性修正: 以 x = [σ, q, Δλ] 为未知量的 Newton-Raphson
       r_ε = C σ - εe_tr + Δλ m(σ, q)      = 0   (6)
       r_q = q - q_n - Δλ h(m, q)          = 0   (n_q)
       r_f = f(σ, q)                        = 0   (1)
4. 一致切线: 对收敛方程组关于总应变隐式求导
       J dx/dε = [I; 0; 0]  →  D_alg = (J⁻¹)[σ 行, ε 列]
5. 结果: εp = εp_n + Δλ m，σ = D (ε - εp)

扩展指南:
    新的屈服准则/流动/硬化组合不需要修改本模块，
    只需实现 interfaces.py 中的协议。
"""

import numpy as np
import scipy.linalg
from typing import Any, Dict, Optional

from ..errors import (
    ConfigurationError,
    NegativeMultiplierError,
    NonConvergenceError,
    SingularJacobianError,
)
from ..interfaces import StressResult
from ..state import PlasticState


# 默认积分选项
DEFAULT_INTEGRATION_OPTIONS: Dict[str, Any] = {
    "max_iter": 50,            # 局部 Newton 最大迭代次数
    "tolerance": 1e-10,        # 应变/内变量残差相对容差
    "yield_tolerance": 1e-10,  # 屈服函数容差 (相对 1 + ||σ_tr||)
    "max_condition": 1e14,     # 均衡化后 Jacobian 条件数上限
}

_VERTEX_NOTE = "the iterates crossed a non-smooth vertex of the yield surface"


def merge_options(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    将用户选项合并到默认选项上并校验

    Raises:
        ConfigurationError: 未知键或非法值
    """
    options = dict(DEFAULT_INTEGRATION_OPTIONS)
    if config:
        unknown = set(config) - set(options)
        if unknown:
            raise ConfigurationError(f"Unknown integration options: {sorted(unknown)}")
        options.update(config)

    max_iter = options["max_iter"]
    try:
        valid = not isinstance(max_iter, bool) and int(max_iter) == max_iter and max_iter >= 1
    except (TypeError, ValueError, OverflowError):
        valid = False
    if not valid:
        raise ConfigurationError(f"max_iter must be a positive integer, got {max_iter!r}")
    options["max_iter"] = int(max_iter)
    for key in ("tolerance", "yield_tolerance", "max_condition"):
        try:
            value = float(options[key])
        except (TypeError, ValueError):
            raise ConfigurationError(f"{key} must be a number, got {options[key]!r}")
        if not np.isfinite(value) or value <= 0:
            raise ConfigurationError(f"{key} must be finite and positive, got {options[key]}")
        options[key] = value
    return options


class ReturnMappingEngine:
    """
    通用隐式返回映射引擎 (Closest Point Projection)

    引擎只保存组件和积分选项，不保存任何材料点状态，
    因此可以被同一材料定义的所有副本共享。

    屈服函数与流动方向可以不同 (非关联流动)，引擎不假设 m = ∂f/∂σ。

    Attributes:
        elastic: 弹性律 (需提供 compute_stress, D, compliance)
        yield_fn: 屈服函数 (需提供 evaluate, gradient, gradient_vars)
        flow: 流动方向 (需提供 direction, derivative, derivative_vars)
        options: 积分选项

    Example:
        engine = ReturnMappingEngine(elastic, yield_fn, flow)
        result = engine.integrate(committed_state, strain_increment)
        result.stress, result.tangent, result.state
    """

    def __init__(self, elastic, yield_fn, flow, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            elastic: 弹性律对象
            yield_fn: 屈服函数对象
            flow: 塑性流动方向对象
            config: 积分选项，见 DEFAULT_INTEGRATION_OPTIONS
        """
        self.elastic = elastic
        self.yield_fn = yield_fn
        self.flow = flow
        self.options = merge_options(config)

    # ------------------------------------------------------------------
    # 主入口
    # ------------------------------------------------------------------

    def integrate(self, state: PlasticState, strain_increment: np.ndarray) -> StressResult:
        """
        执行一次应变增量的本构积分

        Args:
            state: 上一步已提交的状态 (不会被修改)
            strain_increment: 应变增量 (工程 Voigt, 6,)

        Returns:
            StressResult: 新状态、应力、一致切线

        Raises:
            NonConvergenceError: 超过最大迭代次数
            SingularJacobianError: 局部 Jacobian 奇异/病态，或 Newton 迭代越过屈服面尖点
            NegativeMultiplierError: 收敛后 Δλ < 0
        """
        strain = state.strain + np.asarray(strain_increment, dtype=float)

        # --- 1. 弹性预测 ---
        eps_e_trial = strain - state.plastic_strain
        stress_trial, D = self.elastic.compute_stress(eps_e_trial)
        vars_n = state.internal_variables

        # --- 2. 屈服判定 ---
        f_tol = self.options["yield_tolerance"] * (1.0 + np.linalg.norm(stress_trial))
        f_trial = self.yield_fn.evaluate(stress_trial, vars_n)

        if f_trial <= f_tol:
            new_state = PlasticState(
                stress=stress_trial,
                strain=strain,
                plastic_strain=state.plastic_strain.copy(),
                internal_variables=vars_n.copy(),
                tangent=D,
            )
            return StressResult(
                stress=stress_trial.copy(),
                tangent=D.copy(),
                state=new_state,
                is_plastic=False,
                yield_value=f_trial,
            )

        # --- 3. 塑性修正 ---
        x, iterations = self._solve_corrector(stress_trial, eps_e_trial, vars_n, f_tol)

        n_q = vars_n.size
        d_lambda = float(x[-1])
        if d_lambda < 0.0:
            raise NegativeMultiplierError(
                f"Return mapping converged to a negative plastic multiplier ({d_lambda:.6e})",
                multiplier=d_lambda,
            )

        sigma = x[:6]
        vars_new = vars_n.with_values(x[6:6 + n_q])

        # --- 4. 一致切线 ---
        J = self._jacobian(sigma, vars_new, d_lambda)
        rhs = np.zeros((6 + n_q + 1, 6))
        rhs[:6, :] = np.eye(6)
        tangent = self._solve_linear(J, rhs)[:6, :]

        # --- 5. 更新状态 (应力始终由弹性律从弹性应变得到) ---
        m = self.flow.direction(sigma, vars_new)
        plastic_strain = state.plastic_strain + d_lambda * m
        stress, _ = self.elastic.compute_stress(strain - plastic_strain)
        f_final = self.yield_fn.evaluate(stress, vars_new)

        new_state = PlasticState(
            stress=stress,
            strain=strain,
            plastic_strain=plastic_strain,
            internal_variables=vars_new,
            tangent=tangent,
        )
        return StressResult(
            stress=stress.copy(),
            tangent=tangent.copy(),
            state=new_state,
            is_plastic=True,
            plastic_multiplier=d_lambda,
            iterations=iterations,
            yield_value=f_final,
        )

    # ------------------------------------------------------------------
    # Newton 修正
    # ------------------------------------------------------------------

    def _solve_corrector(self, stress_trial, eps_e_trial, vars_n, f_tol):
        """
        局部 Newton-Raphson

        初值取弹性预测 (σ_tr, q_n, Δλ = 0)。

        Returns:
            x: 收敛解 [σ, q, Δλ]
            iterations: 迭代次数
        """
        n_q = vars_n.size
        q_n = vars_n.values
        max_iter = self.options["max_iter"]
        tol = self.options["tolerance"]

        eps_tol = tol * np.linalg.norm(eps_e_trial)
        q_tol = tol * (1.0 + np.linalg.norm(q_n) + np.linalg.norm(stress_trial))

        # 可选: 识别迭代点越过屈服面尖点
        crosses_vertex = getattr(self.yield_fn, "crosses_vertex", None)
        crossed_vertex = False

        x = np.concatenate([stress_trial, q_n, [0.0]])
        residual_norm = np.inf

        for iteration in range(max_iter + 1):
            sigma = x[:6]
            vars_k = vars_n.with_values(x[6:6 + n_q])
            d_lambda = x[-1]

            R = self._residual(sigma, vars_k, d_lambda, eps_e_trial, q_n)
            r_eps = np.linalg.norm(R[:6])
            r_q = np.linalg.norm(R[6:6 + n_q])
            r_f = abs(R[-1])
            residual_norm = float(np.linalg.norm(R))

            if not np.all(np.isfinite(R)):
                self._raise_failure(
                    crossed_vertex,
                    f"Return mapping residual became non-finite at iteration {iteration}",
                    iteration, residual_norm,
                )

            if r_eps <= eps_tol and r_q <= q_tol and r_f <= f_tol:
                return x, iteration

            if iteration == max_iter:
                break

            J = self._jacobian(sigma, vars_k, d_lambda)
            try:
                x = x + self._solve_linear(J, -R)
            except SingularJacobianError as e:
                if crossed_vertex:
                    raise SingularJacobianError(f"{e}; {_VERTEX_NOTE}") from e
                raise

            if crosses_vertex is not None and not crossed_vertex:
                crossed_vertex = crosses_vertex(
                    x[:6], vars_n.with_values(x[6:6 + n_q]), stress_trial, vars_n
                )

        self._raise_failure(
            crossed_vertex,
            f"Return mapping did not converge in {max_iter} iterations "
            f"(residual norm {residual_norm:.3e})",
            max_iter, residual_norm,
        )

    @staticmethod
    def _raise_failure(crossed_vertex, message, iterations, residual):
        """
        Newton 失败: 迭代点曾越过屈服面尖点时报告奇异 (尖点处不可微)，
        否则报告不收敛
        """
        if crossed_vertex:
            raise SingularJacobianError(f"{message}; {_VERTEX_NOTE}")
        raise NonConvergenceError(message, iterations=iterations, residual=residual)

    def _residual(self, sigma, vars_k, d_lambda, eps_e_trial, q_n) -> np.ndarray:
        """R = [r_ε, r_q, r_f]"""
        m = self.flow.direction(sigma, vars_k)
        h = vars_k.rates(m)

        r_eps = self.elastic.compliance @ sigma - eps_e_trial + d_lambda * m
        r_q = vars_k.values - q_n - d_lambda * h
        r_f = self.yield_fn.evaluate(sigma, vars_k)
        return np.concatenate([r_eps, r_q, [r_f]])

    def _jacobian(self, sigma, vars_k, d_lambda) -> np.ndarray:
        """
        组装局部 Jacobian (6 + n_q + 1)

        | C + Δλ ∂m/∂σ     Δλ ∂m/∂q          m  |
        | -Δλ dh/dσ        I - Δλ dh/dq     -h  |
        | ∂f/∂σ            ∂f/∂q             0  |
        """
        n_q = vars_k.size
        size = 6 + n_q + 1
        J = np.zeros((size, size))

        m = self.flow.direction(sigma, vars_k)
        dm_dsigma = self.flow.derivative(sigma, vars_k)
        dm_dq = vars_k.pack_matrix(self.flow.derivative_vars(sigma, vars_k))
        h = vars_k.rates(m)

        # r_ε 行
        J[:6, :6] = self.elastic.compliance + d_lambda * dm_dsigma
        J[:6, 6:6 + n_q] = d_lambda * dm_dq
        J[:6, -1] = m

        # r_q 行
        if n_q:
            J[6:6 + n_q, :6] = -d_lambda * vars_k.rates_derivative_stress(m, dm_dsigma)
            J[6:6 + n_q, 6:6 + n_q] = np.eye(n_q) - d_lambda * vars_k.rates_derivative_vars(m, dm_dq)
            J[6:6 + n_q, -1] = -h

        # r_f 行
        J[-1, :6] = self.yield_fn.gradient(sigma, vars_k)
        J[-1, 6:6 + n_q] = vars_k.pack_vector(self.yield_fn.gradient_vars(sigma, vars_k))
        return J

    def _solve_linear(self, J: np.ndarray, rhs: np.ndarray) -> np.ndarray:
        """
        求解 J x = rhs

        先做行列均衡化再估计条件数，避免单位制 (如 Pa 与无量纲) 造成的误判。

        Raises:
            SingularJacobianError: Jacobian 非有限、存在零行/零列或病态
        """
        if not np.all(np.isfinite(J)):
            raise SingularJacobianError("Local Jacobian contains non-finite entries")

        row_scale = np.max(np.abs(J), axis=1)
        if np.any(row_scale == 0.0):
            raise SingularJacobianError("Local Jacobian has a zero row")
        J_scaled = J / row_scale[:, None]
        col_scale = np.max(np.abs(J_scaled), axis=0)
        if np.any(col_scale == 0.0):
            raise SingularJacobianError("Local Jacobian has a zero column")
        J_scaled = J_scaled / col_scale[None, :]

        condition = np.linalg.cond(J_scaled)
        if not np.isfinite(condition) or condition > self.options["max_condition"]:
            raise SingularJacobianError(
                f"Local Jacobian is ill-conditioned (condition number {condition:.3e})"
            )

        try:
            return scipy.linalg.solve(J, rhs)
        except np.linalg.LinAlgError as e:
            raise SingularJacobianError(f"Local Jacobian is singular: {e}") from e

    def __repr__(self) -> str:
        return (
            f"ReturnMappingEngine(elastic={self.elastic}, yield_fn={self.yield_fn}, "
            f"flow={self.flow})"
        )
