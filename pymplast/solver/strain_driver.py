# 文件: pymplast/solver/strain_driver.py
"""
应变路径驱动器

以嵌入求解器的方式驱动单个材料点：
对每个目标总应变调用 set_trial_strain()，成功则 commit_state()，
局部积分失败 (IntegrationError) 时将子增量减半重试 (Cutback)。

不做任何单元组装，仅用于材料点测试和演示。
"""

from dataclasses import dataclass
import numpy as np

from pymplast.core.materials.errors import ConfigurationError, IntegrationError
from pymplast.core.materials.interfaces import as_strain_voigt


@dataclass
class StrainPathResult:
    """
    应变路径的逐点结果 (只记录每个目标点收敛后的已提交状态)

    Attributes:
        strain: 总应变 (n, 6)
        stress: 应力 (n, 6)
        plastic_strain: 塑性应变 (n, 6)
        is_plastic: 该目标点的任一子步是否发生塑性流动 (n,)
        n_cutbacks: 该目标点的 Cutback 次数 (n,)
    """
    strain: np.ndarray
    stress: np.ndarray
    plastic_strain: np.ndarray
    is_plastic: np.ndarray
    n_cutbacks: np.ndarray

    def __len__(self) -> int:
        return len(self.strain)


class StrainDriver:
    """
    应变控制的材料点驱动器

    特性：
    1. 子增量自动控制 (收敛快时放大，失败时减半)
    2. 每个收敛子步立即提交材料状态
    3. 日志通过 log_callback 输出 (默认 print)
    """

    def __init__(self, material, config=None):
        """
        Args:
            material: 实现 set_trial_strain / commit_state 的材料点
            config: 配置字典 (max_cutbacks, growth_factor, fast_iterations)
        """
        self.material = material

        self.config = config or {
            "max_cutbacks": 10,     # 每个目标点允许的最大减半次数
            "growth_factor": 1.5,   # 快速收敛后子增量放大倍数
            "fast_iterations": 5,   # 局部迭代次数低于此值视为快速收敛
        }
        if int(self.config.get("max_cutbacks", 10)) < 0:
            raise ConfigurationError(
                f"max_cutbacks must be non-negative, got {self.config.get('max_cutbacks')}"
            )

        self.log_callback = print
        self.progress_callback = None

    def set_log_callback(self, callback):
        self.log_callback = callback

    def set_progress_callback(self, callback):
        """设置进度回调函数，参数为 0-100 的整数百分比"""
        self.progress_callback = callback

    def run(self, strain_path) -> StrainPathResult:
        """
        沿应变路径加载

        Args:
            strain_path: 目标总应变序列，每项为 (6,) 工程 Voigt 向量或 (3,3) 张量

        Returns:
            StrainPathResult

        Raises:
            IntegrationError: Cutback 次数用尽，重新抛出最后一次积分异常
        """
        targets = [as_strain_voigt(eps) for eps in strain_path]
        n_targets = len(targets)

        strains = np.zeros((n_targets, 6))
        stresses = np.zeros((n_targets, 6))
        plastic_strains = np.zeros((n_targets, 6))
        is_plastic = np.zeros(n_targets, dtype=bool)
        n_cutbacks = np.zeros(n_targets, dtype=int)

        self.log_callback(f"{'STEP':<6} | {'FRACTION':<8} | {'ITER':<5} | {'STATUS'}")
        self.log_callback("-" * 45)

        for step_i, target in enumerate(targets):
            plastic, cutbacks = self._advance(step_i, target)

            strains[step_i] = self.material.get_strain()
            stresses[step_i] = self.material.get_stress()
            plastic_strains[step_i] = self.material.get_plastic_strain()
            is_plastic[step_i] = plastic
            n_cutbacks[step_i] = cutbacks

            if self.progress_callback:
                self.progress_callback(int(((step_i + 1) / n_targets) * 100))

        return StrainPathResult(
            strain=strains,
            stress=stresses,
            plastic_strain=plastic_strains,
            is_plastic=is_plastic,
            n_cutbacks=n_cutbacks,
        )

    def _advance(self, step_i, target):
        """
        从已提交状态推进到 target，必要时细分

        Returns:
            plastic: 是否有子步发生塑性流动
            cutbacks: 本目标点的 Cutback 次数
        """
        max_cutbacks = int(self.config.get("max_cutbacks", 10))
        growth = self.config.get("growth_factor", 1.5)
        fast_iterations = self.config.get("fast_iterations", 5)

        start = self.material.get_strain()
        increment = target - start

        done = 0.0       # 已完成的增量比例
        fraction = 1.0   # 当前子增量比例
        cutbacks = 0
        plastic = False

        while done < 1.0:
            end = done + fraction
            if end >= 1.0 - 1e-12:
                end = 1.0
            trial = target if end == 1.0 else start + end * increment

            try:
                result = self.material.set_trial_strain(trial)
            except IntegrationError as e:
                cutbacks += 1
                if cutbacks > max_cutbacks:
                    self.log_callback(f"{step_i:<6} | {end:<8.4f} | {'--':<5} | Too many cutbacks, aborting.")
                    raise
                fraction *= 0.5
                self.log_callback(f">>> Cutback: fraction = {fraction:.4e} ({type(e).__name__})")
                continue

            self.material.commit_state()
            plastic = plastic or result.is_plastic
            status = "Plastic" if result.is_plastic else "Elastic"
            self.log_callback(f"{step_i:<6} | {end:<8.4f} | {result.iterations:<5} | {status}")

            done = end
            if result.iterations < fast_iterations:
                fraction = min(fraction * growth, 1.0)

        return plastic, cutbacks


def uniaxial_strain_path(max_strain: float, n_steps: int, component: int = 0) -> np.ndarray:
    """
    单调单轴应变路径 (其余分量为 0)

    Args:
        max_strain: 最终应变
        n_steps: 步数 (不含起点 0)
        component: 加载分量 (0-5)

    Returns:
        (n_steps, 6) 目标应变序列
    """
    if n_steps < 1:
        raise ConfigurationError(f"n_steps must be positive, got {n_steps}")
    path = np.zeros((n_steps, 6))
    path[:, component] = np.linspace(max_strain / n_steps, max_strain, n_steps)
    return path


def cyclic_strain_path(amplitude: float, n_cycles: int, n_points: int, component: int = 0) -> np.ndarray:
    """
    对称循环应变路径: 0 → +A → -A → +A → ... (共 n_cycles 个 +A → -A → +A 循环)

    Args:
        amplitude: 应变幅值 A
        n_cycles: 循环次数
        n_points: 每段 (如 +A → -A) 的点数
        component: 加载分量 (0-5)

    Returns:
        (n, 6) 目标应变序列，不含起点 0，相邻段不重复端点
    """
    if n_cycles < 1 or n_points < 1:
        raise ConfigurationError(
            f"n_cycles and n_points must be positive, got {n_cycles}, {n_points}"
        )
    segments = [np.linspace(0.0, amplitude, n_points + 1)[1:]]
    for _ in range(n_cycles):
        segments.append(np.linspace(amplitude, -amplitude, n_points + 1)[1:])
        segments.append(np.linspace(-amplitude, amplitude, n_points + 1)[1:])
    values = np.concatenate(segments)

    path = np.zeros((len(values), 6))
    path[:, component] = values
    return path
