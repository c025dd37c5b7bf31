# 文件: pymplast/tests/test_strain_driver.py
"""
应变路径驱动器测试
"""

import numpy as np
import pytest
from pymplast.core.materials import (
    StressResult,
    ConfigurationError,
    NonConvergenceError,
    SingularJacobianError,
    VonMisesLinearHardening,
    VonMisesArmstrongFrederick,
    DruckerPragerLinearHardening,
)
from pymplast.solver import StrainDriver, uniaxial_strain_path, cyclic_strain_path


class FlakyMaterial:
    """应变增量范数超过阈值时抛出 NonConvergenceError 的线弹性材料点"""

    def __init__(self, threshold):
        self.threshold = threshold
        self.committed = np.zeros(6)
        self.trial = None
        self.attempts = 0

    def set_trial_strain(self, strain):
        self.attempts += 1
        self.trial = None
        if np.linalg.norm(strain - self.committed) > self.threshold:
            raise NonConvergenceError("increment too large", iterations=1, residual=1.0)
        self.trial = np.array(strain, dtype=float)
        return StressResult(stress=self.trial.copy(), tangent=np.eye(6), iterations=1)

    def commit_state(self):
        self.committed = self.trial
        self.trial = None

    def get_strain(self):
        return (self.committed if self.trial is None else self.trial).copy()

    def get_stress(self):
        return self.get_strain()

    def get_plastic_strain(self):
        return np.zeros(6)


class TestStrainPaths:
    """测试应变路径生成"""

    def test_uniaxial(self):
        path = uniaxial_strain_path(1e-2, 5, component=1)
        assert path.shape == (5, 6)
        assert np.allclose(path[:, 1], [2e-3, 4e-3, 6e-3, 8e-3, 1e-2])
        assert np.all(path[:, [0, 2, 3, 4, 5]] == 0.0)

    def test_cyclic(self):
        path = cyclic_strain_path(1e-3, n_cycles=2, n_points=4)
        assert path.shape == (4 * (1 + 2 * 2), 6)
        assert np.isclose(path[:, 0].max(), 1e-3)
        assert np.isclose(path[:, 0].min(), -1e-3)
        assert np.isclose(path[-1, 0], 1e-3)
        assert np.isclose(path[3, 0], 1e-3)
        assert np.isclose(path[7, 0], -1e-3)
        # 相邻点不重复
        assert np.all(np.diff(path[:, 0]) != 0.0)

    def test_invalid(self):
        with pytest.raises(ConfigurationError):
            uniaxial_strain_path(1e-2, 0)
        with pytest.raises(ConfigurationError):
            cyclic_strain_path(1e-3, n_cycles=0, n_points=4)


class TestStrainDriver:
    """测试驱动器"""

    def setup_method(self):
        self.mat = VonMisesLinearHardening(1, k0=10.0, H_alpha=0.0, H_k=1000.0, E=30000.0, nu=0.25, rho=1.0)
        self.messages = []
        self.driver = StrainDriver(self.mat)
        self.driver.set_log_callback(self.messages.append)

    def test_monotonic_path(self):
        path = uniaxial_strain_path(5e-3, 20)
        result = self.driver.run(path)

        assert len(result) == 20
        assert np.allclose(result.strain, path)
        assert np.all(result.n_cutbacks == 0)
        # ε_y = 10 / 24000 ≈ 4.17e-4，第一步 2.5e-4 为弹性
        assert not result.is_plastic[0]
        assert np.all(result.is_plastic[2:])
        assert not self.mat.state.has_trial

        eps_p = result.plastic_strain[-1]
        eps_p_eq = np.sqrt(2.0 / 3.0 * eps_p @ (eps_p / np.array([1, 1, 1, 2, 2, 2])))
        assert np.isclose(self.mat.get_response('k'), 10.0 + 1000.0 * eps_p_eq, rtol=1e-10)
        assert abs(self.mat.get_yield_value()) <= 1e-8

    def test_stress_history_matches_direct_calls(self):
        path = uniaxial_strain_path(2e-3, 4)
        result = self.driver.run(path)

        reference = VonMisesLinearHardening(1, k0=10.0, H_alpha=0.0, H_k=1000.0, E=30000.0, nu=0.25)
        for i, eps in enumerate(path):
            stress = reference.set_trial_strain(eps).stress
            reference.commit_state()
            assert np.allclose(result.stress[i], stress, rtol=1e-12, atol=1e-12)

    def test_cyclic_path_bauschinger(self):
        mat = VonMisesArmstrongFrederick(1, k0=10.0, H_alpha=5000.0, saturation=100.0, H_k=0.0,
                                         E=30000.0, nu=0.25)
        driver = StrainDriver(mat)
        driver.set_log_callback(lambda message: None)
        result = driver.run(cyclic_strain_path(3e-3, n_cycles=2, n_points=10))

        assert np.all(np.isfinite(result.stress))
        assert result.is_plastic.any()
        assert abs(mat.get_yield_value()) <= 1e-6
        # 背应力已演化
        assert np.abs(mat.get_response('alpha')).max() > 0

    def test_logging(self):
        self.driver.run(uniaxial_strain_path(1e-3, 4))
        assert self.messages[0].startswith('STEP')
        assert any('Plastic' in m for m in self.messages)
        assert any('Elastic' in m for m in self.messages)

    def test_progress_callback(self):
        progress = []
        self.driver.set_progress_callback(progress.append)
        self.driver.run(uniaxial_strain_path(1e-3, 4))
        assert progress == [25, 50, 75, 100]

    def test_tensor_targets(self):
        target = np.diag([1e-3, 0.0, 0.0])
        result = self.driver.run([target])
        assert np.allclose(result.strain[0], [1e-3, 0, 0, 0, 0, 0])


class TestCutback:
    """测试子增量细分"""

    def test_cutback_recovers(self):
        mat = FlakyMaterial(threshold=0.3)
        messages = []
        driver = StrainDriver(mat)
        driver.set_log_callback(messages.append)

        target = np.array([1.0, 0, 0, 0, 0, 0])
        result = driver.run([target])

        assert result.n_cutbacks[0] >= 2
        assert np.array_equal(result.strain[0], target)
        assert any('Cutback' in m for m in messages)

    def test_gives_up_after_max_cutbacks(self):
        mat = FlakyMaterial(threshold=0.0)
        driver = StrainDriver(mat, config={'max_cutbacks': 3})
        driver.set_log_callback(lambda message: None)

        with pytest.raises(NonConvergenceError):
            driver.run([np.array([1.0, 0, 0, 0, 0, 0])])
        assert mat.attempts == 4

    def test_apex_failure_survives_cutbacks(self):
        """越过锥顶的返回与步长无关，Cutback 用尽后抛出奇异异常"""
        mat = DruckerPragerLinearHardening(1, k0=10.0, friction=0.6, dilatancy=0.6, H_alpha=0.0,
                                           H_k=0.0, E=30000.0, nu=0.25)
        messages = []
        driver = StrainDriver(mat, config={'max_cutbacks': 2})
        driver.set_log_callback(messages.append)

        with pytest.raises(SingularJacobianError):
            driver.run([np.array([1e-2, 1e-2, 1e-2, 0, 0, 1e-4])])
        assert sum('SingularJacobianError' in m for m in messages) == 2
        assert not mat.state.has_trial

    def test_invalid_config(self):
        with pytest.raises(ConfigurationError):
            StrainDriver(FlakyMaterial(1.0), config={'max_cutbacks': -1})


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
