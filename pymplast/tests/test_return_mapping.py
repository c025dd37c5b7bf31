# 文件: pymplast/tests/test_return_mapping.py
"""
返回映射引擎测试

基准算例: E = 30000, ν = 0.25, ρ = 1, k0 = 10, H_alpha = 0, H_k = 1000
单轴应变下 q_tr = 2μ ε，首次屈服于 ε_y = k0 / (2μ)。
"""

import numpy as np
import pytest
from pymplast.core.materials import (
    LinearIsotropic3D,
    VonMisesFlow,
    LinearHardeningScalar,
    InternalVariables,
    ReturnMappingEngine,
    PlasticState,
    VonMisesLinearHardening,
    VonMisesArmstrongFrederick,
    DruckerPragerLinearHardening,
    NonConvergenceError,
    SingularJacobianError,
    NegativeMultiplierError,
    IntegrationError,
)
from pymplast.core.materials.interfaces import VOIGT_WEIGHTS
from pymplast.core.materials.plastic.yield_functions import VonMises

E, NU, RHO = 30000.0, 0.25, 1.0
K0, H_ALPHA, H_K = 10.0, 0.0, 1000.0
MU = E / (2 * (1 + NU))


def equivalent_plastic_strain(plastic_strain):
    """√(2/3 εp:εp)，εp 为工程 Voigt"""
    return np.sqrt(2.0 / 3.0 * plastic_strain @ (plastic_strain / VOIGT_WEIGHTS))


def uniaxial(eps):
    return np.array([eps, 0, 0, 0, 0, 0])


def numerical_tangent(material, strain, h=1e-7):
    """从已提交状态出发的中心差分 dσ/dε"""
    fd = np.zeros((6, 6))
    for j in range(6):
        d = np.zeros(6)
        d[j] = h
        s_plus = material.set_trial_strain(strain + d).stress
        s_minus = material.set_trial_strain(strain - d).stress
        fd[:, j] = (s_plus - s_minus) / (2 * h)
    material.set_trial_strain(strain)
    return fd


class ZeroGradientYield:
    """始终为正且梯度为零的屈服函数，用于构造奇异 Jacobian"""

    def evaluate(self, stress, internal_variables):
        return 1.0

    def gradient(self, stress, internal_variables):
        return np.zeros(6)

    def gradient_vars(self, stress, internal_variables):
        return {}


class ReversedFlow:
    """指向屈服面内部的流动方向，收敛到负塑性乘子"""

    def __init__(self):
        self._flow = VonMisesFlow(backstress=None)

    def direction(self, stress, internal_variables):
        return -self._flow.direction(stress, internal_variables)

    def derivative(self, stress, internal_variables):
        return -self._flow.derivative(stress, internal_variables)

    def derivative_vars(self, stress, internal_variables):
        return {}


class TestElasticPredictor:
    """测试弹性步"""

    def setup_method(self):
        self.mat = VonMisesLinearHardening(1, k0=K0, H_alpha=H_ALPHA, H_k=H_K, E=E, nu=NU, rho=RHO)
        self.D = self.mat.get_initial_tangent()
        self.eps_y = K0 / (2 * MU)

    def test_elastic_response(self):
        """测试弹性响应"""
        strain = uniaxial(0.5 * self.eps_y)
        result = self.mat.set_trial_strain(strain)

        assert not result.is_plastic
        assert result.iterations == 0
        assert result.plastic_multiplier == 0.0
        assert np.allclose(result.stress, self.D @ strain, rtol=1e-14)
        assert np.array_equal(result.tangent, self.D)
        assert np.array_equal(self.mat.get_plastic_strain(), np.zeros(6))

    def test_elastic_idempotence(self):
        """重复设置同一试探应变得到完全相同的结果"""
        strain = np.array([1e-4, -2e-5, 3e-5, 1e-5, 0, 2e-5])
        first = self.mat.set_trial_strain(strain).stress
        second = self.mat.set_trial_strain(strain).stress
        assert np.array_equal(first, second)
        assert self.mat.get_internal_variables()['k'] == K0

    def test_elastic_round_trip(self):
        """弹性加载再卸载到零回到零应力"""
        self.mat.set_trial_strain(uniaxial(0.9 * self.eps_y))
        self.mat.commit_state()
        result = self.mat.set_trial_strain(np.zeros(6))
        assert not result.is_plastic
        assert np.allclose(result.stress, 0.0, atol=1e-12)

    def test_yield_onset(self):
        """q = 10 之前严格弹性"""
        below = self.mat.set_trial_strain(uniaxial(0.999 * self.eps_y))
        assert not below.is_plastic
        above = self.mat.set_trial_strain(uniaxial(1.001 * self.eps_y))
        assert above.is_plastic

    def test_hydrostatic_never_yields(self):
        result = self.mat.set_trial_strain(np.array([1e-2, 1e-2, 1e-2, 0, 0, 0]))
        assert not result.is_plastic


class TestVonMisesLinearHardening:
    """测试线性硬化闭式解"""

    def setup_method(self):
        self.mat = VonMisesLinearHardening(1, k0=K0, H_alpha=H_ALPHA, H_k=H_K, E=E, nu=NU, rho=RHO)

    def test_single_step_closed_form(self):
        """一步塑性: Δλ = (q_tr - k0) / (3μ + H_k)"""
        eps = 1e-3
        result = self.mat.set_trial_strain(uniaxial(eps))

        q_trial = 2 * MU * eps
        expected = (q_trial - K0) / (3 * MU + H_K)
        assert result.is_plastic
        assert np.isclose(result.plastic_multiplier, expected, rtol=1e-10)
        assert result.iterations == 1

        k = self.mat.get_internal_variables()['k']
        eps_p = equivalent_plastic_strain(self.mat.get_plastic_strain())
        assert np.isclose(eps_p, result.plastic_multiplier, rtol=1e-10)
        assert np.isclose(k, K0 + H_K * eps_p, rtol=1e-12)
        assert np.isclose(VonMises.equivalent_stress(result.stress), k, rtol=1e-10)

    def test_monotonic_loading(self):
        """单调加载: 每个已提交状态 f ≈ 0 且 k = k0 + H_k ε̄p"""
        for eps in np.linspace(5e-4, 5e-3, 10):
            result = self.mat.set_trial_strain(uniaxial(eps))
            self.mat.commit_state()

            assert result.is_plastic
            assert abs(self.mat.get_yield_value()) <= 1e-8
            k = self.mat.get_response('k')
            eps_p = equivalent_plastic_strain(self.mat.get_plastic_strain())
            assert np.isclose(k, K0 + H_K * eps_p, rtol=1e-10)

    def test_stress_from_elastic_strain(self):
        """应力始终等于 D (ε - εp)"""
        self.mat.set_trial_strain(np.array([2e-3, -1e-4, 3e-4, 5e-4, -2e-4, 1e-3]))
        D = self.mat.get_initial_tangent()
        expected = D @ (self.mat.get_strain() - self.mat.get_plastic_strain())
        assert np.allclose(self.mat.get_stress(), expected, rtol=1e-14, atol=1e-12)

    def test_plastic_incompressibility(self):
        self.mat.set_trial_strain(np.array([2e-3, -1e-4, 3e-4, 5e-4, -2e-4, 1e-3]))
        assert np.isclose(np.sum(self.mat.get_plastic_strain()[:3]), 0.0, atol=1e-15)

    def test_unloading_is_elastic(self):
        self.mat.set_trial_strain(uniaxial(2e-3))
        self.mat.commit_state()
        eps_p = self.mat.get_plastic_strain()

        result = self.mat.set_trial_strain(uniaxial(1.9e-3))
        assert not result.is_plastic
        assert np.array_equal(self.mat.get_plastic_strain(), eps_p)

    def test_tangent_matches_finite_difference(self):
        strain = np.array([2e-3, -1e-4, 3e-4, 5e-4, -2e-4, 1e-3])
        self.mat.set_trial_strain(0.5 * strain)
        self.mat.commit_state()

        result = self.mat.set_trial_strain(strain)
        assert result.is_plastic
        fd = numerical_tangent(self.mat, strain)
        scale = np.linalg.norm(self.mat.get_initial_tangent())
        assert np.linalg.norm(result.tangent - fd) <= 1e-5 * scale
        assert np.allclose(result.tangent, result.tangent.T, atol=1e-8 * scale), "关联流动切线应对称"

    def test_kinematic_hardening_moves_backstress(self):
        mat = VonMisesLinearHardening(1, k0=K0, H_alpha=500.0, H_k=0.0, E=E, nu=NU)
        mat.set_trial_strain(uniaxial(2e-3))
        alpha = mat.get_response('alpha')
        assert alpha[0] > 0
        assert np.isclose(np.sum(alpha[:3]), 0.0, atol=1e-12)
        assert np.isclose(mat.get_response('k'), K0, rtol=1e-14)
        assert abs(mat.get_yield_value()) <= 1e-8


class TestNonlinearModels:
    """Armstrong-Frederick 与非关联 Drucker-Prager"""

    def test_armstrong_frederick_admissible(self):
        mat = VonMisesArmstrongFrederick(1, k0=K0, H_alpha=5000.0, saturation=100.0, H_k=0.0, E=E, nu=NU)
        result = mat.set_trial_strain(uniaxial(1e-2))
        assert result.is_plastic
        assert result.iterations > 1
        assert result.plastic_multiplier >= 0.0
        assert abs(result.yield_value) <= 1e-6

    def test_armstrong_frederick_tangent(self):
        mat = VonMisesArmstrongFrederick(1, k0=K0, H_alpha=5000.0, saturation=100.0, H_k=200.0, E=E, nu=NU)
        mat.set_trial_strain(uniaxial(1e-3))
        mat.commit_state()

        strain = np.array([2e-3, -1e-4, 3e-4, 5e-4, -2e-4, 1e-3])
        result = mat.set_trial_strain(strain)
        assert result.is_plastic
        fd = numerical_tangent(mat, strain, h=1e-6)
        scale = np.linalg.norm(mat.get_initial_tangent())
        assert np.linalg.norm(result.tangent - fd) <= 1e-4 * scale

    def test_drucker_prager_non_associated(self):
        mat = DruckerPragerLinearHardening(
            1, k0=K0, friction=0.3, dilatancy=0.1, H_alpha=0.0, H_k=500.0, E=E, nu=NU,
        )
        strain = np.array([-1e-3, 0, 0, 0, 0, 2e-3])
        result = mat.set_trial_strain(strain)

        assert result.is_plastic
        assert result.plastic_multiplier >= 0.0
        assert abs(result.yield_value) <= 1e-6
        # 体积塑性应变 = Δλ β
        assert np.isclose(np.sum(mat.get_plastic_strain()[:3]), 0.1 * result.plastic_multiplier)

        fd = numerical_tangent(mat, strain, h=1e-6)
        scale = np.linalg.norm(mat.get_initial_tangent())
        assert np.linalg.norm(result.tangent - fd) <= 1e-4 * scale
        assert not np.allclose(result.tangent, result.tangent.T), "非关联流动切线不对称"


class TestDruckerPragerApex:
    """锥顶附近的 Drucker-Prager 返回"""

    def setup_method(self):
        self.mat = DruckerPragerLinearHardening(
            1, k0=K0, friction=0.6, dilatancy=0.6, H_alpha=0.0, H_k=0.0, E=E, nu=NU,
        )

    def test_hydrostatic_trial_returns_to_apex(self):
        """纯静水试探应力沿体积方向返回锥顶 p = k / η"""
        result = self.mat.set_trial_strain(np.array([1e-2, 1e-2, 1e-2, 0, 0, 0]))

        assert result.is_plastic
        assert result.iterations == 1
        assert np.allclose(result.stress[:3], K0 / 0.6, rtol=1e-10)
        assert np.allclose(result.stress[3:], 0.0, atol=1e-10)
        assert np.isclose(np.sum(self.mat.get_plastic_strain()[:3]), 0.6 * result.plastic_multiplier)

    @pytest.mark.parametrize("shear", [1e-5, 1e-4, 1e-3])
    def test_return_across_apex_is_singular(self, shear):
        """锥面上无解时报告奇异，而不是耗尽迭代后报告不收敛"""
        strain = np.array([1e-2, 1e-2, 1e-2, 0, 0, shear])
        with pytest.raises(SingularJacobianError) as excinfo:
            self.mat.set_trial_strain(strain)
        assert "vertex" in str(excinfo.value)
        assert not self.mat.state.has_trial

    def test_cone_return_away_from_apex(self):
        """偏量足够大时正常返回锥面"""
        result = self.mat.set_trial_strain(np.array([1e-4, 1e-4, 1e-4, 0, 0, 5e-3]))
        assert result.is_plastic
        assert abs(result.yield_value) <= 1e-6
        assert result.stress[5] > 0.0

    def test_initial_confinement_by_prestrain(self):
        """先施加并提交静水压应变作为初始围压，剪切强度随之提高"""
        p0 = 50.0
        bulk = E / (3 * (1 - 2 * NU))
        prestrain = np.array([1.0, 1.0, 1.0, 0, 0, 0]) * (-p0 / (3 * bulk))
        assert not self.mat.set_trial_strain(prestrain).is_plastic
        self.mat.commit_state()
        assert np.allclose(self.mat.get_stress()[:3], -p0)

        # q = √3 G γ = 30: 无围压时屈服 (k0 = 10)，围压下 k0 + η p0 = 40 仍为弹性
        gamma = 30.0 / (np.sqrt(3.0) * MU)
        shear = np.array([0, 0, 0, 0, 0, gamma])
        assert not self.mat.set_trial_strain(prestrain + shear).is_plastic

        unconfined = DruckerPragerLinearHardening(
            2, k0=K0, friction=0.6, dilatancy=0.6, H_alpha=0.0, H_k=0.0, E=E, nu=NU,
        )
        assert unconfined.set_trial_strain(shear).is_plastic


class TestIntegrationErrors:
    """测试失败模式"""

    def test_non_convergence(self):
        mat = VonMisesArmstrongFrederick(
            1, k0=K0, H_alpha=5000.0, saturation=100.0, H_k=0.0, E=E, nu=NU,
            config={'max_iter': 1},
        )
        with pytest.raises(NonConvergenceError) as excinfo:
            mat.set_trial_strain(uniaxial(1e-2))
        assert excinfo.value.iterations == 1
        assert excinfo.value.residual > 0
        assert isinstance(excinfo.value, IntegrationError)
        assert not mat.state.has_trial

    def test_singular_jacobian(self):
        elastic = LinearIsotropic3D(E, NU)
        iv = InternalVariables([LinearHardeningScalar('k', 0.0, initial=K0)])
        engine = ReturnMappingEngine(elastic, ZeroGradientYield(), VonMisesFlow(backstress=None))
        state = PlasticState.ground(iv, tangent=elastic.D)

        with pytest.raises(SingularJacobianError):
            engine.integrate(state, uniaxial(1e-3))

    def test_negative_multiplier(self):
        elastic = LinearIsotropic3D(E, NU)
        iv = InternalVariables([LinearHardeningScalar('k', 0.0, initial=K0)])
        engine = ReturnMappingEngine(elastic, VonMises(backstress=None), ReversedFlow())
        state = PlasticState.ground(iv, tangent=elastic.D)

        with pytest.raises(NegativeMultiplierError) as excinfo:
            engine.integrate(state, uniaxial(1e-3))
        assert excinfo.value.multiplier < 0

    def test_committed_state_untouched(self):
        """积分失败不修改输入状态"""
        elastic = LinearIsotropic3D(E, NU)
        iv = InternalVariables([LinearHardeningScalar('k', 0.0, initial=K0)])
        engine = ReturnMappingEngine(elastic, ZeroGradientYield(), VonMisesFlow(backstress=None))
        state = PlasticState.ground(iv, tangent=elastic.D)

        with pytest.raises(SingularJacobianError):
            engine.integrate(state, uniaxial(1e-3))
        assert np.array_equal(state.strain, np.zeros(6))
        assert state.internal_variables['k'] == K0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
