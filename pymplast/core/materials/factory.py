# 文件: pymplast/core/materials/factory.py
"""
材料工厂模块

提供统一的材料创建入口。
"""

from typing import Any, Callable, Dict, Optional

from .errors import ConfigurationError
from .models import (
    MODEL_REGISTRY,
    PlasticMaterial,
    VonMisesLinearHardening,
    VonMisesArmstrongFrederick,
    DruckerPragerLinearHardening,
)

# 各模型在 'plastic' 段中需要的参数 (缺省值为 None 表示必需)
_PLASTIC_PARAMETERS = {
    'VonMisesLinearHardening': {'k0': None, 'H_alpha': 0.0, 'H_k': 0.0},
    'VonMisesArmstrongFrederick': {'k0': None, 'H_alpha': 0.0, 'saturation': 0.0, 'H_k': 0.0},
    'DruckerPragerLinearHardening': {
        'k0': None, 'friction': None, 'dilatancy': None, 'H_alpha': 0.0, 'H_k': 0.0,
    },
}


class MaterialFactory:
    """
    材料工厂

    根据材料属性字典创建对应的材料对象。
    提供便捷的工厂方法简化常见材料的创建。

    Example:
        # 从属性字典创建
        mat = MaterialFactory.create('Steel', {
            'model': 'VonMisesLinearHardening',
            'tag': 1,
            'E': 30000.0,
            'nu': 0.25,
            'density': 1.0,
            'plastic': {'k0': 10.0, 'H_alpha': 0.0, 'H_k': 1000.0},
        })

        # 使用便捷方法
        mat = MaterialFactory.create_von_mises_linear_hardening(
            tag=1, k0=10.0, H_alpha=0.0, H_k=1000.0, E=30000.0, nu=0.25
        )
    """

    @staticmethod
    def create(
        name: str,
        props: Dict[str, Any],
        log_callback: Optional[Callable[[str], None]] = None,
    ) -> PlasticMaterial:
        """
        根据属性字典创建材料

        Args:
            name: 材料名称 (用于错误消息)
            props: 材料属性字典，结构:
                {
                    'model': str,        # 模型名 (默认 VonMisesLinearHardening)
                    'tag': int,          # 整数标识 (默认 1)
                    'E': float,          # 杨氏模量 (必需)
                    'nu': float,         # 泊松比 (必需)
                    'density': float,    # 密度 (可选，默认 0)
                    'plastic': {         # 塑性参数 (必需)
                        'k0': float,
                        'H_alpha': float,   # 默认 0
                        'H_k': float,       # 默认 0
                        'saturation': float,  # Armstrong-Frederick
                        'friction': float,    # Drucker-Prager
                        'dilatancy': float    # Drucker-Prager
                    },
                    'integration': {     # 积分选项 (可选)
                        'max_iter': int,
                        'tolerance': float
                    }
                }
            log_callback: 构造成功后以 describe() 文本调用一次 (可选)

        Returns:
            PlasticMaterial: 材料对象

        Raises:
            ConfigurationError: 缺少必需参数、未知模型或参数非法
        """
        model = props.get('model', 'VonMisesLinearHardening')
        if model not in MODEL_REGISTRY:
            raise ConfigurationError(
                f"Material '{name}' uses unknown model '{model}'. "
                f"Available: {sorted(MODEL_REGISTRY)}"
            )

        # 检查必需参数
        E = props.get('E')
        nu = props.get('nu')
        if E is None or nu is None:
            raise ConfigurationError(
                f"Material '{name}' missing required parameters. "
                f"Got E={E}, nu={nu}"
            )

        plastic = props.get('plastic')
        if plastic is None:
            raise ConfigurationError(f"Material '{name}' missing 'plastic' section")

        kwargs = {}
        for key, default in _PLASTIC_PARAMETERS[model].items():
            value = plastic.get(key, default)
            if value is None:
                raise ConfigurationError(
                    f"Material '{name}' has plastic section but missing '{key}'"
                )
            kwargs[key] = value

        unknown = set(plastic) - set(_PLASTIC_PARAMETERS[model])
        if unknown:
            raise ConfigurationError(
                f"Material '{name}' ({model}) does not accept plastic parameters {sorted(unknown)}"
            )

        material = MODEL_REGISTRY[model](
            props.get('tag', 1),
            E=E,
            nu=nu,
            rho=props.get('density', 0.0),
            config=props.get('integration'),
            **kwargs,
        )

        if log_callback is not None:
            log_callback(material.describe())
        return material

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> PlasticMaterial:
        """
        由 PlasticMaterial.to_dict() 的输出重建材料 (按 'model' 字段分派)

        Raises:
            ConfigurationError: 未知模型
        """
        model = data.get('model')
        if model not in MODEL_REGISTRY:
            raise ConfigurationError(f"Cannot restore unknown model '{model}'")
        return MODEL_REGISTRY[model].from_dict(data)

    @staticmethod
    def create_von_mises_linear_hardening(
        tag: int,
        k0: float,
        H_alpha: float,
        H_k: float,
        E: float,
        nu: float,
        rho: float = 0.0,
    ) -> VonMisesLinearHardening:
        """
        创建 Von Mises 线性混合硬化材料

        Args:
            tag: 整数标识
            k0: 初始屈服半径
            H_alpha: 随动硬化模量
            H_k: 等向硬化模量 (0 且 H_alpha = 0 时为理想塑性)
            E: 杨氏模量
            nu: 泊松比
            rho: 密度

        Returns:
            VonMisesLinearHardening
        """
        return VonMisesLinearHardening(tag, k0=k0, H_alpha=H_alpha, H_k=H_k, E=E, nu=nu, rho=rho)

    @staticmethod
    def create_von_mises_armstrong_frederick(
        tag: int,
        k0: float,
        H_alpha: float,
        saturation: float,
        H_k: float,
        E: float,
        nu: float,
        rho: float = 0.0,
    ) -> VonMisesArmstrongFrederick:
        """创建 Von Mises + Armstrong-Frederick 随动硬化材料"""
        return VonMisesArmstrongFrederick(
            tag, k0=k0, H_alpha=H_alpha, saturation=saturation, H_k=H_k, E=E, nu=nu, rho=rho
        )

    @staticmethod
    def create_drucker_prager(
        tag: int,
        k0: float,
        friction: float,
        E: float,
        nu: float,
        dilatancy: Optional[float] = None,
        H_alpha: float = 0.0,
        H_k: float = 0.0,
        rho: float = 0.0,
    ) -> DruckerPragerLinearHardening:
        """
        创建 Drucker-Prager 材料

        Args:
            dilatancy: 剪胀系数，None 表示与 friction 相同 (关联流动)
        """
        if dilatancy is None:
            dilatancy = friction
        return DruckerPragerLinearHardening(
            tag, k0=k0, friction=friction, dilatancy=dilatancy,
            H_alpha=H_alpha, H_k=H_k, E=E, nu=nu, rho=rho,
        )
