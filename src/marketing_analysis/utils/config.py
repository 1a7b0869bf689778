"""Configuration loading for the analysis pipeline"""

from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union
import yaml

from ..exceptions import ConfigurationError


@dataclass
class CleaningConfig:
    """Settings for the cleaning stage"""
    clamp_negative_spend: bool = True


@dataclass
class FeatureConfig:
    """Settings for feature engineering"""
    moving_average_window: int = 7


@dataclass
class OutlierConfig:
    """Settings for MAD-based outlier flagging"""
    threshold: float = 3.0  # Multiples of the scaled MAD
    mad_scale: float = 1.4826  # Consistency factor for normal data


@dataclass
class RobustRegressionConfig:
    """Configuration for Huber-weighted regression"""
    tuning_constant: float = 1.345
    mad_scale: float = 1.4826
    max_iterations: int = 1  # One reweighting pass seeded by OLS
    convergence_tolerance: float = 1e-6


@dataclass
class AnalysisConfig:
    """Top-level configuration for a pipeline run"""
    cleaning: CleaningConfig = field(default_factory=CleaningConfig)
    features: FeatureConfig = field(default_factory=FeatureConfig)
    outliers: OutlierConfig = field(default_factory=OutlierConfig)
    robust: RobustRegressionConfig = field(default_factory=RobustRegressionConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'AnalysisConfig':
        """
        Build configuration from a nested mapping

        Raises:
            ConfigurationError: on unknown sections/keys or invalid values
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        sections = {f.name: f.default_factory for f in fields(cls)}
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

        kwargs = {}
        for name, factory in sections.items():
            section_data = data.get(name) or {}
            if not isinstance(section_data, dict):
                raise ConfigurationError(f"Section '{name}' must be a mapping")
            section_cls = type(factory())
            allowed = {f.name for f in fields(section_cls)}
            bad_keys = set(section_data) - allowed
            if bad_keys:
                raise ConfigurationError(f"Unknown keys in '{name}': {sorted(bad_keys)}")
            kwargs[name] = section_cls(**section_data)

        config = cls(**kwargs)
        try:
            config.validate()
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e
        return config

    def validate(self) -> None:
        """Check value ranges"""
        if self.features.moving_average_window < 1:
            raise ConfigurationError("features.moving_average_window must be >= 1")
        if self.outliers.threshold <= 0:
            raise ConfigurationError("outliers.threshold must be positive")
        if self.outliers.mad_scale <= 0 or self.robust.mad_scale <= 0:
            raise ConfigurationError("mad_scale must be positive")
        if self.robust.tuning_constant <= 0:
            raise ConfigurationError("robust.tuning_constant must be positive")
        if self.robust.max_iterations < 1:
            raise ConfigurationError("robust.max_iterations must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML configuration file into a dict"""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read configuration {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration {path} must contain a mapping")
    return data
