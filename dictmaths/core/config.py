# -*- coding: utf-8 -*-
"""
dictmaths/core/config.py - Configuration Management

Centralized management of dictmaths configuration items.
"""

from dataclasses import dataclass
from typing import Optional, List, Tuple
from pathlib import Path
import os

import yaml

from .exceptions import ConfigLoadError, ConfigValidationError
from .types import TABLE_PRIMES, MARKER_CLASS_NAME


@dataclass
class DictMathsConfig:
    """dictmaths configuration"""

    # ==========================================================================
    # Hash Model / Synthesis
    # ==========================================================================

    calibration_samples: int = 8           # Small integers observed by the calibrator
    brute_force_factor: int = 128          # Fallback search bound = modulus * factor

    # ==========================================================================
    # Reconstruction
    # ==========================================================================

    moduli: Tuple[int, ...] = TABLE_PRIMES # Table sizes probed, in order
    min_residues: int = 2                  # Fewer reconciled moduli aborts the run
    allow_partial: bool = False            # Accept a value determined only modulo a product below 2**64
    validate_order: bool = True            # Reject archives whose keys are not in bucket order
    marker_class: str = MARKER_CLASS_NAME  # Class name identifying the marker record
    max_workers: int = 1                   # >1 processes moduli in a thread pool

    # ==========================================================================
    # Logging Configuration
    # ==========================================================================

    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        self._apply_env_overrides()

        self.moduli = tuple(int(m) for m in self.moduli)
        if self.log_file is not None and not isinstance(self.log_file, Path):
            self.log_file = Path(self.log_file)

    def _apply_env_overrides(self):
        """
        Read configuration overrides from environment variables.

        Environment variable naming rule: DICTMATHS_<FIELD_NAME>
        Example:
            - DICTMATHS_MIN_RESIDUES=3
            - DICTMATHS_MODULI=23,41,71
            - DICTMATHS_LOG_LEVEL=DEBUG
        """
        overridable = {
            'calibration_samples': int,
            'brute_force_factor': int,
            'moduli': self._parse_int_list,
            'min_residues': int,
            'allow_partial': self._parse_bool,
            'validate_order': self._parse_bool,
            'marker_class': str,
            'max_workers': int,
            'log_level': str,
            'log_file': self._parse_path,
        }

        for name, converter in overridable.items():
            env_name = f"DICTMATHS_{name.upper()}"
            env_value = os.environ.get(env_name)
            if env_value is not None:
                try:
                    setattr(self, name, converter(env_value))
                except (ValueError, TypeError) as e:
                    raise ConfigValidationError(
                        f"Invalid value for {env_name}: {env_value!r}",
                        field=name, value=env_value, error=str(e)
                    )

    @staticmethod
    def _parse_bool(value: str) -> bool:
        """Parse boolean environment variables"""
        return value.lower() in ('true', '1', 'yes', 'on')

    @staticmethod
    def _parse_path(value: str) -> Optional[Path]:
        """Parse path environment variables"""
        if not value or value.lower() in ('none', 'null', ''):
            return None
        return Path(value)

    @staticmethod
    def _parse_int_list(value: str) -> Tuple[int, ...]:
        """Parse '23,41,71' into a tuple of ints"""
        return tuple(int(part, 0) for part in value.split(',') if part.strip())

    @classmethod
    def from_dict(cls, data: dict) -> 'DictMathsConfig':
        """Create configuration from dictionary"""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_yaml(cls, path: str) -> 'DictMathsConfig':
        """Load configuration from a YAML file"""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigLoadError(f"Configuration file not found: {path}", config_path=str(path))
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Invalid YAML in {path}: {e}", config_path=str(path))
        if data is not None and not isinstance(data, dict):
            raise ConfigLoadError(f"Configuration root must be a mapping: {path}", config_path=str(path))
        return cls.from_dict(data or {})

    def to_dict(self) -> dict:
        """Convert to complete dictionary"""
        return {
            'calibration_samples': self.calibration_samples,
            'brute_force_factor': self.brute_force_factor,
            'moduli': list(self.moduli),
            'min_residues': self.min_residues,
            'allow_partial': self.allow_partial,
            'validate_order': self.validate_order,
            'marker_class': self.marker_class,
            'max_workers': self.max_workers,
            'log_level': self.log_level,
            'log_file': str(self.log_file) if self.log_file else None,
        }

    def to_yaml(self, path: str) -> None:
        """Save configuration to a YAML file"""
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True)

    def validate(self) -> List[str]:
        """
        Validate the configuration for correctness.

        Returns:
            List of error messages (Empty list if valid)
        """
        errors = []

        if self.calibration_samples < 2:
            errors.append(f"calibration_samples ({self.calibration_samples}) must be >= 2")
        if self.brute_force_factor < 1:
            errors.append(f"brute_force_factor ({self.brute_force_factor}) must be >= 1")

        if not self.moduli:
            errors.append("moduli must not be empty")
        if len(set(self.moduli)) != len(self.moduli):
            errors.append(f"moduli ({list(self.moduli)}) contain duplicates")
        small = [m for m in self.moduli if m < 5]
        if small:
            errors.append(f"moduli {small} are too small, must be >= 5")

        if self.min_residues < 1:
            errors.append(f"min_residues ({self.min_residues}) must be >= 1")
        elif self.min_residues > len(self.moduli):
            errors.append(f"min_residues ({self.min_residues}) exceeds the number of moduli ({len(self.moduli)})")

        if self.max_workers < 1:
            errors.append(f"max_workers ({self.max_workers}) must be >= 1")
        if not self.marker_class:
            errors.append("marker_class must not be empty")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self.log_level.upper() not in valid_log_levels:
            errors.append(f"log_level ({self.log_level}) is invalid, should be one of: {valid_log_levels}")

        return errors

    def check(self) -> 'DictMathsConfig':
        """Raise ConfigValidationError on the first invalid field"""
        errors = self.validate()
        if errors:
            raise ConfigValidationError(errors[0], errors=errors)
        return self


def _load_default_config() -> DictMathsConfig:
    """Load the first configuration file found in the usual locations"""
    search_paths = [
        "dictmaths.yaml",
        ".dictmaths.yaml",
        os.path.expanduser("~/.dictmaths.yaml"),
    ]
    for path in search_paths:
        if os.path.exists(path):
            return DictMathsConfig.from_yaml(path)
    return DictMathsConfig()


default_config = _load_default_config()


def load_config(path: Optional[str] = None) -> DictMathsConfig:
    """
    Load configuration (supports YAML and environment variables).

    Args:
        path: Configuration file path (optional)

    Returns:
        Configuration instance
    """
    if path:
        return DictMathsConfig.from_yaml(path)
    return DictMathsConfig()
