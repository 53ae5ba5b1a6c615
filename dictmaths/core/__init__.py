# -*- coding: utf-8 -*-
"""
dictmaths/core - 核心模块

地址重建引擎共享的基础设施，提供:
    - 类型与常量
    - 统一异常
    - 配置管理
    - 日志管理
"""

# =============================================================================
# 类型定义
# =============================================================================

from .types import (
    TABLE_PRIMES,
    WORD_BITS,
    WORD_MASK,
    DEFAULT_HASH_MULTIPLIER,
    MARKER_CLASS_NAME,
    Pattern,
    Marker,
    MARKER,
    Key,
    is_marker,
    HashFunction,
    RoundTrip,
    HashModel,
    KeyedContainer,
    ResidueRecord,
    ModulusOutcome,
    ReconstructedAddress,
    ReconstructionReport,
)

# =============================================================================
# 异常
# =============================================================================

from .exceptions import (
    DictMathsError,
    CalibrationAmbiguous,
    KeySynthesisFailed,
    ContainerError,
    ContainerIntegrityError,
    DecodeFormatViolation,
    ReconstructionError,
    ResidueDesync,
    CRTError,
    InsufficientResidues,
    ArithmeticOverflowGuard,
    ConfigError,
    ConfigValidationError,
    ConfigLoadError,
    format_exception,
)

# =============================================================================
# 配置
# =============================================================================

from .config import (
    DictMathsConfig,
    default_config,
    load_config,
)

# =============================================================================
# 日志
# =============================================================================

from .logging import (
    DictMathsLogger,
    ModulusLogAdapter,
    get_logger,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    # 类型
    'TABLE_PRIMES',
    'WORD_BITS',
    'WORD_MASK',
    'DEFAULT_HASH_MULTIPLIER',
    'MARKER_CLASS_NAME',
    'Pattern',
    'Marker',
    'MARKER',
    'Key',
    'is_marker',
    'HashFunction',
    'RoundTrip',
    'HashModel',
    'KeyedContainer',
    'ResidueRecord',
    'ModulusOutcome',
    'ReconstructedAddress',
    'ReconstructionReport',
    # 异常
    'DictMathsError',
    'CalibrationAmbiguous',
    'KeySynthesisFailed',
    'ContainerError',
    'ContainerIntegrityError',
    'DecodeFormatViolation',
    'ReconstructionError',
    'ResidueDesync',
    'CRTError',
    'InsufficientResidues',
    'ArithmeticOverflowGuard',
    'ConfigError',
    'ConfigValidationError',
    'ConfigLoadError',
    'format_exception',
    # 配置
    'DictMathsConfig',
    'default_config',
    'load_config',
    # 日志
    'DictMathsLogger',
    'ModulusLogAdapter',
    'get_logger',
    'setup_logging',
    'setup_logging_from_config',
]
