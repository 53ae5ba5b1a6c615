# -*- coding: utf-8 -*-
"""
dictmaths/core/exceptions.py - 统一异常处理

地址重建引擎的自定义异常类层次结构

单个表大小的失败 (KeySynthesisFailed, ResidueDesync) 只排除该表大小;
格式错误和 CRT 前置条件失败会中止整个重建。
"""

from typing import Optional, Dict, Any


class DictMathsError(Exception):
    """
    dictmaths 基础异常类

    所有 dictmaths 自定义异常的基类
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# 哈希模型 / 键合成
# =============================================================================

class CalibrationAmbiguous(DictMathsError):
    """观测到的哈希值不符合仿射模型"""

    def __init__(self, message: str, sample: int = None, **kwargs) -> None:
        super().__init__(message, kwargs)
        self.sample = sample


class KeySynthesisFailed(DictMathsError):
    """无法为桶生成数值键"""

    def __init__(self, message: str, bucket: int = None, modulus: int = None, **kwargs) -> None:
        super().__init__(message, kwargs)
        self.bucket = bucket
        self.modulus = modulus


# =============================================================================
# 容器 / 归档
# =============================================================================

class ContainerError(DictMathsError):
    """容器构建基础异常"""
    pass


class ContainerIntegrityError(ContainerError):
    """两个桶得到了相同的键值"""

    def __init__(self, message: str, modulus: int = None, pattern: str = None, **kwargs) -> None:
        super().__init__(message, kwargs)
        self.modulus = modulus
        self.pattern = pattern


class DecodeFormatViolation(ContainerError):
    """
    归档结构不符合预期

    表示目标的结构发生变化 (例如缓解措施), 不做任何猜测性恢复
    """

    def __init__(self, message: str, modulus: int = None, pattern: str = None, **kwargs) -> None:
        if modulus is not None:
            kwargs['modulus'] = modulus
        if pattern is not None:
            kwargs['pattern'] = pattern
        super().__init__(message, kwargs)
        self.modulus = modulus
        self.pattern = pattern

    def with_context(self, modulus: int, pattern: str) -> 'DecodeFormatViolation':
        """返回附带表大小/模式上下文的副本"""
        details = {k: v for k, v in self.details.items() if k not in ('modulus', 'pattern')}
        return DecodeFormatViolation(self.message, modulus=modulus, pattern=pattern, **details)


# =============================================================================
# 重建
# =============================================================================

class ReconstructionError(DictMathsError):
    """余数 / CRT 基础异常"""
    pass


class ResidueDesync(ReconstructionError):
    """标记位置无法对齐到单个桶"""

    def __init__(self, message: str, modulus: int = None,
                 even_position: int = None, odd_position: int = None, **kwargs) -> None:
        super().__init__(message, kwargs)
        self.modulus = modulus
        self.even_position = even_position
        self.odd_position = odd_position


class CRTError(ReconstructionError):
    """CRT 前置条件不满足 (空输入、模数不互素、余数越界)"""
    pass


class InsufficientResidues(CRTError):
    """成功的表大小不足, 结果不可信"""

    def __init__(self, message: str, succeeded: int = None, required: int = None, **kwargs) -> None:
        super().__init__(message, kwargs)
        self.succeeded = succeeded
        self.required = required


class ArithmeticOverflowGuard(ReconstructionError):
    """数值超出 64 位结果宽度"""

    def __init__(self, message: str, value: int = None, **kwargs) -> None:
        super().__init__(message, kwargs)
        self.value = value


# =============================================================================
# 配置
# =============================================================================

class ConfigError(DictMathsError):
    """配置异常"""
    pass


class ConfigValidationError(ConfigError):
    """配置验证异常"""

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs) -> None:
        super().__init__(message, kwargs)
        self.field = field
        self.value = value


class ConfigLoadError(ConfigError):
    """配置加载异常"""

    def __init__(self, message: str, config_path: str = None, **kwargs) -> None:
        super().__init__(message, kwargs)
        self.config_path = config_path


# =============================================================================
# 工具函数
# =============================================================================

def format_exception(exc: Exception, include_traceback: bool = False) -> str:
    """
    格式化异常信息

    Args:
        exc: 异常对象
        include_traceback: 是否包含堆栈跟踪

    Returns:
        格式化的异常字符串
    """
    if isinstance(exc, DictMathsError):
        result = f"[{exc.__class__.__name__}] {exc.message}"
        if exc.details:
            result += f"\n  Details: {exc.details}"
    else:
        result = f"[{exc.__class__.__name__}] {str(exc)}"

    if include_traceback:
        import traceback
        result += f"\n  Traceback:\n{traceback.format_exc()}"

    return result
