# -*- coding: utf-8 -*-
"""
dictmaths/core/logging.py - 日志管理

所有日志都挂在 ``dictmaths`` logger 树下。各模块照常使用
``logging.getLogger(__name__)``, 由 CLI (或嵌入方) 调用一次
setup_logging() 安装处理器。

按表大小输出的日志经过 ModulusLogAdapter, 每行都带上所属的表大小和占位模式。
"""

import logging
import sys
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple


ROOT_LOGGER_NAME = "dictmaths"

CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
VERBOSE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(threadName)s %(filename)s:%(lineno)d]: %(message)s"
TIME_FORMAT = "%H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """
    彩色日志格式化器 (仅在终端下着色级别名)
    """

    LEVEL_COLORS = {
        logging.DEBUG: '\033[2m',       # dim
        logging.INFO: '\033[32m',       # green
        logging.WARNING: '\033[33m',    # yellow
        logging.ERROR: '\033[31m',      # red
        logging.CRITICAL: '\033[1;31m', # bold red
    }
    RESET = '\033[0m'

    def __init__(self, fmt=None, datefmt=None, use_colors=True, stream=None) -> None:
        super().__init__(fmt, datefmt)
        stream = stream or sys.stdout
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record) -> str:
        if not self.use_colors:
            return super().format(record)
        # 复制一份再着色, 其他处理器共享同一条记录
        colored = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, '')
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


class ModulusLogAdapter(logging.LoggerAdapter):
    """
    为日志加上表大小 (以及已知的模式) 前缀

    用法:
        log = ModulusLogAdapter(logger, modulus=41)
        log.warning("keys are not in bucket order")
        # -> "[m=41] keys are not in bucket order"
    """

    def __init__(self, logger: logging.Logger, modulus: int, pattern: Optional[str] = None) -> None:
        super().__init__(logger, {'modulus': modulus, 'pattern': pattern})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        tag = f"m={self.extra['modulus']}"
        if self.extra.get('pattern'):
            tag += f" {self.extra['pattern']}"
        return f"[{tag}] {msg}", kwargs


def _console_handler(level: int, verbose: bool, use_colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(
        VERBOSE_FORMAT if verbose else CONSOLE_FORMAT, TIME_FORMAT,
        use_colors=use_colors, stream=sys.stdout
    ))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding='utf-8')
    handler.setFormatter(logging.Formatter(VERBOSE_FORMAT))
    return handler


def _level(name: str) -> int:
    return getattr(logging, str(name).upper(), logging.INFO)


class DictMathsLogger:
    """
    dictmaths 日志管理器

    每个进程只配置一次 ``dictmaths`` logger 树; 重新配置前先调用 reset()
    """

    _configured = False
    _root_logger: Optional[logging.Logger] = None

    @classmethod
    def setup(cls, level: str = "INFO", log_file: Optional[Path] = None,
              detailed: bool = False, use_colors: bool = True) -> logging.Logger:
        """
        设置日志系统

        Args:
            level: 日志级别 (DEBUG/INFO/WARNING/ERROR/CRITICAL)
            log_file: 日志文件路径 (可选, 写入完整记录)
            detailed: 控制台是否显示线程、文件和行号
            use_colors: 终端下是否着色

        Returns:
            ``dictmaths`` 根 logger
        """
        root = logging.getLogger(ROOT_LOGGER_NAME)
        if cls._configured:
            return root

        root.setLevel(_level(level))
        root.addHandler(_console_handler(_level(level), detailed, use_colors))
        if log_file:
            root.addHandler(_file_handler(Path(log_file)))

        cls._root_logger = root
        cls._configured = True
        return root

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """获取 ``dictmaths`` 树下的 logger (缺少前缀时自动补上)"""
        if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        return logging.getLogger(name)

    @classmethod
    def set_level(cls, level: str) -> None:
        """动态调整日志级别"""
        if cls._root_logger is None:
            return
        cls._root_logger.setLevel(_level(level))
        for handler in cls._root_logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(_level(level))

    @classmethod
    def reset(cls) -> None:
        """关闭并移除已安装的处理器"""
        root = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        root.setLevel(logging.NOTSET)
        cls._root_logger = None
        cls._configured = False


def get_logger(name: str) -> logging.Logger:
    return DictMathsLogger.get_logger(name)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None,
                  detailed: bool = False) -> logging.Logger:
    return DictMathsLogger.setup(
        level=level,
        log_file=Path(log_file) if log_file else None,
        detailed=detailed
    )


def setup_logging_from_config(config=None) -> logging.Logger:
    """
    从 DictMathsConfig 配置日志 (为 None 时使用 default_config)

    DEBUG 级别同时切换到详细格式
    """
    if config is None:
        from .config import default_config
        config = default_config

    return setup_logging(
        level=config.log_level,
        log_file=str(config.log_file) if config.log_file else None,
        detailed=config.log_level.upper() == "DEBUG"
    )
