# -*- coding: utf-8 -*-
"""
dictmaths/core/utils.py - 通用工具函数

命令行与配置输入的解析函数
"""

from typing import Union

from .types import ResidueRecord, WORD_MASK


def parse_address(addr_input: Union[str, int]) -> int:
    """
    统一的地址解析函数

    支持格式:
    - 十六进制字符串: "0x1234", "0X1234"
    - 十进制字符串: "1234"
    - 整数: 1234

    Raises:
        ValueError: 空字符串、格式错误、负数或超过 64 位

    Examples:
        >>> parse_address("0x1000")
        4096
        >>> parse_address("4096")
        4096
    """
    if isinstance(addr_input, int):
        value = addr_input
    else:
        addr_input = str(addr_input).strip()
        if not addr_input:
            raise ValueError("Empty address string")
        if addr_input.lower().startswith("0x"):
            value = int(addr_input, 16)
        else:
            value = int(addr_input)

    if not 0 <= value <= WORD_MASK:
        raise ValueError(f"Address {value:#x} does not fit in 64 bits")
    return value


def parse_residue(text: str) -> ResidueRecord:
    """
    将 "余数:模数" (如 "5:23") 解析为 ResidueRecord

    Raises:
        ValueError: 格式错误或余数越界
    """
    parts = text.split(':')
    if len(parts) != 2:
        raise ValueError(f"Expected remainder:modulus, got {text!r}")
    remainder, modulus = (int(p.strip(), 0) for p in parts)
    return ResidueRecord(modulus=modulus, remainder=remainder)
