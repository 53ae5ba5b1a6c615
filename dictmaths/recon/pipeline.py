# -*- coding: utf-8 -*-
"""
dictmaths/recon/pipeline.py - 地址重建流水线

每个表大小:
    构建 EVEN/ODD 容器 -> 编码 -> 往返 -> 解码
    -> 校验桶顺序 -> 提取余数
最后对所有成功的表大小做 CRT 合并。

单个表大小的问题 (桶不可达、键顺序被打乱、位置无法对齐) 只排除该表大小;
归档结构变化或键冲突会中止整个重建。
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from dictmaths.container.archive import encode_container
from dictmaths.container.builder import build_container
from dictmaths.container.decoder import decode
from dictmaths.core.config import DictMathsConfig
from dictmaths.core.logging import ModulusLogAdapter
from dictmaths.core.exceptions import (
    ArithmeticOverflowGuard,
    CRTError,
    DecodeFormatViolation,
    InsufficientResidues,
    ResidueDesync,
)
from dictmaths.core.types import (
    HashFunction,
    HashModel,
    Key,
    KeyedContainer,
    ModulusOutcome,
    Pattern,
    ReconstructionReport,
    RoundTrip,
)
from dictmaths.hashing.calibrate import calibrate

from .crt import solve
from .residue import extract_residue, marker_position, validate_bucket_order

logger = logging.getLogger(__name__)


class AddressReconstructor:
    """
    通过往返协作者重建标记对象地址

    用法:
        model = calibrate(observed_hash)
        engine = AddressReconstructor(round_trip, model)
        report = engine.run()
        print(hex(report.address.value))
    """

    def __init__(self, round_trip: RoundTrip, model: HashModel,
                 config: Optional[DictMathsConfig] = None) -> None:
        self.round_trip = round_trip
        self.model = model
        self.config = config or DictMathsConfig()
        self.config.check()

    @classmethod
    def calibrated(cls, round_trip: RoundTrip, hash_fn: HashFunction,
                   config: Optional[DictMathsConfig] = None) -> 'AddressReconstructor':
        """根据 ``hash_fn`` 校准哈希模型并创建引擎"""
        config = config or DictMathsConfig()
        return cls(round_trip, calibrate(hash_fn, config.calibration_samples), config)

    # ------------------------------------------------------------------
    # 单个表大小的各阶段
    # ------------------------------------------------------------------

    def build(self, pattern: Pattern, modulus: int) -> KeyedContainer:
        return build_container(pattern, modulus, self.model, self.config.brute_force_factor)

    def round_trip_keys(self, container: KeyedContainer) -> List[Key]:
        """
        将容器发送给协作者并解码返回结果

        Raises:
            DecodeFormatViolation: 附带表大小/模式上下文
        """
        data = encode_container(container, self.config.marker_class)
        returned = self.round_trip(data)
        try:
            return decode(returned, self.config.marker_class)
        except DecodeFormatViolation as e:
            raise e.with_context(container.modulus, container.pattern.name) from e

    def process_modulus(self, modulus: int) -> ModulusOutcome:
        outcome = ModulusOutcome(modulus=modulus)
        log = ModulusLogAdapter(logger, modulus)

        containers = {pattern: self.build(pattern, modulus) for pattern in Pattern}
        for container in containers.values():
            outcome.missing_buckets.extend(container.missing_buckets)
        if outcome.missing_buckets:
            outcome.error = f"unreachable buckets {sorted(outcome.missing_buckets)}"
            log.warning(f"[-] {outcome.error}, excluded")
            return outcome

        decoded: Dict[Pattern, List[Key]] = {}
        for pattern, container in containers.items():
            keys = self.round_trip_keys(container)
            if len(keys) != container.size:
                outcome.error = (
                    f"{pattern.name} container came back with {len(keys)} keys, expected {container.size}"
                )
                log.warning(f"[-] {outcome.error}, excluded")
                return outcome
            decoded[pattern] = keys

        outcome.even_position = marker_position(decoded[Pattern.EVEN])
        outcome.odd_position = marker_position(decoded[Pattern.ODD])

        if self.config.validate_order:
            outcome.even_order_ok = validate_bucket_order(decoded[Pattern.EVEN], modulus, Pattern.EVEN, self.model)
            outcome.odd_order_ok = validate_bucket_order(decoded[Pattern.ODD], modulus, Pattern.ODD, self.model)
            if not (outcome.even_order_ok and outcome.odd_order_ok):
                outcome.error = "keys are not in bucket order"
                log.warning(f"[-] {outcome.error}, excluded")
                return outcome

        try:
            outcome.record = extract_residue(decoded[Pattern.EVEN], decoded[Pattern.ODD], modulus)
        except ResidueDesync as e:
            outcome.error = e.message
            log.warning(f"[-] {e.message}, excluded")
            return outcome

        log.info(f"[+] Marker mod {modulus} = {outcome.record.remainder}")
        return outcome

    # ------------------------------------------------------------------
    # 完整运行
    # ------------------------------------------------------------------

    def collect(self) -> List[ModulusOutcome]:
        """处理所有配置的表大小, 结果按表大小顺序返回"""
        moduli = list(self.config.moduli)
        if self.config.max_workers <= 1:
            return [self.process_modulus(m) for m in moduli]

        outcomes: Dict[int, ModulusOutcome] = {}
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {executor.submit(self.process_modulus, m): m for m in moduli}
            for future in as_completed(futures):
                outcomes[futures[future]] = future.result()
        return [outcomes[m] for m in moduli]

    def run(self) -> ReconstructionReport:
        """
        执行完整重建

        Returns:
            包含重建地址的 ReconstructionReport

        Raises:
            DecodeFormatViolation: 归档结构发生变化
            ContainerIntegrityError: 合成的键发生冲突
            InsufficientResidues / CRTError / ArithmeticOverflowGuard: 没有可信结果,
                部分报告挂在 ``exc.report`` 上。除非设置 ``config.allow_partial``,
                在 64 位内不唯一的结果也按 InsufficientResidues 处理
        """
        logger.info(
            f"Reconstructing marker address over {len(self.config.moduli)} table sizes "
            f"(hash model: {'linear' if self.model.is_linear else 'non-linear'}, "
            f"multiplier 0x{self.model.multiplier:x})"
        )
        report = ReconstructionReport(model=self.model, outcomes=self.collect())

        records = report.records
        if len(records) < self.config.min_residues:
            exc = InsufficientResidues(
                f"Only {len(records)} of {len(self.config.moduli)} table sizes reconciled, "
                f"need {self.config.min_residues}",
                succeeded=len(records), required=self.config.min_residues,
                failed=report.failed_moduli
            )
            report.error = exc.message
            exc.report = report
            raise exc

        try:
            report.address = solve(records)
        except (CRTError, ArithmeticOverflowGuard) as exc:
            report.error = exc.message
            exc.report = report
            raise

        if not report.address.is_unique:
            message = (
                f"Moduli product {report.address.modulus_product} does not exceed 2**64; "
                f"value is only determined modulo that product"
            )
            if not self.config.allow_partial:
                exc = InsufficientResidues(
                    message, succeeded=len(records), required=self.config.min_residues,
                    modulus_product=report.address.modulus_product,
                    failed=report.failed_moduli
                )
                report.address = None
                report.error = exc.message
                exc.report = report
                raise exc
            logger.warning(message)
        logger.info(f"[+] Reconstructed address: 0x{report.address.value:016x}")
        return report


def reconstruct(round_trip: RoundTrip, hash_fn: HashFunction,
                config: Optional[DictMathsConfig] = None) -> ReconstructionReport:
    """校准 ``hash_fn`` 后运行一次流水线"""
    return AddressReconstructor.calibrated(round_trip, hash_fn, config).run()
