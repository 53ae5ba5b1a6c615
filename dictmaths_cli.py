#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
dictmaths - Pointer leak reconstruction CLI Tool

Usage:
    python dictmaths_cli.py run --marker 0x1eb91ab60                 # Reconstruct through the reference table
    python dictmaths_cli.py run --marker 0x1eb91ab60 --permute 7     # Same, with randomized enumeration
    python dictmaths_cli.py diag --marker 0x1eb91ab60                # Target diagnostics
    python dictmaths_cli.py key 5 23                                 # Key landing in bucket 5 of 23
    python dictmaths_cli.py crt 3:23 7:41 1:71                       # Combine residues
"""

import argparse
import json
import sys

from dictmaths.core import (
    DictMathsConfig,
    DictMathsError,
    InsufficientResidues,
    Pattern,
    load_config,
    setup_logging_from_config,
    format_exception,
)
from dictmaths.core.utils import parse_address, parse_residue
from dictmaths.container import build_container
from dictmaths.diagnostics import run_diagnostics
from dictmaths.hashing import calibrate, linear_hash, find_key_for_bucket
from dictmaths.recon import AddressReconstructor, solve
from dictmaths.simulation import PermutingRoundTrip, ProbingTableRoundTrip


def _config(args) -> DictMathsConfig:
    config = load_config(args.config)
    if getattr(args, 'workers', None):
        config.max_workers = args.workers
    if getattr(args, 'no_order_check', False):
        config.validate_order = False
    if getattr(args, 'allow_partial', False):
        config.allow_partial = True
    if args.verbose:
        config.log_level = "DEBUG"
    return config


def _round_trip(args, config: DictMathsConfig):
    if args.permute is not None:
        return PermutingRoundTrip(seed=args.permute, marker_class=config.marker_class)
    return ProbingTableRoundTrip(
        marker_address=args.marker,
        hash_fn=linear_hash(args.multiplier),
        sizes=config.moduli,
        marker_class=config.marker_class,
    )


def _print_outcomes(report) -> None:
    for outcome in report.outcomes:
        if outcome.success:
            print(f"[+] Table size {outcome.modulus:>5}: even@{outcome.even_position} "
                  f"odd@{outcome.odd_position} -> marker mod {outcome.modulus} = {outcome.remainder}")
        else:
            print(f"[-] Table size {outcome.modulus:>5}: {outcome.error}")


def cmd_run(args) -> int:
    """Reconstruct the marker address"""
    config = _config(args)
    setup_logging_from_config(config)

    engine = AddressReconstructor.calibrated(_round_trip(args, config), linear_hash(args.multiplier), config)
    try:
        report = engine.run()
    except InsufficientResidues as e:
        _print_outcomes(e.report)
        print(f"[-] {e.message}")
        return 2

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return 0

    _print_outcomes(report)
    leaked = report.address.value
    print(f"\n[+] Leaked address: 0x{leaked:016x}")
    print(f"    Actual address: 0x{args.marker:016x}")
    if leaked == args.marker:
        print("    Result: MATCH")
        return 0
    print(f"    Result: MISMATCH (difference 0x{abs(leaked - args.marker):x})")
    return 1


def cmd_diag(args) -> int:
    """Run target diagnostics"""
    config = _config(args)
    setup_logging_from_config(config)

    round_trip = _round_trip(args, config)
    # only the reference table exposes the marker hash it uses
    report = run_diagnostics(
        round_trip,
        linear_hash(args.multiplier),
        marker_hash=getattr(round_trip, "marker_address", None),
        marker_address=args.marker,
        marker_class=config.marker_class,
    )
    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.appears_vulnerable else 1


def cmd_key(args) -> int:
    """Find a key for a bucket"""
    model = calibrate(linear_hash(args.multiplier))
    key = find_key_for_bucket(args.bucket, args.modulus, model)
    if key is None:
        print(f"[-] No key reaches bucket {args.bucket} of table size {args.modulus}")
        return 1
    print(f"[+] Key {key} -> bucket {model.bucket(key, args.modulus)} of table size {args.modulus}")
    return 0


def cmd_container(args) -> int:
    """Show the keys of an EVEN/ODD container"""
    model = calibrate(linear_hash(args.multiplier))
    container = build_container(Pattern[args.pattern.upper()], args.modulus, model)
    print(f"[+] {container.pattern.name} container, table size {container.modulus}: {container.size} entries")
    for key, bucket in zip(container.keys, container.buckets):
        print(f"    bucket {bucket:>5}: key {key}")
    if container.missing_buckets:
        print(f"    [!] Missing buckets: {container.missing_buckets}")
    return 0


def cmd_crt(args) -> int:
    """Combine residues"""
    result = solve(args.residues)
    print(f"[+] x = 0x{result.value:x} ({result.value})")
    print(f"    modulo {result.modulus_product}{'' if result.is_unique else ' (not unique in 64 bits)'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dictmaths_cli",
        description="dictmaths pointer leak reconstruction",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('-c', '--config', help='YAML configuration file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('--multiplier', type=parse_address, default=0x9E3779B9,
                        help='Numeric key hash multiplier (hex)')

    subparsers = parser.add_subparsers(dest='command', help='Command')

    # run
    p_run = subparsers.add_parser('run', help='Reconstruct the marker address')
    p_run.add_argument('--marker', type=parse_address, required=True, help='Marker address (hex)')
    p_run.add_argument('--permute', type=int, help='Use a permuting round trip with this seed')
    p_run.add_argument('-w', '--workers', type=int, help='Parallel workers')
    p_run.add_argument('--no-order-check', action='store_true', help='Skip bucket order validation')
    p_run.add_argument('--allow-partial', action='store_true',
                       help='Accept a value only determined modulo a product below 2**64')
    p_run.add_argument('--json', action='store_true', help='Print the report as JSON')
    p_run.set_defaults(func=cmd_run)

    # diag
    p_diag = subparsers.add_parser('diag', help='Target diagnostics')
    p_diag.add_argument('--marker', type=parse_address, required=True, help='Marker address (hex)')
    p_diag.add_argument('--permute', type=int, help='Use a permuting round trip with this seed')
    p_diag.set_defaults(func=cmd_diag)

    # key
    p_key = subparsers.add_parser('key', help='Find a key for a bucket')
    p_key.add_argument('bucket', type=int, help='Target bucket')
    p_key.add_argument('modulus', type=int, help='Table size')
    p_key.set_defaults(func=cmd_key)

    # container
    p_container = subparsers.add_parser('container', help='Show an EVEN/ODD container')
    p_container.add_argument('pattern', choices=['even', 'odd'])
    p_container.add_argument('modulus', type=int, help='Table size')
    p_container.set_defaults(func=cmd_container)

    # crt
    p_crt = subparsers.add_parser('crt', help='Combine residues (remainder:modulus)')
    p_crt.add_argument('residues', nargs='+', type=parse_residue, help='remainder:modulus pairs')
    p_crt.set_defaults(func=cmd_crt)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except DictMathsError as e:
        print(format_exception(e), file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
