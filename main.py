"""
Algorithm host entry point.

Loads one algorithm from an artifact, builds a local job packet and runs
the console setup handshake.

Usage:
    python main.py
    python main.py --algorithm algorithms/forex_basket.py --type-name ForexBasketAlgorithm
    python main.py --mode live --timeout 30

Exit codes:
    0  setup succeeded
    1  setup reported errors
    2  bad configuration or the algorithm could not be loaded
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from core.config import ConfigLoader, HostConfig, load_env
from core.logging import LogStream, get_logger, setup_logging
from core.packets import create_job_packet
from core.setup import ConsoleSetupHandler, InstantiationError
from core.time import ClockFactory

DEFAULT_CONFIG = Path(__file__).resolve().parent / "config" / "config.yaml"


# ----------------------------
# CLI
# ----------------------------

def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="algohost",
        description="Load an algorithm and run local setup (backtest or paper-traded live).",
    )
    p.add_argument(
        "--config",
        "-c",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Path to config YAML (default: ./config/config.yaml)",
    )
    p.add_argument(
        "--algorithm",
        "-a",
        help="Artifact to load: .py file or dotted module name (overrides config)",
    )
    p.add_argument(
        "--type-name",
        "-t",
        help="Algorithm type to select from the artifact (overrides config)",
    )
    p.add_argument(
        "--mode",
        "-m",
        choices=["backtest", "live"],
        help="Job mode (overrides config)",
    )
    p.add_argument(
        "--timeout",
        type=float,
        help="Load timeout in seconds (overrides config)",
    )
    return p.parse_args(argv)


def _build_config(args: argparse.Namespace) -> HostConfig:
    """
    Merge config file, environment and CLI flags.

    The config file may be absent when --algorithm is given.

    Raises:
        FileNotFoundError: no config file and no --algorithm
        ValueError: invalid configuration
    """
    cfg_path: Path = args.config.expanduser().resolve()

    if cfg_path.is_file():
        data: Dict[str, Any] = ConfigLoader(cfg_path.parent, config_file=cfg_path).load()
    elif args.algorithm:
        data = ConfigLoader.apply_env_overrides({})
    else:
        raise FileNotFoundError(f"Configuration file not found: {cfg_path}")

    algorithm = data.setdefault("algorithm", {})
    if args.algorithm:
        algorithm["location"] = args.algorithm
    if args.type_name is not None:
        algorithm["type_name"] = args.type_name
    if args.timeout is not None:
        algorithm["load_timeout_seconds"] = args.timeout
    if args.mode:
        job = data.get("job") or {}
        job["mode"] = args.mode
        data["job"] = job

    try:
        return HostConfig(**data)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed: {e}") from e


def main(argv: Optional[list[str]] = None) -> int:
    load_env()
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    try:
        config = _build_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"[algohost] ERROR: {e}", file=sys.stderr)
        return 2

    setup_logging(
        log_dir=config.logging.log_dir,
        log_level=config.logging.log_level.value,
        console_level=config.logging.console_level.value,
        json_logs=config.logging.json_logs,
        max_bytes=config.logging.max_bytes,
        backup_count=config.logging.backup_count,
    )
    logger = get_logger(LogStream.SYSTEM)
    logger.info(f"[STARTUP] Loading {config.algorithm.location} (mode={config.job.mode.value})")

    clock = ClockFactory.create_for_mode(config.job.mode.value)
    handler = ConsoleSetupHandler.from_config(config, clock=clock)

    try:
        algorithm = handler.create_algorithm_instance(config.algorithm.location)
    except InstantiationError as e:
        logger.error(f"[STARTUP] {type(e).__name__}: {e}")
        print(f"[algohost] ERROR: {e}", file=sys.stderr)
        return 2

    job = create_job_packet(
        config.job.mode.value,
        user_id=config.job.user_id,
        project_id=config.job.project_id,
        algorithm_id=config.job.algorithm_id or type(algorithm).__name__,
    )

    result = handler.setup(algorithm, job)

    if not result.success:
        for error in result.errors:
            print(f"[algohost] {error}", file=sys.stderr)
        logger.error(f"[STARTUP] Setup failed with {len(result.errors)} error(s)")
        return 1

    print(
        f"[algohost] {type(algorithm).__name__} ready: "
        f"run_id={job.run_id} capital={result.starting_capital} "
        f"start={result.starting_date.isoformat()} brokerage={result.brokerage.name}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
