"""Verify a chain of persisted blocks exported as a JSON array."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from proofchain.core.config import get_settings
from proofchain.core.logging import configure_logging, get_logger
from proofchain.modules.blockchain.service import BlockchainService

logger = get_logger(__name__)

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_BAD_INPUT = 2


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="proofchain-verify",
        description="Verify the integrity and linkage of an exported block chain.",
    )
    parser.add_argument("file", help="JSON file holding an ordered array of block records.")
    parser.add_argument(
        "--audit",
        action="store_true",
        help="Also report every block's integrity and linkage, not just the first break.",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Override the configured log level (logs go to stderr).",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Also report chain statistics (span and average block interval).",
    )
    return parser.parse_args(argv)


def _load_blocks(path: Path) -> list[dict[str, Any]]:
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list) or not all(isinstance(item, dict) for item in records):
        raise ValueError("expected a JSON array of block objects")
    return records


def _statistics(
    service: BlockchainService, blocks: list[dict[str, Any]]
) -> dict[str, Any] | None:
    # Damaged records have no usable timestamp or number; they already fail verification.
    try:
        stats = service.get_chain_statistics(blocks)
    except (TypeError, ValueError) as exc:
        logger.warning("chain_statistics_unavailable", error=str(exc))
        return None
    return stats.model_dump(by_alias=True, mode="json")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    try:
        blocks = _load_blocks(Path(args.file))
    except (OSError, ValueError) as exc:
        logger.error("chain_file_unreadable", path=args.file, error=str(exc))
        return EXIT_BAD_INPUT

    service = BlockchainService.from_settings(get_settings())
    result = service.verify_chain(blocks)
    summary: dict[str, Any] = {"verification": result.to_dict()}
    if args.audit:
        summary["audit"] = service.audit_chain(blocks).model_dump(by_alias=True, mode="json")
    if args.stats:
        summary["statistics"] = _statistics(service, blocks)

    print(json.dumps(summary, indent=2))
    return EXIT_VALID if result.is_valid else EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
