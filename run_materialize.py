#!/usr/bin/env python3
"""
run_materialize.py — Recompute and persist every certifier's trust scores.

Usage:
    python run_materialize.py                          # Materialize with the current instant
    python run_materialize.py --db path/to/naqiy.db    # Custom store location
    python run_materialize.py --seed                   # Load sample bodies first
    python run_materialize.py --now 2025-01-01         # Fixed evaluation instant
    python run_materialize.py --json                   # Output JSON only (for CI)
"""

from __future__ import annotations

import argparse
import json
import sys

from naqiy.config import settings
from naqiy.errors import DataIntegrityError
from naqiy.logging import setup_logging
from naqiy.materializer import materialize_scores
from naqiy.seeds import seed_store
from naqiy.store import CertifierStore


def format_report(report, store: CertifierStore) -> str:
    lines = [
        "=" * 60,
        "NAQIY TRUST SCORE MATERIALIZATION",
        "=" * 60,
        f"Evaluated at:  {report.evaluated_at.isoformat()}",
        f"Processed:     {report.processed}",
        f"Updated:       {report.updated}",
        f"Failed:        {report.failed}",
        f"Elapsed:       {report.elapsed_seconds:.3f}s",
        "",
        f"{'Certifier':<32} {'Univ':>5} {'Han':>5} {'Sha':>5} {'Mal':>5} {'Hbl':>5}",
        "-" * 60,
    ]
    for row in sorted(store.list_scored(), key=lambda r: -(r["scores"]["trust_score"] or 0)):
        s = row["scores"]
        lines.append(
            f"{row['name'][:32]:<32} {s['trust_score']!s:>5} {s['trust_score_hanafi']!s:>5} "
            f"{s['trust_score_shafii']!s:>5} {s['trust_score_maliki']!s:>5} "
            f"{s['trust_score_hanbali']!s:>5}"
        )
    for err in report.errors:
        lines.append(f"  FAILED {err['certifier_id']}: {err['error_type']}: {err['error']}")
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(description="Naqiy Trust Score Materializer")
    parser.add_argument(
        "--db",
        default=settings.DB_PATH,
        help=f"Path to the certifier store (default: {settings.DB_PATH})",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Load the sample certifying bodies and events before scoring",
    )
    parser.add_argument(
        "--now",
        default=None,
        help="Evaluation instant, ISO-8601 (default: current time)",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=settings.MATERIALIZE_MAX_RETRIES,
        help="Write attempts per certifier on transient store errors",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON only (for CI/automation)",
    )
    args = parser.parse_args()

    if not args.json:
        setup_logging()

    store = CertifierStore(db_path=args.db)
    if args.seed:
        seed_store(store)

    try:
        report = materialize_scores(store, now=args.now, max_retries=args.retries)
    except DataIntegrityError as e:
        print(f"Error: {e}")
        sys.exit(2)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_report(report, store))

    sys.exit(0 if report.ok else 1)


if __name__ == "__main__":
    main()
