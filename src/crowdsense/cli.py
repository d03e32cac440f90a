"""Command-line entry point.

Subcommands:

* ``scan``: run one BLE scan, print the estimate and submit it.
* ``records``: list live records in the shared table.
* ``janitor``: purge stale records every sweep interval (``--once`` for a single pass).

Store credentials come from ``CROWDSENSE_STORE_URL`` / ``CROWDSENSE_STORE_KEY``.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from crowdsense.client import CrowdClient
from crowdsense.config import CrowdSenseConfig
from crowdsense.estimator import crowd_level, estimate
from crowdsense.exceptions import CrowdSenseError
from crowdsense.models.scan import Coordinate
from crowdsense.scan.ble import BleakDiscoverySensor
from crowdsense.scan.scanner import Scanner
from crowdsense.scan.sensor import LatestLocation

_logger = logging.getLogger("crowdsense.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crowdsense", description="Estimate and share nearby crowd density.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Run one BLE scan and submit the estimate")
    scan.add_argument("--lat", type=float, default=None, help="Latitude of this observer")
    scan.add_argument("--lon", type=float, default=None, help="Longitude of this observer")
    scan.add_argument("--adapter", default=None, help="Bluetooth adapter (e.g. hci0)")
    scan.add_argument("--no-submit", action="store_true", help="Print the estimate without submitting it")

    sub.add_parser("records", help="List live crowd records")

    janitor = sub.add_parser("janitor", help="Purge stale records periodically")
    janitor.add_argument("--once", action="store_true", help="Run a single sweep and exit")
    return parser


async def _cmd_scan(config: CrowdSenseConfig, args: argparse.Namespace) -> int:
    if (args.lat is None) != (args.lon is None):
        print("--lat and --lon must be given together", file=sys.stderr)
        return 2
    location = LatestLocation()
    if args.lat is not None:
        location = LatestLocation(Coordinate(latitude=args.lat, longitude=args.lon))

    async with BleakDiscoverySensor(adapter=args.adapter) as sensor:
        scanner = Scanner(sensor, location, config=config)
        tally = await scanner.scan()

    crowd = estimate(tally)
    print(f"{crowd.people_count} people, {crowd.level.upper()} {crowd.level.range_label}")
    print(f"~ {tally.total_count} devices ({tally.unknown_count} unknown)")
    if tally.location_is_fallback:
        print("Location not available, using default coordinate")

    if args.no_submit:
        return 0
    async with CrowdClient(config) as client:
        result = await client.submit(tally)
    print(f"Submitted record {result.record.id}; removed {len(result.deleted_ids)} superseded or stale records")
    return 0


async def _cmd_records(config: CrowdSenseConfig) -> int:
    async with CrowdClient(config) as client:
        records = await client.fetch_records()
    for record in records:
        created = record.created_at.isoformat() if record.created_at is not None else "?"
        level = crowd_level(record.people_count)
        print(
            f"{record.id:>6}  {record.people_count:>4} people  {level:<9}  "
            f"{record.latitude:.5f},{record.longitude:.5f}  {created}"
        )
    return 0


async def _cmd_janitor(config: CrowdSenseConfig, args: argparse.Namespace) -> int:
    async with CrowdClient(config) as client:
        if args.once:
            deleted = await client.sweep()
            print(f"Removed {len(deleted)} stale records")
            return 0
        client.start_janitor()
        _logger.info("Janitor running every %.0fs, Ctrl-C to stop", config.sweep_interval)
        await asyncio.Event().wait()
    return 0


async def _run(args: argparse.Namespace) -> int:
    config = CrowdSenseConfig.from_env()
    if args.command == "scan":
        return await _cmd_scan(config, args)
    if args.command == "records":
        return await _cmd_records(config)
    return await _cmd_janitor(config, args)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 130
    except CrowdSenseError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
