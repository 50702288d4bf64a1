import argparse
import logging
import math
import time
from importlib.metadata import PackageNotFoundError, version
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from rate_regulator.factory import create_from_string
from rate_regulator.regulator import RateRegulator
from rate_regulator.relative_time import resolve_relative_time
from rate_regulator.types import system_clock
from rate_regulator.utils.config import get_config
from rate_regulator.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


class CLIArgsModel(BaseModel):
    items: int = Field(default=5, ge=0)
    max_wait: Optional[float] = Field(default=None, ge=0)
    period: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("period")
    @classmethod
    def period_parses(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            resolve_relative_time(v, system_clock())
        return v


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description=(
            "Rate regulator demo. Defaults come from config.json, overridden by "
            "config.local.json, environment variables and finally by CLI flags."
        )
    )
    try:
        pkg_version = version("rate-regulator")
    except PackageNotFoundError:
        from rate_regulator import __version__ as pkg_version

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {pkg_version}"
    )
    parser.add_argument(
        "--amount", type=float, help="Units to process per period. Overrides config files."
    )
    parser.add_argument(
        "--period",
        type=str,
        help='Relative period length, e.g. "+1 hour". Overrides config files.',
    )
    parser.add_argument(
        "--count", type=float, help="Units already processed. Overrides config files."
    )
    parser.add_argument(
        "--items", type=int, default=5, help="Number of units the demo loop processes"
    )
    parser.add_argument(
        "--max-wait",
        type=float,
        default=None,
        help="Upper bound in seconds for a single wait in the demo loop",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Log wait times without sleeping"
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Log a single status snapshot and exit",
    )
    parser.add_argument(
        "--config-dir", type=str, help="Directory holding config.json"
    )
    parser.add_argument("--log-dir", type=str, help="Directory for the log file")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level for the application. Overrides config files.",
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Output logs in JSON format"
    )

    args = parser.parse_args(argv)
    try:
        CLIArgsModel(**vars(args))
    except ValidationError as e:
        parser.error(str(e))
    return args


def log_status(regulator: RateRegulator, now: Optional[float] = None) -> dict:
    status = regulator.status(now)
    logger.info("Runtime: %.3f seconds", status["runtime"])
    logger.info("Regulated rate is %.6f per second", status["regulated_rate"])
    logger.info("Regulated rate is %.2f per hour", status["regulated_rate"] * 60 * 60)
    logger.info("Regulator has run %s items", status["count"])
    logger.info(
        "Regulator is %s. Actual rate: %.6f, wait for 1 item: %.3f seconds",
        "over" if status["over"] else "under",
        status["actual_rate"],
        status["wait_time"],
    )
    return status


def run_demo(
    regulator: RateRegulator,
    items: int,
    *,
    max_wait: Optional[float] = None,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> List[float]:
    """Process ``items`` units, pausing whenever the regulator is over.

    Returns the wait applied before each unit.
    """
    waits = []
    processed = regulator.get_count()
    for _ in range(items):
        processed += 1
        regulator.add_quantity(processed)
        status = regulator.status()
        if not status["over"]:
            logger.info("Regulator is under. Actual rate: %.6f", status["actual_rate"])
            waits.append(0.0)
            continue

        wait = status["wait_time"]
        if not math.isfinite(wait):
            logger.warning("Wait time %s is not finite, not waiting", wait)
            wait = 0.0
        wait = max(0.0, wait)
        if max_wait is not None:
            wait = min(wait, max_wait)
        logger.info(
            "Regulator is over. Regulated rate: %.6f, actual rate: %.6f. "
            "Waiting %.3f seconds to send 1 item",
            status["regulated_rate"],
            status["actual_rate"],
            wait,
        )
        if wait > 0 and not dry_run:
            sleep(wait)
        waits.append(wait)
    return waits


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    config = get_config(args.config_dir)
    setup_logging(
        level=args.log_level or config["log_level"],
        log_dir=args.log_dir,
        json_logs=args.json_logs or config["json_logs"],
    )

    amount = args.amount if args.amount is not None else config["amount"]
    period = args.period or config["period"]
    count = args.count if args.count is not None else config["count"]

    try:
        regulator = create_from_string(amount, period, count=count)
        if args.status:
            log_status(regulator)
            return

        logger.info("=== Rate Regulator Demo Started ===")
        waits = run_demo(
            regulator,
            args.items,
            max_wait=args.max_wait,
            dry_run=args.dry_run,
        )
        logger.info(
            "Processed %d items, total wait %.3f seconds", len(waits), sum(waits)
        )
        log_status(regulator)
    except Exception:
        logger.exception("Error in main")
        raise


if __name__ == "__main__":
    main()
