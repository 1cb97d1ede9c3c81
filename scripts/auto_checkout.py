"""Close attendance records still IN past the cutoff.

Meant for cron, e.g. nightly at 23:59:

    python scripts/auto_checkout.py --end-time 23:59:59
"""

from __future__ import annotations

import argparse
import importlib
import logging

from dotenv import load_dotenv

from gym_backoffice.common.logging_setup import configure_logging
from gym_backoffice.config import get_settings_module
from gym_backoffice.container import build_container
from gym_backoffice.core.constants import DEFAULT_CUTOFF_TIME

logger = logging.getLogger("auto_checkout")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--end-time", default=None, help="Checkout time, HH:MM or HH:MM:SS")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        cutoff_time=getattr(settings, "ATTENDANCE_CUTOFF_TIME", DEFAULT_CUTOFF_TIME),
    )
    count, cutoff = container.attendance_service.force_checkout(args.end_time)
    logger.info("Auto-checkout completed. %d client(s) checked out at %s", count, cutoff.strftime("%H:%M:%S"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
