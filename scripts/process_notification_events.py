"""Process pending notification events from the command line."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections import Counter

from app.application.use_cases.notifications import (
    NotificationPipeline,
    build_pipeline,
    count_dead_lettered_events,
    process_notification_event,
    process_pending_events,
)
from app.config import get_settings
from app.domain.entities import ProcessedEvent
from app.infrastructure.database import initialize_database
from app.utils import configure_logging

logger = logging.getLogger("process_notification_events")


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the scheduler run."""

    parser = argparse.ArgumentParser(
        description="Deliver notifications for pending warehouse events.",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Maximum number of events per batch (default: NOTIFICATION_BATCH_SIZE)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds to wait between batches. Without it a single batch runs.",
    )
    parser.add_argument(
        "--event-id",
        default=None,
        help="Process only this event instead of a batch.",
    )
    return parser.parse_args()


def _summarize(results: list[ProcessedEvent]) -> str:
    counts = Counter(result.status for result in results)
    return ", ".join(f"{status}={count}" for status, count in sorted(counts.items())) or "none"


async def _run(pipeline: NotificationPipeline, args: argparse.Namespace) -> int:
    if args.event_id:
        result = await process_notification_event(pipeline, args.event_id)
        print(f"{result.id}: {result.status}" + (f" ({result.error})" if result.error else ""))
        return 0 if result.status != "failed" else 1

    while True:
        results = await process_pending_events(pipeline, args.batch_size)
        logger.info("Processed %d events: %s", len(results), _summarize(results))
        dead_lettered = await count_dead_lettered_events(pipeline)
        if dead_lettered:
            logger.warning("%d events ran out of retries", dead_lettered)
        if args.interval is None:
            return 0
        await asyncio.sleep(args.interval)


def main() -> None:
    """Run the scheduler once, or forever when an interval is given."""

    args = parse_args()
    if args.batch_size is not None and args.batch_size <= 0:
        raise SystemExit("--batch-size must be a positive integer")
    if args.interval is not None and args.interval <= 0:
        raise SystemExit("--interval must be greater than zero")

    settings = get_settings()
    configure_logging(settings.log_level)
    initialize_database()

    try:
        exit_code = asyncio.run(_run(build_pipeline(settings), args))
    except KeyboardInterrupt:
        exit_code = 0
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
