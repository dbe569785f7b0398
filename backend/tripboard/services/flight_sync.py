"""
Background flight sync - periodically re-enriches today's flight segments.

Every segment that has been enriched at least once (successfully or not) has
`flight_auto_sync` set and is retried on each tick while its flight is today,
unless it was fetched within the throttle window.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple
from sqlalchemy.orm import Session

from tripboard.core.utils import utc_now
from tripboard.models.segment import Segment, TransportMode
from tripboard.services.flight_service import enrich_segment

logger = logging.getLogger(__name__)


def today_window(now: datetime) -> Tuple[datetime, datetime]:
    """[start, end) of the UTC calendar day containing `now`."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


class FlightSyncScheduler:
    """
    Owns the recurring flight sync task.

    `start()` schedules the loop on the running event loop and `stop()`
    cancels it. `run_once()` performs a single tick synchronously.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        interval_seconds: int = 3600,
        throttle_minutes: int = 50
    ):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.throttle = timedelta(minutes=throttle_minutes)
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def is_throttled(self, last_fetched_at: Optional[datetime], now: datetime) -> bool:
        """True when the last fetch happened less than the throttle window ago."""
        if last_fetched_at is None:
            return False
        return now - last_fetched_at < self.throttle

    def run_once(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Execute one sync tick.

        Candidates are read as plain rows up front, so a segment deleted or
        changed mid-tick only affects its own iteration.

        Returns:
            Tick statistics: checked, enriched, skipped, failed
        """
        now = now or utc_now()
        day_start, day_end = today_window(now)
        stats = {"checked": 0, "enriched": 0, "skipped": 0, "failed": 0}

        db = self.session_factory()
        try:
            candidates = db.query(
                Segment.id,
                Segment.transport_mode,
                Segment.flight_number,
                Segment.start_time,
                Segment.flight_last_fetched_at
            ).filter(
                Segment.transport_mode == TransportMode.FLIGHT,
                Segment.flight_auto_sync.is_(True),
                Segment.start_time >= day_start,
                Segment.start_time < day_end
            ).order_by(Segment.start_time, Segment.id).all()

            for segment_id, transport_mode, flight_number, start_time, last_fetched_at in candidates:
                stats["checked"] += 1
                if self.is_throttled(last_fetched_at, now):
                    stats["skipped"] += 1
                    continue

                try:
                    status = enrich_segment(
                        segment_id,
                        transport_mode,
                        flight_number,
                        start_time,
                        db,
                        now=now
                    )
                except Exception as e:
                    db.rollback()
                    stats["failed"] += 1
                    logger.error(f"Flight sync failed for segment {segment_id}: {e}", exc_info=True)
                    continue

                # None: no longer an enrichable flight, or deleted mid-tick
                if status is None:
                    stats["skipped"] += 1
                else:
                    stats["enriched"] += 1
        finally:
            db.close()

        logger.info(
            f"Flight sync tick: {stats['checked']} checked, {stats['enriched']} enriched, "
            f"{stats['skipped']} skipped, {stats['failed']} failed"
        )
        return stats

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await asyncio.to_thread(self.run_once)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Flight sync tick failed: {e}", exc_info=True)

    def start(self) -> None:
        """Start the recurring task on the running event loop."""
        if self.is_running:
            logger.warning("Flight sync already running, skipping start")
            return
        logger.info(f"Starting flight sync every {self.interval_seconds}s")
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def stop(self) -> None:
        """Cancel the recurring task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Flight sync stopped")
