"""Scheduler - periodic gold price refresh"""

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from utils.cache import PriceCache
from utils.errors import UpstreamFetchError

JOB_ID = "gold-price-refresh"


class RefreshScheduler:
    """
    Refreshes the price cache on a fixed interval, independent of traffic.

    A failed tick is logged and dropped; the cache keeps serving the last good
    record and the next tick tries again. Overlapping ticks are prevented both
    by the job's max_instances=1 and by the cache's single-flight refresh.
    """

    def __init__(self, price_cache: PriceCache, interval_minutes: int = 5,
                 scheduler: Optional[BackgroundScheduler] = None,
                 logger: Optional[logging.Logger] = None):
        if interval_minutes <= 0:
            raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")
        self.price_cache = price_cache
        self.interval_minutes = interval_minutes
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self.logger = logger or logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return bool(self.scheduler.running)

    @property
    def next_run_time(self):
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    def start(self):
        """Register the refresh job and start the background scheduler."""
        if self.running:
            self.logger.warning("Refresh scheduler already running")
            return
        self.scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=JOB_ID,
            name="Gold price refresh",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        self.logger.info("Refresh scheduler started, every %d minute(s)", self.interval_minutes)

    def shutdown(self, wait: bool = False):
        if not self.running:
            return
        self.scheduler.shutdown(wait=wait)
        self.logger.info("Refresh scheduler stopped")

    def run_once(self) -> bool:
        """One scheduled tick. Returns True if the cache was refreshed."""
        self.logger.info("Running scheduled update (every %d minutes)", self.interval_minutes)
        try:
            record = self.price_cache.refresh()
        except UpstreamFetchError as e:
            self.logger.warning("Scheduled refresh failed, keeping last known price: %s", e)
            return False
        self.logger.info("Scheduled refresh done: %.2f %s", record.price, record.currency)
        return True
