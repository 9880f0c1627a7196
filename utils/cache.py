from __future__ import annotations
import logging
import math
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from utils.errors import InitializationError, UpstreamFetchError

logger = logging.getLogger(__name__)

CURRENCY = "USD"
UNIT = "troy_ounce"
DEFAULT_SYMBOL = "GC=F"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PriceRecord:
    """One fetched gold quote, in USD per troy ounce."""
    price: float
    fetched_at: datetime
    symbol: str = DEFAULT_SYMBOL
    currency: str = CURRENCY
    unit: str = UNIT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goldPricePerOunceUSD": self.price,
            "currency": self.currency,
            "unit": self.unit,
            "symbol": self.symbol,
            "fetchedAt": self.fetched_at.isoformat(),
        }


@dataclass(frozen=True)
class CacheState:
    record: PriceRecord
    last_updated: datetime


@dataclass(frozen=True)
class PriceView:
    """What readers get: a record, its timestamp and its age, all from one snapshot."""
    record: PriceRecord
    last_updated: datetime
    minutes_since_update: float


def _coerce_price(raw: Any) -> float:
    """
    Turns whatever the provider handed back into a usable price.
    Rejects booleans, non-numeric strings, NaN/inf, zero and negatives.
    """
    if raw is None or isinstance(raw, bool):
        raise ValueError(f"Price is not numeric: {raw!r}")
    try:
        price = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Price is not numeric: {raw!r}") from None
    if not math.isfinite(price):
        raise ValueError(f"Price is not finite: {raw!r}")
    if price <= 0:
        raise ValueError(f"Price must be positive, got {price}")
    return price


class PriceCache:
    """
    Holds the most recent gold quote.

    Readers grab the current immutable CacheState in one step, so the record
    and its timestamp always come from the same fetch. Refreshes are
    single-flight: while one upstream call is running, other callers wait on
    its Future and get the same record (or the same error).
    """

    def __init__(
        self,
        fetcher: Callable[[], Any],
        symbol: str = DEFAULT_SYMBOL,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.symbol = symbol
        self._fetcher = fetcher
        self._clock = clock
        self._state: Optional[CacheState] = None
        self._guard = threading.Lock()
        self._inflight: Optional[Future] = None

    # ---- reads ----

    @property
    def last_updated(self) -> Optional[datetime]:
        state = self._state
        return state.last_updated if state else None

    @property
    def is_warm(self) -> bool:
        return self._state is not None

    @property
    def refreshing(self) -> bool:
        return self._inflight is not None

    def view(self) -> Optional[PriceView]:
        """Record, timestamp and staleness read from a single snapshot, None if never fetched."""
        state = self._state
        if state is None:
            return None
        return PriceView(
            record=state.record,
            last_updated=state.last_updated,
            minutes_since_update=self._minutes_since(state),
        )

    def get_cached_data(self) -> Optional[PriceRecord]:
        state = self._state
        return state.record if state else None

    def get_time_since_last_update(self) -> Optional[float]:
        """Minutes (fractional) since the last successful fetch, None if never fetched."""
        state = self._state
        return self._minutes_since(state) if state else None

    def _minutes_since(self, state: CacheState) -> float:
        elapsed = (self._clock() - state.last_updated).total_seconds() / 60.0
        return max(0.0, elapsed)

    # ---- writes ----

    def initialize(self) -> PriceRecord:
        try:
            record = self.refresh()
        except UpstreamFetchError as e:
            raise InitializationError(f"Initial gold price fetch failed: {e}") from e
        logger.info("Price cache initialized at %.2f %s/%s", record.price, record.currency, record.unit)
        return record

    def refresh(self) -> PriceRecord:
        with self._guard:
            flight = self._inflight
            leader = flight is None
            if leader:
                flight = Future()
                self._inflight = flight

        if not leader:
            logger.debug("Refresh already in flight for %s, waiting on it", self.symbol)
            return flight.result()

        try:
            record = self._fetch()
        except BaseException as e:
            # waiters must always be released, even on KeyboardInterrupt/SystemExit
            if isinstance(e, UpstreamFetchError):
                flight.set_exception(e)
            else:
                aborted = UpstreamFetchError(f"Refresh for {self.symbol} aborted: {e!r}", symbol=self.symbol)
                aborted.__cause__ = e
                flight.set_exception(aborted)
            raise
        else:
            self._state = CacheState(record=record, last_updated=record.fetched_at)
            flight.set_result(record)
            return record
        finally:
            with self._guard:
                self._inflight = None

    def _fetch(self) -> PriceRecord:
        # one upstream call, no retry; the next tick or caller retries
        try:
            raw = self._fetcher()
            price = _coerce_price(raw)
        except Exception as e:
            logger.warning("Gold price fetch for %s failed: %s", self.symbol, e)
            raise UpstreamFetchError(f"Failed to fetch gold price for {self.symbol}: {e}", symbol=self.symbol) from e
        record = PriceRecord(price=price, fetched_at=self._clock(), symbol=self.symbol)
        logger.info("Fetched gold price %.2f for %s", record.price, self.symbol)
        return record
