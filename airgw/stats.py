# airgw/stats.py

"""Transaction statistics and their optional periodic reporter"""


import asyncio
import datetime
import logging
import threading

from collections import namedtuple

from .common.const import DEFAULT_STATS_INTERVAL, STATS_SMOOTHING_FACTOR



class StatsSnapshot(namedtuple('StatsSnapshot', 'total succeeded failed '
                                                'average_response_time_ms '
                                                'last_reset')):

    """Immutable copy of the statistics at some moment"""

    __slots__ = ()

    @property
    def success_rate(self):
        "Percentage of succeeded calls (0.0 when there were no calls)"
        if not self.total:
            return 0.0
        return self.succeeded * 100.0 / self.total



class TransactionStats(object):

    """Counters + exponentially weighted moving average of latency.

    average = alpha * elapsed + (1 - alpha) * average

    All updates are done under a lock. reset() does not wait for calls
    in flight -- they will be recorded in the fresh accumulator.

    """

    def __init__(self, alpha=STATS_SMOOTHING_FACTOR):
        self.alpha = alpha
        self._lock = threading.Lock()
        self.reset()


    def reset(self):
        with self._lock:
            self._total = 0
            self._succeeded = 0
            self._failed = 0
            self._average = 0.0
            self._last_reset = datetime.datetime.now(datetime.timezone.utc)


    def begin(self):
        "Count a call being started"
        with self._lock:
            self._total += 1


    def update(self, success, elapsed_ms):
        "Record a call completion"
        with self._lock:
            if success:
                self._succeeded += 1
            else:
                self._failed += 1
            self._average = (self.alpha * elapsed_ms +
                             (1 - self.alpha) * self._average)


    def snapshot(self):
        with self._lock:
            return StatsSnapshot(self._total, self._succeeded, self._failed,
                                 self._average, self._last_reset)



class StatsReporter(object):

    """Asyncio task logging a statistics snapshot every `interval' ms.

    Arguments:

    * get_stats -- a callable returning a StatsSnapshot (typically:
      Gateway.get_stats);

    * interval (int) -- in milliseconds (default --
      see: airgw.common.const.DEFAULT_STATS_INTERVAL);

    * log (logging.Logger instance or None) -- default: 'airgw.stats'.

    """

    def __init__(self, get_stats, interval=DEFAULT_STATS_INTERVAL, log=None):
        self._get_stats = get_stats
        self.interval = interval
        self._log = log if log is not None else logging.getLogger('airgw.stats')
        self._task = None


    @property
    def running(self):
        return self._task is not None and not self._task.done()


    def start(self):
        "Start reporting (must be called with a running event loop)"
        if self.running:
            return
        self._task = asyncio.ensure_future(self._run())


    async def stop(self):
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


    def report(self):
        stats = self._get_stats()
        self._log.info('AIR stats - Total: %d, Success: %d, Failed: %d, '
                       'Success Rate: %.2f%%, Avg Response Time: %.2fms',
                       stats.total, stats.succeeded, stats.failed,
                       stats.success_rate, stats.average_response_time_ms)


    async def _run(self):
        while True:
            await asyncio.sleep(self.interval / 1000.0)
            self.report()
