#!/usr/bin/env python

"""Unit tests for airgw.stats module"""



import asyncio
import datetime
import unittest

from airgw import stats



class Test_TransactionStats_class(unittest.TestCase):

    def setUp(self):
        self.stats = stats.TransactionStats()


    def test_initial(self):
        snapshot = self.stats.snapshot()
        self.assertEqual(snapshot.total, 0)
        self.assertEqual(snapshot.succeeded, 0)
        self.assertEqual(snapshot.failed, 0)
        self.assertEqual(snapshot.average_response_time_ms, 0.0)
        self.assertEqual(snapshot.success_rate, 0.0)
        self.assertTrue(isinstance(snapshot.last_reset, datetime.datetime))


    def test_moving_average(self):
        self.stats.begin()
        self.stats.update(True, 100)
        self.assertAlmostEqual(self.stats.snapshot().average_response_time_ms,
                               10.0)
        self.stats.begin()
        self.stats.update(False, 200)
        snapshot = self.stats.snapshot()
        self.assertAlmostEqual(snapshot.average_response_time_ms, 29.0)
        self.assertEqual((snapshot.total, snapshot.succeeded, snapshot.failed),
                         (2, 1, 1))
        self.assertAlmostEqual(snapshot.success_rate, 50.0)


    def test_snapshot_is_a_copy(self):
        snapshot = self.stats.snapshot()
        self.stats.begin()
        self.stats.update(True, 10)
        self.assertEqual(snapshot.total, 0)
        self.assertEqual(self.stats.snapshot().total, 1)


    def test_reset(self):
        before = self.stats.snapshot().last_reset
        self.stats.begin()
        self.stats.update(True, 100)
        self.stats.reset()
        snapshot = self.stats.snapshot()
        self.assertEqual((snapshot.total, snapshot.succeeded, snapshot.failed),
                         (0, 0, 0))
        self.assertEqual(snapshot.average_response_time_ms, 0.0)
        self.assertTrue(snapshot.last_reset >= before)

        # a call started before the reset completes after it
        self.stats.update(True, 50)
        snapshot = self.stats.snapshot()
        self.assertEqual((snapshot.total, snapshot.succeeded), (0, 1))
        self.assertAlmostEqual(snapshot.average_response_time_ms, 5.0)



class Test_StatsReporter_class(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.stats = stats.TransactionStats()
        self.stats.begin()
        self.stats.update(True, 100)
        self.reporter = stats.StatsReporter(self.stats.snapshot, interval=10)


    async def test_periodic_report(self):
        with self.assertLogs('airgw.stats', 'INFO') as cm:
            self.reporter.start()
            self.assertTrue(self.reporter.running)
            await asyncio.sleep(0.1)
            await self.reporter.stop()
        self.assertFalse(self.reporter.running)
        self.assertTrue(len(cm.output) >= 1)
        self.assertTrue('Total: 1, Success: 1, Failed: 0, '
                        'Success Rate: 100.00%, '
                        'Avg Response Time: 10.00ms' in cm.output[0])


    async def test_stop_without_start(self):
        await self.reporter.stop()
        self.assertFalse(self.reporter.running)


if __name__ == '__main__':
    unittest.main(testRunner=unittest.TextTestRunner(verbosity=2))
