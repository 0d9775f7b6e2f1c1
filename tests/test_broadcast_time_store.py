"""
Unit tests for the in-memory broadcast time store.
"""

import threading


class TestBroadcastTimeStore:

    def test_empty_until_set(self, store):
        assert store.get() is None
        assert store.available is False

    def test_set_then_get_exact(self, store):
        from broadcast_time.interfaces.time_result import BroadcastTimePair

        store.set(1000, 2000)
        assert store.get() == BroadcastTimePair(utc=1000, local=2000)
        assert store.available is True

    def test_last_write_wins(self, store):
        store.set(1000, 2000)
        store.set(3000, 4000)
        pair = store.get()
        assert (pair.utc, pair.local) == (3000, 4000)

    def test_no_range_validation(self, store):
        store.set(-1, 2 ** 70)
        pair = store.get()
        assert (pair.utc, pair.local) == (-1, 2 ** 70)

    def test_stores_are_independent(self):
        from broadcast_time.engine import BroadcastTimeStore

        a = BroadcastTimeStore()
        b = BroadcastTimeStore()
        a.set(1, 2)
        assert b.get() is None

    def test_concurrent_readers_never_see_torn_pair(self, store):
        """Every pair written has local == utc + 3600; readers must agree."""
        store.set(0, 3600)
        torn = []
        done = threading.Event()

        def writer():
            for i in range(20000):
                store.set(i, i + 3600)
            done.set()

        def reader():
            while not done.is_set():
                pair = store.get()
                if pair.local - pair.utc != 3600:
                    torn.append(pair)

        threads = [threading.Thread(target=writer)] + [
            threading.Thread(target=reader) for _ in range(3)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert torn == []
        assert store.get().utc == 19999
