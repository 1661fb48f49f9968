"""Tests for the per-key lock registry."""

import threading
import time

from placement_portal.core.locks import KeyedLock


class TestKeyedLock:
    def test_same_key_is_serialized(self):
        locks = KeyedLock()
        active = []
        overlaps = []

        def worker():
            with locks.hold("drive-1"):
                active.append(1)
                if len(active) > 1:
                    overlaps.append(True)
                time.sleep(0.01)
                active.pop()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert overlaps == []

    def test_different_keys_do_not_block_each_other(self):
        locks = KeyedLock()
        entered = threading.Event()

        with locks.hold("a"):
            def other():
                with locks.hold("b"):
                    entered.set()

            t = threading.Thread(target=other)
            t.start()
            assert entered.wait(timeout=2)
            t.join()

    def test_unused_locks_are_dropped(self):
        locks = KeyedLock()
        with locks.hold("a"):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_lock_released_on_error(self):
        locks = KeyedLock()
        try:
            with locks.hold("a"):
                raise ValueError("boom")
        except ValueError:
            pass
        with locks.hold("a"):
            pass
        assert len(locks) == 0
