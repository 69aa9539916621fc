"""Tests for the lock-serialized router wrapper."""

import threading
from concurrent.futures import ThreadPoolExecutor

from prometheus_client import REGISTRY

from ai_router import QLearningRouter, RouterSettings, SynchronizedRouter


class TestSynchronizedRouter:

    def test_wraps_default_router(self):
        shared = SynchronizedRouter()
        assert isinstance(shared.router, QLearningRouter)

    def test_concurrent_updates_are_all_counted(self):
        shared = SynchronizedRouter(QLearningRouter(seed=1))

        def worker(worker_id: int) -> None:
            for i in range(250):
                shared.update(f"task_{i % 5}", "coder", 1.0)
                shared.route(f"task_{worker_id}")

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(worker, range(8)))

        stats = shared.get_stats()
        assert stats.update_count == 8 * 250
        assert stats.step_count == 8 * 250
        assert stats.q_table_size == 8

    def test_concurrent_same_cell_updates_match_sequential(self):
        shared = SynchronizedRouter(QLearningRouter(learning_rate=0.5))
        sequential = QLearningRouter(learning_rate=0.5)

        threads = [
            threading.Thread(
                target=lambda: [shared.update("hot", "tester", 2.0) for _ in range(100)]
            )
            for _ in range(4)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        for _ in range(400):
            sequential.update("hot", "tester", 2.0)

        assert shared.export_table() == sequential.export_table()

    def test_export_import_round_trip(self):
        shared = SynchronizedRouter()
        shared.update("task", "reviewer", 5.0)
        exported = shared.export()

        shared.reset()
        assert shared.get_stats().q_table_size == 0

        assert shared.import_(exported) == 1
        assert shared.route("task", False).route == "reviewer"

    def test_lock_is_reentrant(self):
        shared = SynchronizedRouter()
        with shared.lock:
            shared.update("task", "coder", 1.0)
            assert shared.get_stats().update_count == 1

    def test_initialize_passes_through(self):
        shared = SynchronizedRouter()
        settings = RouterSettings(native_backend="backend_fixtures:NativeTestBackend", _env_file=None)
        assert shared.initialize(settings) is True
        assert shared.get_stats().use_native is True

    def test_close_passes_through(self):
        shared = SynchronizedRouter(QLearningRouter(name="sync-closed"))
        shared.close()
        assert REGISTRY.get_sample_value("ai_router_epsilon", {"router": "sync-closed"}) is None
