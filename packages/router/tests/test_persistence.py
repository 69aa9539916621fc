"""Tests for Q-table export/import and the JSON file store."""

import json

import pytest

from ai_router import (
    PersistenceError,
    QLearningRouter,
    decode_table,
    encode_state,
    load_table,
    save_table,
)

CONTEXTS = ["task1", "task2", "task3", "write docs", "profile hot loop"]


@pytest.fixture
def trained_router(router):
    router.update("task1", "coder", 10.0)
    router.update("task2", "tester", 8.0)
    router.update("task3", "reviewer", 6.0, "task1")
    router.update("write docs", "documenter", 4.0)
    router.update("profile hot loop", "optimizer", 2.0)
    router.update("profile hot loop", "optimizer", 2.0)
    return router


class TestExport:
    """Tests for export_table()."""

    def test_export_shape(self, trained_router):
        exported = trained_router.export_table()
        assert len(exported) == 5
        entry = exported[encode_state("profile hot loop")]
        assert set(entry) == {"qValues", "visits"}
        assert len(entry["qValues"]) == 8
        assert entry["visits"] == 2

    def test_export_is_a_copy(self, trained_router):
        exported = trained_router.export_table()
        exported[encode_state("task1")]["qValues"][0] = -999.0
        assert trained_router.route("task1", False).q_values[0] == pytest.approx(1.0)

    def test_export_is_json_serialisable(self, trained_router):
        exported = trained_router.export_table()
        assert json.loads(json.dumps(exported)) == exported

    def test_export_alias(self, trained_router):
        assert trained_router.export() == trained_router.export_table()


class TestImport:
    """Tests for import_table()."""

    def test_round_trip_reproduces_decisions(self, trained_router):
        before = {ctx: trained_router.route(ctx, False) for ctx in CONTEXTS}
        exported = trained_router.export_table()

        trained_router.reset()
        assert trained_router.get_stats().q_table_size == 0
        trained_router.import_table(exported)

        for ctx in CONTEXTS:
            after = trained_router.route(ctx, False)
            assert after.route == before[ctx].route
            assert after.q_values == before[ctx].q_values

    def test_import_into_new_router(self, trained_router):
        exported = trained_router.export_table()
        fresh = QLearningRouter()
        fresh.import_table(exported)

        assert fresh.get_stats().q_table_size == trained_router.get_stats().q_table_size
        assert fresh.route("task1", False).q_values == trained_router.route("task1", False).q_values

    def test_import_replaces_existing_data(self, router):
        router.update("old", "coder", 1.0)
        router.import_table({"new_state": {"qValues": [1, 2, 3, 4, 5, 6, 7, 8], "visits": 1}})

        assert router.get_stats().q_table_size == 1
        assert encode_state("old") not in router.export_table()

    def test_import_accepts_arbitrary_keys(self, router):
        count = router.import_table({
            "state_123": {"qValues": [1, 2, 3, 4, 5, 6, 7, 8], "visits": 5},
            "state_456": {"qValues": [8, 7, 6, 5, 4, 3, 2, 1], "visits": 3},
        })
        assert count == 2
        assert router.get_stats().q_table_size == 2

    def test_malformed_entries_are_skipped(self, router):
        count = router.import_table({
            "good": {"qValues": [0.0] * 8, "visits": 1},
            "short": {"qValues": [1.0, 2.0], "visits": 1},
            "long": {"qValues": [1.0] * 9, "visits": 1},
            "text": {"qValues": "not a list", "visits": 1},
            "negative": {"qValues": [0.0] * 8, "visits": -3},
            "missing": {"visits": 2},
            "scalar": 42,
        })
        assert count == 1
        assert set(router.export_table()) == {"good"}

    def test_non_finite_values_are_skipped(self, router):
        count = router.import_table({
            "good": {"qValues": [0.0] * 8, "visits": 1},
            "nan": {"qValues": [float("nan")] + [0.0] * 7, "visits": 1},
            "inf": {"qValues": [0.0] * 7 + [float("inf")], "visits": 1},
        })
        assert count == 1
        assert set(router.export_table()) == {"good"}

    def test_visits_default_to_zero(self, router):
        router.import_table({"bare": {"qValues": [0.0] * 8}})
        assert router.export_table()["bare"]["visits"] == 0

    def test_import_over_capacity_keeps_most_visited(self):
        small = QLearningRouter(num_actions=2, max_states=2)
        small.import_table({
            "a": {"qValues": [1.0, 0.0], "visits": 5},
            "b": {"qValues": [1.0, 0.0], "visits": 1},
            "c": {"qValues": [1.0, 0.0], "visits": 3},
        })
        assert set(small.export_table()) == {"a", "c"}

    def test_non_mapping_import_leaves_table_alone(self, trained_router):
        before = trained_router.export_table()
        assert trained_router.import_table(["not", "a", "mapping"]) == len(before)
        assert trained_router.export_table() == before

    def test_import_keeps_counters(self, trained_router):
        stats = trained_router.get_stats()
        trained_router.import_table({})
        after = trained_router.get_stats()
        assert after.q_table_size == 0
        assert after.update_count == stats.update_count
        assert after.epsilon == stats.epsilon


class TestDecodeTable:

    def test_returns_skipped_keys(self):
        result = decode_table(
            {"ok": {"qValues": [1.0, 2.0]}, "bad": {"qValues": [1.0]}},
            num_actions=2,
        )
        assert result.entries == [("ok", [1.0, 2.0], 0)]
        assert result.skipped == ["bad"]


class TestFileStore:
    """Tests for save_table() / load_table()."""

    def test_save_and_load(self, tmp_path, trained_router):
        path = save_table(tmp_path / "router" / "qtable.json", trained_router.export_table())
        assert path.exists()

        restored = QLearningRouter()
        restored.import_table(load_table(path))

        for ctx in CONTEXTS:
            assert restored.route(ctx, False).q_values == trained_router.route(ctx, False).q_values

    def test_save_leaves_no_temp_files(self, tmp_path):
        save_table(tmp_path / "qtable.json", {})
        assert [p.name for p in tmp_path.iterdir()] == ["qtable.json"]

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(PersistenceError):
            load_table(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(PersistenceError):
            load_table(path)

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(PersistenceError) as exc_info:
            load_table(path)
        assert exc_info.value.context["type"] == "list"

    def test_save_unserialisable_data(self, tmp_path):
        with pytest.raises(PersistenceError):
            save_table(tmp_path / "bad.json", {"s": {"qValues": [object()], "visits": 1}})
        assert list(tmp_path.iterdir()) == []
