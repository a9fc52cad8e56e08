"""ResponseStore tests — mutation, isolation and the save/fetch round trip."""

from awv_visits.responses import ResponseStore


class TestResponseStore:

    def test_save_then_fetch_reproduces_answers(self):
        """Store → save payload → fetch payload yields identical answers."""
        store = ResponseStore()
        store.set("q1", "no")
        store.set("q2", ["a", "c"])
        store.set("bmi", {"height": 70, "weight": 180, "bmi": 25.8})
        store.set("count", 0)

        payload = store.to_payload()
        restored = ResponseStore.from_payload(payload)

        assert dict(restored) == dict(store)
        assert restored.to_payload() == payload

    def test_payload_is_isolated_from_store(self):
        """Mutating a saved payload must not leak back into the store."""
        store = ResponseStore({"q2": ["a"]})
        payload = store.to_payload()
        payload["q2"].append("b")
        assert store["q2"] == ["a"]

    def test_set_copies_value(self):
        value = ["a"]
        store = ResponseStore()
        store.set("q1", value)
        value.append("b")
        assert store["q1"] == ["a"]

    def test_from_none_payload_is_empty(self):
        assert len(ResponseStore.from_payload(None)) == 0

    def test_clear_and_answered(self):
        store = ResponseStore({"q1": "yes", "q2": None})
        assert store.is_answered("q1") is True
        assert store.is_answered("q2") is False
        assert store.answered_ids() == ["q1"]
        store.clear("q1")
        store.clear("missing")
        assert "q1" not in store

    def test_update_records_many(self):
        store = ResponseStore()
        store.update({"q1": "yes", "q2": 3})
        assert dict(store) == {"q1": "yes", "q2": 3}
