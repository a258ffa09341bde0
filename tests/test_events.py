"""
tests/test_events.py
─────────────────────
Tests for the change notification bus.
"""
from src.data.events import ChangeBus, RevisionCounter


class TestChangeBus:
    def test_listeners_called_in_order(self, bus):
        calls = []
        bus.subscribe(lambda: calls.append("a"))
        bus.subscribe(lambda: calls.append("b"))
        bus.notify()
        assert calls == ["a", "b"]
        assert bus.notifications == 1

    def test_unsubscribe(self, bus):
        calls = []

        def listener():
            calls.append(1)

        bus.subscribe(listener)
        bus.unsubscribe(listener)
        bus.unsubscribe(listener)  # unknown listener is ignored
        bus.notify()
        assert calls == []
        assert len(bus) == 0

    def test_listener_may_unsubscribe_itself(self, bus):
        calls = []

        def once():
            calls.append("once")
            bus.unsubscribe(once)

        bus.subscribe(once)
        bus.subscribe(lambda: calls.append("other"))
        bus.notify()
        bus.notify()
        assert calls == ["once", "other", "other"]

    def test_failing_listener_does_not_block_others(self, bus):
        calls = []

        def broken():
            raise RuntimeError("boom")

        bus.subscribe(broken)
        bus.subscribe(lambda: calls.append("ok"))
        bus.notify()
        assert calls == ["ok"]


class TestRevisionCounter:
    def test_counts_notifications(self):
        bus = ChangeBus()
        counter = RevisionCounter()
        bus.subscribe(counter)
        assert counter.revision == 0
        bus.notify()
        bus.notify()
        assert counter.revision == 2

    def test_repository_mutation_bumps_revision(self, repository, bus):
        counter = RevisionCounter()
        bus.subscribe(counter)
        repository.update_substation("SUB-001", name="North")
        assert counter.revision == 1

    def test_reads_do_not_notify(self, repository, bus):
        before = bus.notifications
        repository.list_alerts()
        repository.get_equipment("EQ-2023-001")
        assert bus.notifications == before
