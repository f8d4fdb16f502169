"""Tests for zip() — joining several observables into a tuple observable."""

import gc
import threading
import weakref

import pytest

from twoway import Observable, zip


class TestZip:
    def test_slots_update_independently(self):
        o = Observable()
        p = Observable()
        op = zip(o, p)
        log = []
        op.bind(log.append, replay=False)

        o.set("foo")
        p.set(42)
        o.set("bar")
        assert log == [("foo", None), ("foo", 42), ("bar", 42)]

    def test_released_parent_keeps_last_value(self):
        o = Observable()
        p = Observable()
        op = zip(o, p)
        log = []
        op.bind(log.append, replay=False)
        o.set("foo")
        p.set(42)

        del p
        gc.collect()
        o.set("baz")
        assert log[-1] == ("baz", 42)

    def test_released_parent_is_kept_alive(self):
        o, p = Observable(), Observable()
        op = zip(o, p)
        p_ref = weakref.ref(p)
        del p
        gc.collect()
        assert p_ref() is not None
        p_ref().set(7)
        assert op.get() == (None, 7)

    def test_replay_publishes_initial_tuple(self):
        op = zip(Observable("a"), Observable())
        assert op.get() == ("a", None)

    def test_replay_with_nothing_set(self):
        assert zip(Observable(), Observable()).get() == (None, None)

    def test_no_replay(self):
        op = zip(Observable("a"), Observable(1), replay=False)
        assert op.get() is None

    def test_no_replay_first_emission_fills_one_slot(self):
        a, b = Observable("a"), Observable(1)
        op = zip(a, b, replay=False)
        b.set(2)
        assert op.get() == (None, 2)

    @pytest.mark.parametrize("width", [3, 4, 5])
    def test_wider_zips(self, width):
        sources = [Observable() for _ in range(width)]
        op = zip(*sources)
        assert op.get() == (None,) * width
        sources[-1].set("last")
        sources[0].set("first")
        expected = ["first"] + [None] * (width - 2) + ["last"]
        assert op.get() == tuple(expected)

    @pytest.mark.parametrize("width", [0, 1, 6])
    def test_wrong_arity(self, width):
        with pytest.raises(TypeError, match="2 to 5"):
            zip(*[Observable() for _ in range(width)])

    def test_released_zip_detaches_from_all_parents(self):
        a, b, c = Observable(), Observable(), Observable()
        op = zip(a, b, c)
        assert (a.observer_count, b.observer_count, c.observer_count) == (1, 1, 1)
        del op
        gc.collect()
        assert (a.observer_count, b.observer_count, c.observer_count) == (0, 0, 0)

    def test_zip_of_derived(self):
        name = Observable()
        op = zip(name.map(str.upper), name.map(len))
        name.set("ada")
        assert op.get() == ("ADA", 3)

    def test_paused_zip_still_tracks_slots(self):
        a, b = Observable(), Observable()
        op = zip(a, b)
        log = []
        op.bind(log.append, replay=False)
        with op.paused():
            a.set(1)
        b.set(2)
        assert log == [(1, 2)]

    def test_reentrant_update_from_observer(self):
        a, b = Observable(), Observable()
        op = zip(a, b)

        def echo(values):
            if values[0] == "ping" and values[1] is None:
                b.set("pong")

        op.bind(echo, replay=False)
        a.set("ping")
        assert op.get() == ("ping", "pong")


class TestZipConcurrency:
    def test_observers_run_under_zip_lock(self):
        a, b = Observable(), Observable()
        op = zip(a, b, replay=False)
        blocked = []

        def observer(values):
            if values == ("first", None):
                other = threading.Thread(target=b.set, args=("second",), daemon=True)
                other.start()
                other.join(0.2)
                blocked.append(other.is_alive())
                blocked.append(other)

        op.bind(observer)
        a.set("first")
        other = blocked[1]
        other.join(5)
        assert blocked[0] is True
        assert not other.is_alive()
        assert op.get() == ("first", "second")

    def test_concurrent_parents_lose_no_updates(self):
        a, b = Observable(), Observable()
        op = zip(a, b)
        n = 2000
        start = threading.Barrier(2)

        def drive(source):
            start.wait()
            for i in range(n):
                source.set(i)

        threads = [threading.Thread(target=drive, args=(s,)) for s in (a, b)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert op.get() == (n - 1, n - 1)

    def test_each_emission_is_a_consistent_tuple(self):
        a, b = Observable(), Observable()
        op = zip(a, b, replay=False)
        seen = []
        op.bind(seen.append)
        start = threading.Barrier(2)

        def drive(source, tag):
            start.wait()
            for i in range(500):
                source.set((tag, i))

        threads = [
            threading.Thread(target=drive, args=(a, "a")),
            threading.Thread(target=drive, args=(b, "b")),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == 1000
        last_a = last_b = -1
        for slot_a, slot_b in seen:
            if slot_a is not None:
                assert slot_a[1] >= last_a
                last_a = slot_a[1]
            if slot_b is not None:
                assert slot_b[1] >= last_b
                last_b = slot_b[1]
