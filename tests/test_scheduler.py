"""Tests for set_scheduler() — auto-marshaled cross-thread dispatch."""

import threading

import pytest

import snarflux.store as _store_mod
from snarflux import create_store, set_scheduler
from conftest import counter


@pytest.fixture
def restore_scheduler():
    old_sched, old_thread = _store_mod._scheduler, _store_mod._scheduler_thread
    yield
    _store_mod._scheduler = old_sched
    _store_mod._scheduler_thread = old_thread


def _dispatch_in_background(store, action):
    done = threading.Event()
    result = []

    def bg():
        result.append(store.dispatch(action))
        done.set()

    threading.Thread(target=bg).start()
    done.wait(timeout=2)
    return result[0]


class TestAutoMarshal:
    def test_main_thread_is_synchronous(self, restore_scheduler):
        calls = []
        set_scheduler(calls.append)
        store = create_store(counter)
        store.dispatch({"type": "INC"})
        assert store.get_state() == 1
        assert calls == []

    def test_background_thread_marshals(self, restore_scheduler):
        calls = []
        set_scheduler(calls.append)
        store = create_store(counter)
        action = {"type": "INC"}

        assert _dispatch_in_background(store, action) is action
        assert store.get_state() == 0  # not run yet
        assert len(calls) == 1

        calls[0]()  # the owning thread drains its queue
        assert store.get_state() == 1

    def test_listeners_follow_marshaled_dispatch(self, restore_scheduler):
        threads = []
        set_scheduler(lambda fn: fn())
        store = create_store(counter)
        store.subscribe(lambda: threads.append(threading.current_thread()))
        _dispatch_in_background(store, {"type": "INC"})
        assert store.get_state() == 1
        assert len(threads) == 1

    def test_no_scheduler_is_direct(self, restore_scheduler):
        _store_mod._scheduler = None
        _store_mod._scheduler_thread = None
        store = create_store(counter)
        _dispatch_in_background(store, {"type": "INC"})
        assert store.get_state() == 1

    def test_malformed_action_rejected_on_calling_thread(self, restore_scheduler):
        calls = []
        set_scheduler(calls.append)
        store = create_store(counter)
        errors = []

        def bg():
            try:
                store.dispatch({"payload": 1})
            except TypeError as e:
                errors.append(e)

        t = threading.Thread(target=bg)
        t.start()
        t.join()
        assert len(errors) == 1
        assert 'undefined "type"' in str(errors[0])
        assert calls == []
