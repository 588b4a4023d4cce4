import pytest

from poemodel.credentials import Credential
from poemodel.events import (
    EventBus,
    EventState,
    ImageLoadEvent,
    StashLoadEvent,
)


class TestEventBus:
    def test_handlers_receive_only_their_event_type(self):
        bus = EventBus()
        stash_events, image_events = [], []
        bus.subscribe(StashLoadEvent, stash_events.append)
        bus.subscribe(ImageLoadEvent, image_events.append)

        bus.emit(StashLoadEvent(0, -1, EventState.BEFORE))
        bus.emit(ImageLoadEvent("Iron Ring", EventState.AFTER))

        assert stash_events == [StashLoadEvent(0, -1, EventState.BEFORE)]
        assert image_events == [ImageLoadEvent("Iron Ring", EventState.AFTER)]

    def test_duplicate_subscribe_and_unsubscribe(self):
        bus = EventBus()
        seen = []
        bus.subscribe(StashLoadEvent, seen.append)
        bus.subscribe(StashLoadEvent, seen.append)
        bus.emit(StashLoadEvent(1, 3, EventState.AFTER))
        assert len(seen) == 1

        bus.unsubscribe(StashLoadEvent, seen.append)
        bus.unsubscribe(StashLoadEvent, seen.append)
        bus.emit(StashLoadEvent(2, 3, EventState.AFTER))
        assert len(seen) == 1

    def test_failing_handler_does_not_stop_others(self):
        bus = EventBus()
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(ImageLoadEvent, broken)
        bus.subscribe(ImageLoadEvent, seen.append)
        bus.emit(ImageLoadEvent("x", EventState.BEFORE))
        assert len(seen) == 1


class TestCredential:
    def test_reveal_yields_secret(self):
        cred = Credential("hunter2")
        with cred.reveal() as secret:
            assert secret == "hunter2"

    def test_context_manager_wipes_on_exit(self):
        cred = Credential("hunter2")
        with cred:
            pass
        assert cred.wiped
        assert bytes(cred._buffer) == b"\x00" * len("hunter2")
        with pytest.raises(ValueError):
            with cred.reveal():
                pass

    def test_wipes_when_body_raises(self):
        cred = Credential(b"secret")
        with pytest.raises(RuntimeError):
            with cred:
                raise RuntimeError("fail")
        assert cred.wiped

    def test_repr_hides_secret(self):
        cred = Credential("hunter2")
        assert "hunter2" not in repr(cred)
