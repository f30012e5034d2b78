"""Tests for the RealmClock."""

import pytest

from realmclock.core.calendar import (
    MINUTES_PER_CYCLE,
    PROPHECY_START,
    CalendarTuple,
    Century,
    Day,
    Hour,
    InvalidLabelError,
    Month,
    Week,
    Year,
    encode,
    index_of,
)
from realmclock.core.clock import RealmClock, Subscription
from realmclock.core.environment import ENVIRONMENTS
from realmclock.events.scheduler import TimeEvent, Trigger


def _event(eid="E1", predicate=None, effect=None, trigger=Trigger.LEVEL):
    return TimeEvent(
        id=eid, name=eid, description="",
        predicate=predicate or (lambda s: True),
        effect=effect or (lambda ctx: None),
        trigger=trigger,
    )


@pytest.fixture
def clock():
    return RealmClock(0, rate=1.0)


class TestConstruction:
    def test_from_minutes(self):
        clock = RealmClock(300)
        state = clock.get_state()
        assert state.elapsed_minutes == 300
        assert state.hour == Hour.ZENITH
        assert state.day == Day.SOLARUS

    def test_from_tuple(self):
        clock = RealmClock(PROPHECY_START)
        assert clock.get_state().labels == PROPHECY_START
        assert clock.get_state().elapsed_minutes == encode(PROPHECY_START)

    def test_from_mapping(self):
        clock = RealmClock({
            "hour": "DUSK", "day": "VOIDUS", "week": "AQUAFLOW",
            "month": "SOLARBURST", "year": "HYDRA", "century": "WONDER",
        })
        state = clock.get_state()
        assert state.hour == Hour.DUSK
        assert state.century == Century.WONDER

    def test_at_prophecy(self):
        clock = RealmClock.at_prophecy(rate=2.0)
        assert clock.get_state().labels == PROPHECY_START
        assert clock.rate == 2.0

    def test_invalid_label_rejected(self):
        labels = PROPHECY_START.to_dict()
        labels["month"] = "SMARCH"
        with pytest.raises(InvalidLabelError):
            RealmClock(labels)

    def test_negative_minutes_rejected(self):
        with pytest.raises(ValueError):
            RealmClock(-1)

    def test_bad_start_type_rejected(self):
        with pytest.raises(TypeError):
            RealmClock("dawn")
        with pytest.raises(TypeError):
            RealmClock(True)

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError):
            RealmClock(0, rate=-1)


class TestAdvance:
    def test_one_hour(self, clock):
        clock.advance(60)
        state = clock.get_state()
        assert state.hour == Hour.ZENITH
        assert state.day == Day.LUNARIS

    def test_one_day(self, clock):
        clock.advance(240)
        state = clock.get_state()
        assert state.hour == Hour.DAWN
        assert state.day == Day.SOLARUS

    def test_one_week(self, clock):
        clock.advance(960)
        state = clock.get_state()
        assert state.day == Day.LUNARIS
        assert state.week == Week.AQUAFLOW

    def test_one_century_from_boundary(self):
        clock = RealmClock(MINUTES_PER_CYCLE)  # Prophecy century boundary
        clock.advance(61440)
        state = clock.get_state()
        assert state.year == Year.DRAGON
        assert state.century == Century.CONQUEST

    def test_hour_wrap_carries_into_day(self):
        for start_hour in range(4):
            clock = RealmClock(start_hour * 60)
            before = clock.get_state()
            clock.advance(60)
            after = clock.get_state()
            assert index_of(after.hour) == (start_hour + 1) % 4
            carried = (start_hour + 1) % 4 == 0
            expected_day = (index_of(before.day) + 1) % 4 if carried else index_of(before.day)
            assert index_of(after.day) == expected_day

    def test_wrap_from_prophecy_rolls_every_level(self):
        clock = RealmClock.at_prophecy()
        clock.advance(60)
        state = clock.get_state()
        assert state.labels == CalendarTuple(
            hour=Hour.DAWN, day=Day.LUNARIS, week=Week.EMBERWEAVE,
            month=Month.FROSTWHISPER, year=Year.DRAGON, century=Century.PROPHECY,
        )
        assert state.epoch == 1

    def test_counter_is_sum_of_advances(self):
        clock = RealmClock(100)
        seen = []
        for amount in (0, 1.5, 60, 0, 3840, 0.25):
            clock.advance(amount)
            seen.append(clock.get_state().elapsed_minutes)
        assert seen[-1] == pytest.approx(100 + 1.5 + 60 + 3840 + 0.25)
        assert seen == sorted(seen)

    @pytest.mark.parametrize("bad", [-1, -0.001, float("nan"), float("inf")])
    def test_invalid_advance_rejected_without_side_effects(self, clock, bad):
        calls = []
        clock.subscribe(calls.append)
        with pytest.raises(ValueError):
            clock.advance(bad)
        assert clock.get_state().elapsed_minutes == 0
        assert calls == []

    def test_overflowing_advance_leaves_clock_usable(self):
        clock = RealmClock(1e308)
        calls = []
        clock.subscribe(calls.append)
        with pytest.raises(ValueError):
            clock.advance(1e308)
        assert calls == []
        assert clock.get_state().elapsed_minutes == 1e308

        clock.advance(0)
        assert clock.get_state().elapsed_minutes == 1e308
        assert len(calls) == 1


class TestTick:
    def test_tick_uses_rate(self):
        clock = RealmClock(0, rate=2.0)
        clock.init(1.0)
        clock.tick(3.0)
        assert clock.get_state().elapsed_minutes == pytest.approx(4.0)

    def test_set_rate(self, clock):
        clock.init(0.0)
        clock.set_rate(60.0)
        clock.tick(1.0)
        assert clock.get_state().hour == Hour.ZENITH

    def test_pause_resume(self, clock):
        clock.init(0.0)
        clock.pause()
        assert clock.is_paused
        clock.tick(100.0)
        assert clock.get_state().elapsed_minutes == 0
        clock.resume()
        clock.tick(101.0)
        assert clock.get_state().elapsed_minutes == pytest.approx(1.0)

    def test_tick_notifies(self, clock):
        calls = []
        clock.subscribe(calls.append)
        clock.init(0.0)
        clock.tick(0.5)
        assert len(calls) == 1

    def test_default_timestamps_use_monotonic(self, clock):
        clock.init()
        clock.tick()
        assert clock.get_state().elapsed_minutes >= 0


class TestSubscriptions:
    def test_subscriber_receives_new_state(self, clock):
        received = []
        clock.subscribe(received.append)
        clock.advance(60)
        assert len(received) == 1
        assert received[0].hour == Hour.ZENITH
        assert received[0] == clock.get_state()

    def test_subscription_order(self, clock):
        order = []
        clock.subscribe(lambda s: order.append("a"))
        clock.subscribe(lambda s: order.append("b"))
        clock.advance(1)
        assert order == ["a", "b"]

    def test_unsubscribed_before_advance_never_called(self, clock):
        calls = []
        handle = clock.subscribe(calls.append)
        clock.unsubscribe(handle)
        clock.advance(60)
        assert calls == []

    def test_handles_are_distinct_for_same_callback(self, clock):
        calls = []
        h1 = clock.subscribe(calls.append)
        h2 = clock.subscribe(calls.append)
        assert isinstance(h1, Subscription)
        assert h1 != h2
        clock.unsubscribe(h1)
        clock.advance(1)
        assert len(calls) == 1

    def test_unknown_handle_is_noop(self, clock):
        clock.unsubscribe(Subscription(id=-1, callback=print))
        clock.unsubscribe(None)

    def test_failing_subscriber_isolated(self, clock):
        calls = []

        def boom(state):
            raise RuntimeError("subscriber failed")

        clock.subscribe(boom)
        clock.subscribe(calls.append)
        fired = []
        clock.register(_event(effect=lambda ctx: fired.append(1)))
        clock.advance(1)
        assert len(calls) == 1
        assert fired == [1]

    def test_notify_happens_before_events(self, clock):
        order = []
        clock.register(_event(effect=lambda ctx: order.append("event")))
        clock.subscribe(lambda s: order.append("subscriber"))
        clock.advance(1)
        assert order == ["subscriber", "event"]


class TestEvents:
    def test_effect_receives_context(self):
        ctx = {"gold": 0}
        clock = RealmClock(0, context=ctx)

        def grant(c):
            c["gold"] += 10

        clock.register(_event(effect=grant))
        clock.advance(1)
        assert ctx["gold"] == 10

    def test_level_triggered_double_zero_advance(self, clock):
        calls = []
        clock.register(_event(
            predicate=lambda s: s.hour == Hour.DAWN,
            effect=lambda ctx: calls.append(1),
        ))
        clock.advance(0)
        clock.advance(0)
        assert len(calls) == 2

    def test_edge_triggered_once_per_period(self, clock):
        calls = []
        clock.register(_event(
            predicate=lambda s: s.hour == Hour.DAWN,
            effect=lambda ctx: calls.append(1),
            trigger=Trigger.EDGE,
        ))
        for _ in range(10):
            clock.advance(1)
        assert len(calls) == 1

    def test_events_not_evaluated_at_construction(self):
        calls = []
        clock = RealmClock(0)
        clock.register(_event(effect=lambda ctx: calls.append(1)))
        assert calls == []

    def test_unregister(self, clock):
        calls = []
        clock.register(_event("gone", effect=lambda ctx: calls.append(1)))
        assert clock.unregister("gone") == 1
        clock.advance(1)
        assert calls == []


class TestQueries:
    def test_formatted_time(self, clock):
        assert clock.get_formatted_time() == (
            "Mysthaven Dawn of Lunaris, Emberweave Week, "
            "Frostwhisper Dragon Year, Prophecy Century"
        )

    def test_state_snapshot_not_live(self, clock):
        snapshot = clock.get_state()
        clock.advance(60)
        assert snapshot.hour == Hour.DAWN
        assert clock.get_state().hour == Hour.ZENITH

    def test_environment_follows_hour(self, clock):
        assert clock.get_environment() == ENVIRONMENTS[Hour.DAWN]
        clock.advance(180)
        assert clock.get_environment() == ENVIRONMENTS[Hour.MIDNIGHT]


class TestJumpTo:
    def test_jump_forward(self, clock):
        calls = []
        clock.subscribe(calls.append)
        advanced = clock.jump_to(PROPHECY_START)
        assert advanced == encode(PROPHECY_START)
        assert clock.get_state().labels == PROPHECY_START
        assert len(calls) == 1

    def test_jump_never_goes_back(self):
        clock = RealmClock(MINUTES_PER_CYCLE + 30)
        clock.jump_to(PROPHECY_START)
        state = clock.get_state()
        assert state.labels == PROPHECY_START
        assert state.elapsed_minutes > MINUTES_PER_CYCLE

    def test_jump_when_already_there(self):
        clock = RealmClock.at_prophecy()
        assert clock.jump_to(PROPHECY_START) == 0


class TestDestroy:
    def test_destroy_stops_everything(self, clock):
        calls = []
        clock.subscribe(lambda s: calls.append("sub"))
        clock.register(_event(effect=lambda ctx: calls.append("event")))
        clock.destroy()
        assert clock.is_destroyed
        clock.advance(60)
        clock.advance(0)
        assert calls == []
        # Counter still moves
        assert clock.get_state().elapsed_minutes == 60

    def test_destroy_idempotent(self, clock):
        clock.destroy()
        clock.destroy()
        assert clock.subscriber_count == 0
        assert clock.scheduler.count == 0

    def test_destroy_from_effect_stops_remaining(self, clock):
        calls = []
        clock.register(_event("killer", effect=lambda ctx: clock.destroy()))
        clock.register(_event("after", effect=lambda ctx: calls.append(1)))
        clock.advance(1)
        assert calls == []
