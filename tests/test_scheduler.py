from hygrostat.config import ALARM_FAILSAFE_SEC, UPDATE_INTERVAL_SEC
from hygrostat.hardware import SimulatedRtc, SqwMode
from hygrostat.scheduler import AlarmScheduler


def test_without_rtc_everything_is_inert():
    sched = AlarmScheduler(None)
    sched.start(100)
    assert sched.next_epoch() == 0
    assert sched.base_epoch() == 0
    assert not sched.should_fire(10_000)
    assert not sched.failsafe_check(10_000)


def test_start_schedules_next_grid_point():
    rtc = SimulatedRtc(100)
    sched = AlarmScheduler(rtc)
    sched.start(100)
    nxt = sched.next_epoch()
    assert nxt % UPDATE_INTERVAL_SEC == 0
    assert 100 < nxt <= 100 + UPDATE_INTERVAL_SEC
    assert sched.base_epoch() == nxt
    assert rtc.alarm1 == nxt
    assert rtc.sqw_mode is SqwMode.OFF


def test_start_on_grid_moves_to_following_point():
    sched = AlarmScheduler(SimulatedRtc(0))
    start = 10 * UPDATE_INTERVAL_SEC
    sched.start(start)
    assert sched.next_epoch() == start + UPDATE_INTERVAL_SEC


def test_should_fire_by_time_and_by_alarm():
    rtc = SimulatedRtc(100)
    sched = AlarmScheduler(rtc)
    sched.start(100)
    nxt = sched.next_epoch()
    assert not sched.should_fire(nxt - 1)
    assert sched.should_fire(nxt)
    rtc.advance(nxt - 100)
    assert sched.should_fire(nxt - 5)


def test_advance_after_fire_moves_past_now():
    rtc = SimulatedRtc(100)
    sched = AlarmScheduler(rtc)
    sched.start(100)
    rtc.advance(500)
    now = rtc.epoch
    sched.advance_after_fire(now)
    nxt = sched.next_epoch()
    assert now < nxt <= now + UPDATE_INTERVAL_SEC
    assert nxt % UPDATE_INTERVAL_SEC == 0
    assert not rtc.alarm_fired(1)
    assert rtc.alarm1 == nxt


def test_sanity_realigns_far_future_target():
    rtc = SimulatedRtc(1000)
    sched = AlarmScheduler(rtc)
    sched.start(1000)
    sched.sanity(500)
    nxt = sched.next_epoch()
    assert 500 < nxt <= 500 + UPDATE_INTERVAL_SEC
    assert sched.base_epoch() == nxt
    assert rtc.alarm1 == nxt


def test_sanity_leaves_near_or_past_target():
    sched = AlarmScheduler(SimulatedRtc(1000))
    sched.start(1000)
    nxt = sched.next_epoch()
    sched.sanity(nxt - 10)
    assert sched.next_epoch() == nxt
    sched.sanity(nxt + 100)
    assert sched.next_epoch() == nxt


def test_failsafe_window():
    rtc = SimulatedRtc(0)
    sched = AlarmScheduler(rtc)
    sched.start(0)
    assert not sched.failsafe_check(ALARM_FAILSAFE_SEC)
    now = ALARM_FAILSAFE_SEC + 1
    assert sched.failsafe_check(now)
    assert now < sched.next_epoch() <= now + UPDATE_INTERVAL_SEC
    assert not sched.failsafe_check(now + 1)


def test_mark_sample_resets_failsafe():
    sched = AlarmScheduler(SimulatedRtc(0))
    sched.start(0)
    sched.mark_sample(100)
    assert not sched.failsafe_check(100 + ALARM_FAILSAFE_SEC)