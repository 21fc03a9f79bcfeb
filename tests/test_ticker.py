from chamber_monitor.ticker import ElapsedTicker

from conftest import at


def test_unbound_ticker_reads_nothing():
    ticker = ElapsedTicker(clock=lambda: at(5))
    assert ticker.tick() is None
    assert not ticker.active


def test_tick_reads_clock():
    ticker = ElapsedTicker(clock=lambda: at(2, 30))
    ticker.sync(at(0))
    assert ticker.active
    assert ticker.tick() == 150_000


def test_tick_follows_clock_between_reads():
    now = [at(1)]
    ticker = ElapsedTicker(clock=lambda: now[0])
    ticker.sync(at(0))
    assert ticker.tick() == 60_000
    now[0] = at(1, 1)
    assert ticker.tick() == 61_000


def test_sync_none_cancels():
    ticker = ElapsedTicker(clock=lambda: at(1))
    ticker.sync(at(0))
    ticker.sync(None)
    assert ticker.start_time is None
    assert not ticker.active
    assert ticker.tick() is None


def test_sync_new_start_rebinds():
    ticker = ElapsedTicker(clock=lambda: at(10))
    ticker.sync(at(0))
    ticker.sync(at(9))
    assert ticker.tick() == 60_000


def test_clock_skew_reads_zero():
    ticker = ElapsedTicker(clock=lambda: at(0))
    ticker.sync(at(1))
    assert ticker.tick() == 0


def test_complete_last_job_cancels(idle_machine, coat_a):
    from chamber_monitor.machine import add_job, complete_job, start_machine

    m = start_machine(add_job(idle_machine, coat_a), at(0))
    ticker = ElapsedTicker(clock=lambda: at(3))
    ticker.sync(m.start_time)
    assert ticker.tick() == 180_000

    m, _ = complete_job(m, coat_a.job_id, at(3))
    ticker.sync(m.start_time)
    assert ticker.tick() is None
