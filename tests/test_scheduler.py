import numpy as np
import pytest

from skyscatter.raster import Surface
from skyscatter.scene import SceneConfig, SkyRenderer
from skyscatter.scheduler import FrameScheduler, ManualFrameHost, SimulationState, StateCell


class Recorder:
    def __init__(self):
        self.frames = []

    def __call__(self, surface, info):
        self.frames.append((surface.size, info))


@pytest.fixture
def host():
    return ManualFrameHost()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def state():
    return StateCell(SimulationState(time_value=50.0))


def make_scheduler(host, state, recorder, width=40, height=30):
    renderer = SkyRenderer(SceneConfig(particle_count=20), rng=0)
    return FrameScheduler(renderer, state, host, surface=Surface(width, height), present=recorder)


def test_state_cell_update_is_visible_immediately(state):
    state.update(time_value=12.0)
    assert state.get() == SimulationState(12.0, False)
    assert state.time_value == 12.0


def test_auto_advance_only_while_playing(state):
    assert state.advance().time_value == 50.0
    state.update(is_playing=True)
    assert state.advance(0.2).time_value == pytest.approx(50.2)


def test_auto_advance_loops_at_end():
    cell = StateCell(SimulationState(99.9, True))
    assert cell.advance(0.2).time_value == 0.0
    assert cell.is_playing


def test_manual_host_runs_and_cancels_callbacks(host):
    calls = []
    first = host.request_frame(calls.append)
    host.request_frame(calls.append)
    host.cancel_frame(first)
    host.cancel_frame(first)
    assert host.step(5.0) == 1
    assert calls == [5.0]
    assert host.pending == 0


def test_start_establishes_one_loop(host, state, recorder):
    scheduler = make_scheduler(host, state, recorder)
    scheduler.start()
    scheduler.start()
    assert host.pending == 1
    host.step(0.0)
    assert host.pending == 1
    assert scheduler.frames_rendered == 1


def test_each_frame_reschedules(host, state, recorder):
    scheduler = make_scheduler(host, state, recorder)
    scheduler.start()
    for i in range(5):
        host.step(i * 16.0)
    assert scheduler.frames_rendered == 5
    assert len(recorder.frames) == 5
    assert scheduler.pending


def test_latest_state_reaches_next_frame(host, state, recorder):
    scheduler = make_scheduler(host, state, recorder)
    scheduler.start()
    host.step(0.0)
    state.update(time_value=0.0)
    host.step(16.0)
    assert recorder.frames[-1][1].sun_x == 0.0
    state.update(time_value=100.0)
    host.step(32.0)
    assert recorder.frames[-1][1].sun_x == pytest.approx(40.0)


def test_state_changes_do_not_restart_the_loop(host, state, recorder):
    scheduler = make_scheduler(host, state, recorder)
    scheduler.start()
    host.step(0.0)
    particles = scheduler.renderer.particles
    for t in (10.0, 20.0, 30.0):
        state.update(time_value=t)
        host.step(t)
    assert scheduler.renderer.particles is particles
    assert host.pending == 1


def test_stop_is_idempotent(host, state, recorder):
    scheduler = make_scheduler(host, state, recorder)
    scheduler.stop()
    scheduler.start()
    scheduler.stop()
    scheduler.stop()
    assert not scheduler.running
    assert host.pending == 0
    assert host.step(0.0) == 0
    assert scheduler.frames_rendered == 0


def test_loop_is_not_restarted_after_stop(host, state, recorder):
    scheduler = make_scheduler(host, state, recorder)
    scheduler.start()
    scheduler.stop()
    scheduler.start()
    assert host.pending == 0


def test_stale_callback_after_stop_does_nothing(state, recorder):
    host = ManualFrameHost()
    scheduler = make_scheduler(host, state, recorder)
    scheduler.start()
    scheduler.stop()
    scheduler.tick(10.0)
    assert scheduler.frames_rendered == 0
    assert host.pending == 0


def test_zero_area_surface_skips_drawing_but_keeps_running(host, state, recorder):
    scheduler = make_scheduler(host, state, recorder, width=0, height=0)
    scheduler.start()
    host.step(0.0)
    host.step(16.0)
    assert scheduler.frames_rendered == 0
    assert recorder.frames == []
    assert scheduler.running and host.pending == 1

    scheduler.resize(20, 10)
    host.step(32.0)
    assert scheduler.frames_rendered == 1
    assert recorder.frames[-1][0] == (20, 10)


def test_resize_mid_loop(host, state, recorder):
    scheduler = make_scheduler(host, state, recorder, width=300, height=150)
    scheduler.start()
    host.step(0.0)
    assert recorder.frames[-1][0] == (300, 150)

    scheduler.resize(800, 600)
    assert scheduler.surface.pixels.shape == (600, 800, 3)
    host.step(16.0)
    assert recorder.frames[-1][0] == (800, 600)
    # every pixel of the new buffer was painted
    assert np.all(scheduler.surface.pixels.sum(axis=2) > 0)


def test_lost_surface_stops_the_loop(host, state, recorder):
    scheduler = make_scheduler(host, state, recorder)
    scheduler.start()
    host.step(0.0)
    scheduler.detach_surface()
    host.step(16.0)
    assert not scheduler.running
    assert host.pending == 0
    assert scheduler.surface is None
    scheduler.resize(10, 10)
    scheduler.stop()
    assert scheduler.frames_rendered == 1


def test_frame_interval_average(host, state, recorder):
    scheduler = make_scheduler(host, state, recorder)
    scheduler.start()
    assert scheduler.frame_ms is None
    for timestamp in (0.0, 16.0, 32.0, 48.0):
        host.step(timestamp)
    assert scheduler.frame_ms == pytest.approx(16.0)
