import pytest

from micepipe.config import PlaybackSettings
from micepipe.playback.machine import (
    Brush,
    Pause,
    Phase,
    PlaybackMachine,
    Resize,
    Restart,
    Scrub,
    Tick,
)
from micepipe.playback.windowing import (
    FullRange,
    OffsetFraction,
    TrailingEdge,
    ViewWindow,
    policy_from_settings,
    sliding_window,
)

TOTAL = 14 * 1440
WINDOW = 3 * 1440


def _machine(**kwargs):
    return PlaybackMachine(TOTAL, window_duration=WINDOW, **kwargs)


def _finished():
    m = _machine()
    m.skip_to_end()
    return m


def test_1008_ticks_reach_final_exactly_at_end():
    m = _machine()
    changes = []
    for _ in range(1007):
        t = m.tick()
        changes.append(t.phase_changed)
        assert m.phase is Phase.ANIMATING
    last = m.tick()

    assert not any(changes)
    assert last.accepted and last.phase_changed
    assert m.phase is Phase.FINAL
    assert m.current == TOTAL


def test_clock_never_passes_end():
    m = _machine(step_minutes=7)
    while m.phase is Phase.ANIMATING:
        m.tick()
        assert 0 <= m.current <= TOTAL
    assert m.current == TOTAL
    assert not m.tick().accepted


def test_paused_machine_ignores_ticks():
    m = _machine()
    m.tick()
    m.pause()
    assert not m.running
    assert not m.tick().accepted
    assert m.current == 20

    assert m.resume().accepted
    assert m.tick().accepted and m.current == 40


def test_pause_twice_is_ignored():
    m = _machine()
    assert m.pause().accepted
    assert not m.pause().accepted


def test_skip_to_end_changes_phase_once():
    m = _machine()
    first = m.skip_to_end()
    second = m.skip_to_end()

    assert first.phase_changed and not second.phase_changed
    assert m.current == TOTAL
    assert m.window() == ViewWindow(0, TOTAL)
    assert not m.progressive


def test_scrub_sets_clock_from_fraction_and_pauses():
    m = _machine()
    m.scrub(0.5)

    assert m.current == TOTAL // 2
    assert m.scrubbing and m.paused and not m.running
    assert not m.tick().accepted


@pytest.mark.parametrize("fraction, expected", [(-0.3, 0), (1.7, TOTAL), (0.25, TOTAL // 4)])
def test_scrub_clamps_fraction(fraction, expected):
    m = _machine()
    m.scrub(fraction)
    assert m.current == expected


def test_end_scrub_leaves_playback_paused():
    m = _machine()
    m.scrub(0.1)
    assert m.end_scrub().accepted
    assert not m.scrubbing and m.paused
    assert not m.end_scrub().accepted
    assert m.resume().accepted and m.running


def test_brush_is_ignored_while_animating():
    m = _machine()
    m.tick()
    assert not m.brush(0.2, 0.4).accepted
    assert m.brush_window is None


def test_brush_zooms_into_fraction_of_full_range():
    m = _finished()
    assert m.brush(0.5, 0.25).accepted

    assert m.window() == ViewWindow(TOTAL * 0.25, TOTAL * 0.5)
    assert m.visible_range() == m.window()


def test_second_brush_is_relative_to_brushed_window():
    m = _finished()
    m.brush(0.0, 0.5)
    m.brush(0.0, 0.5)
    assert m.window() == ViewWindow(0, TOTAL * 0.25)


def test_zero_width_brush_is_ignored():
    m = _finished()
    assert not m.brush(0.3, 0.3).accepted


def test_scrub_ignored_while_brushed_then_allowed_after_reset():
    m = _finished()
    m.brush(0.1, 0.2)
    assert not m.scrub(0.5).accepted
    assert m.current == TOTAL

    assert m.reset_scope().accepted
    assert not m.reset_scope().accepted
    assert m.scrub(0.5).accepted


def test_restart_clears_everything():
    m = _finished()
    m.brush(0.1, 0.9)
    m.pause()

    t = m.restart()

    assert t.phase_changed
    assert m.current == 0 and m.phase is Phase.ANIMATING
    assert m.running and m.brush_window is None


def test_dispatch_routes_commands():
    m = _machine()
    assert m.dispatch(Tick()).accepted
    assert m.dispatch(Pause()).accepted
    assert m.dispatch(Scrub(1.0)).accepted
    assert not m.dispatch(Brush(0.0, 1.0)).accepted
    assert m.dispatch(Restart()).accepted and m.current == 0
    with pytest.raises(TypeError):
        m.dispatch("tick")


def test_progressive_visible_range_follows_clock():
    m = _machine()
    for _ in range(3):
        m.tick()
    assert m.progressive
    assert m.visible_range() == ViewWindow(0, 60)


def test_lead_in_pins_window_to_start():
    assert sliding_window(TrailingEdge(), 100, WINDOW, TOTAL) == ViewWindow(0, WINDOW)
    assert sliding_window(TrailingEdge(), WINDOW, WINDOW, TOTAL) == ViewWindow(0, WINDOW)
    assert sliding_window(TrailingEdge(), WINDOW + 60, WINDOW, TOTAL) == ViewWindow(60, WINDOW + 60)


def test_offset_fraction_holds_clock_inside_window():
    policy = OffsetFraction(0.6)
    win = sliding_window(policy, 5000, 1000, TOTAL)
    assert win == ViewWindow(4400, 5400)
    assert sliding_window(policy, 500, 1000, TOTAL) == ViewWindow(0, 1000)
    assert sliding_window(policy, 800, 1000, TOTAL) == ViewWindow(0, 1000)
    assert sliding_window(policy, 1000, 1000, TOTAL) == ViewWindow(400, 1400)


def test_offset_lead_in_lasts_a_full_window_duration():
    m = _machine(policy=OffsetFraction(0.6))
    while m.current < 3440:
        m.tick()

    assert m.current == 3440
    assert m.window() == ViewWindow(0, WINDOW)


def test_offset_fraction_rejects_out_of_range():
    with pytest.raises(ValueError):
        OffsetFraction(1.5)


def test_full_range_policy_ignores_clock():
    assert sliding_window(FullRange(), 5000, WINDOW, TOTAL) == ViewWindow(0, TOTAL)


def test_policy_from_settings():
    assert isinstance(policy_from_settings(PlaybackSettings()), TrailingEdge)
    offset = policy_from_settings(PlaybackSettings(windowing="offset_fraction", offset_fraction=0.25))
    assert offset == OffsetFraction(0.25)
    assert isinstance(policy_from_settings(PlaybackSettings(windowing="full_range")), FullRange)


def test_invalid_machine_arguments():
    with pytest.raises(ValueError):
        PlaybackMachine(0, window_duration=WINDOW)
    with pytest.raises(ValueError):
        PlaybackMachine(TOTAL, window_duration=WINDOW, step_minutes=0)


def test_resize_keeps_clock_phase_and_window_while_animating():
    m = _machine()
    for _ in range(250):
        m.tick()
    before = (m.current, m.phase, m.window())

    assert m.dispatch(Resize()).accepted
    assert (m.current, m.phase, m.window()) == before
    assert m.running


def test_resize_keeps_brushed_final_view():
    m = _finished()
    m.brush(0.2, 0.4)
    before = (m.current, m.phase, m.window())

    assert m.resize().accepted
    assert (m.current, m.phase, m.window()) == before


def test_reset_scope_returns_final_view_to_full_range():
    m = _finished()
    m.brush(0.2, 0.4)
    assert m.window() != ViewWindow(0, TOTAL)

    m.reset_scope()

    assert m.window() == ViewWindow(0, TOTAL)
    assert m.phase is Phase.FINAL and m.current == TOTAL
