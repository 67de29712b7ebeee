import random
from datetime import datetime

import pytest

from reaction.trial import (
    DEFAULT_STIMULI, FALLBACK_STIMULUS, Stimulus, TrialController, TrialState,
)

GREEN = Stimulus("Green", (52, 199, 89))


def test_starts_idle(controller, store):
    assert controller.state == TrialState.Idle
    assert controller.reaction_time_ms is None
    assert len(store) == 0


def test_start_schedules_delay_within_range(controller, scheduler):
    for _ in range(50):
        controller.start_trial()
        assert 2.0 <= controller.delay_sec <= 6.0
        assert controller.state == TrialState.ArmedWaiting
        assert scheduler.pending == 1


def test_stimulus_appears_only_after_delay(controller, scheduler, clock):
    controller.start_trial()
    clock.advance(controller.delay_sec - 0.01)
    scheduler.run_due()
    assert controller.state == TrialState.ArmedWaiting
    assert controller.stimulus is None

    clock.advance(0.02)
    scheduler.run_due()
    assert controller.state == TrialState.ArmedReady
    assert controller.stimulus in DEFAULT_STIMULI
    assert controller.presented_at == pytest.approx(clock())


def test_green_scenario_records_250ms(store, scheduler, clock, wall_clock):
    c = TrialController(store, scheduler, stimuli=[GREEN],
                        rng=random.Random(7), clock=clock, wall_clock=wall_clock)
    c.start_trial(dry_run=False)
    clock.advance(c.delay_sec)
    wall_clock.advance(c.delay_sec)
    scheduler.run_due()
    shown_at = wall_clock()

    clock.advance(0.250)
    wall_clock.advance(0.250)
    rt = c.register_response()

    assert rt == pytest.approx(250.0)
    assert c.state == TrialState.Completed
    assert len(store) == 1
    rec = store.last
    assert rec.reaction_time_ms == pytest.approx(250.0)
    assert rec.stimulus_label == "Green"
    assert rec.ignored is False
    # stamped when the stimulus appeared, not when the tap came in
    assert rec.timestamp == shown_at


def test_dry_run_never_stores(controller, store, clock, fire_stimulus):
    controller.start_trial(dry_run=True)
    fire_stimulus()
    clock.advance(0.3)
    rt = controller.register_response()
    assert rt == pytest.approx(300.0)
    assert controller.state == TrialState.Completed
    assert len(store) == 0
    assert controller.last_record is None


def test_taps_while_waiting_are_ignored(controller, store, clock):
    controller.start_trial()
    for _ in range(5):
        clock.advance(0.1)
        assert controller.register_response() is None
    assert controller.state == TrialState.ArmedWaiting
    assert len(store) == 0


def test_tap_stamped_before_stimulus_is_ignored(controller, store, clock, fire_stimulus):
    controller.start_trial()
    early = clock() + controller.delay_sec - 0.005
    fire_stimulus()
    assert controller.register_response(at=early) is None
    assert controller.state == TrialState.ArmedReady
    assert len(store) == 0


def test_response_uses_tap_timestamp(controller, clock, fire_stimulus):
    controller.start_trial()
    fire_stimulus()
    tap_at = clock() + 0.180
    clock.advance(0.5)  # frame processed later than the tap
    assert controller.register_response(at=tap_at) == pytest.approx(180.0)


def test_response_in_idle_is_noop(controller, store):
    assert controller.register_response() is None
    assert controller.state == TrialState.Idle
    assert len(store) == 0


def test_second_response_after_completion_is_noop(controller, store, clock, fire_stimulus):
    controller.start_trial()
    fire_stimulus()
    clock.advance(0.2)
    controller.register_response()
    clock.advance(0.2)
    assert controller.register_response() is None
    assert len(store) == 1
    assert controller.reaction_time_ms == pytest.approx(200.0)


def test_dismiss_returns_to_idle_and_keeps_record(controller, store, clock, fire_stimulus):
    controller.start_trial()
    fire_stimulus()
    clock.advance(0.2)
    controller.register_response()
    controller.dismiss_result()
    assert controller.state == TrialState.Idle
    assert controller.reaction_time_ms is None
    assert len(store) == 1


def test_dismiss_outside_completed_is_noop(controller):
    controller.start_trial()
    controller.dismiss_result()
    assert controller.state == TrialState.ArmedWaiting


def test_mark_last_ignored_after_real_trial(controller, store, clock, fire_stimulus):
    controller.start_trial()
    fire_stimulus()
    clock.advance(0.2)
    controller.register_response()
    assert controller.can_ignore
    assert controller.mark_last_ignored() is True
    assert store.last.ignored is True
    assert not controller.can_ignore
    assert controller.mark_last_ignored() is False


def test_cannot_ignore_dry_run(controller, store, clock, fire_stimulus):
    # one real trial, then a dry run: the real record must stay untouched
    controller.start_trial()
    fire_stimulus()
    clock.advance(0.2)
    controller.register_response()

    controller.start_trial(dry_run=True)
    fire_stimulus()
    clock.advance(0.2)
    controller.register_response()

    assert not controller.can_ignore
    assert controller.mark_last_ignored() is False
    assert store.last.ignored is False


def test_cannot_ignore_after_new_trial_starts(controller, store, clock, fire_stimulus):
    controller.start_trial()
    fire_stimulus()
    clock.advance(0.2)
    controller.register_response()
    controller.start_trial()
    assert controller.mark_last_ignored() is False
    assert store.last.ignored is False


def test_cannot_ignore_after_dismiss(controller, store, clock, fire_stimulus):
    controller.start_trial()
    fire_stimulus()
    clock.advance(0.2)
    controller.register_response()
    controller.dismiss_result()
    assert controller.mark_last_ignored() is False


def test_ignore_affects_only_latest_record(controller, store, clock, fire_stimulus):
    for _ in range(3):
        controller.start_trial()
        fire_stimulus()
        clock.advance(0.2)
        controller.register_response()
    controller.mark_last_ignored()
    assert [r.ignored for r in store] == [False, False, True]
    assert len(list(store.exportable())) == 2


def test_restart_cancels_pending_stimulus(controller, scheduler, clock):
    shown = []
    controller.add_listener(lambda s: shown.append(s) if s == TrialState.ArmedReady else None)
    controller.start_trial()
    first_task_delay = controller.delay_sec
    controller.start_trial()
    assert scheduler.pending == 1

    clock.advance(max(first_task_delay, controller.delay_sec) + 0.1)
    scheduler.run_due()
    assert shown == [TrialState.ArmedReady]


def test_listener_sees_every_transition(controller, clock, fire_stimulus):
    seen = []
    controller.add_listener(seen.append)
    controller.start_trial()
    fire_stimulus()
    clock.advance(0.1)
    controller.register_response()
    controller.dismiss_result()
    assert seen == [TrialState.ArmedWaiting, TrialState.ArmedReady,
                    TrialState.Completed, TrialState.Idle]


def test_present_stimulus_outside_waiting_is_noop(controller):
    controller.present_stimulus()
    assert controller.state == TrialState.Idle
    assert controller.stimulus is None


def test_stimulus_selection_covers_whole_set(controller, clock, fire_stimulus):
    labels = set()
    for _ in range(60):
        controller.start_trial(dry_run=True)
        fire_stimulus()
        labels.add(controller.stimulus.label)
        clock.advance(0.1)
        controller.register_response()
    assert labels == {"Red", "Green", "Blue"}
    assert FALLBACK_STIMULUS.label not in labels


def test_empty_stimulus_set_falls_back(store, scheduler, clock):
    c = TrialController(store, scheduler, stimuli=[], rng=random.Random(0),
                        clock=clock, wall_clock=datetime.now)
    c.start_trial()
    clock.advance(c.delay_sec)
    scheduler.run_due()
    assert c.stimulus == FALLBACK_STIMULUS
    assert c.state == TrialState.ArmedReady


def test_records_never_negative(controller, store, clock, fire_stimulus):
    for _ in range(10):
        controller.start_trial()
        fire_stimulus()
        controller.register_response()  # same instant as the stimulus
    assert len(store) == 10
    assert all(r.reaction_time_ms >= 0 for r in store)
