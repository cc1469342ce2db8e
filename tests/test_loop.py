import pytest

from config import BASE_SPEED, UP, LEFT
from effects import EffectsLayer
from game import SnakeGame
from loop import GameLoop, FrameScheduler, CancelToken, IDLE, RUNNING, PAUSED, TERMINAL


@pytest.fixture
def renders():
    return []


@pytest.fixture
def loop(events, rng, clock, renders):
    game = SnakeGame(25, events, rng)
    effects = EffectsLayer(clock)
    effects.attach(events)
    return GameLoop(game, FrameScheduler(), clock, effects, render=lambda: renders.append(clock()))


def start(loop):
    loop.start_new_game()
    loop.game.place_food((0, 0))


def test_idle_until_started(loop):
    assert loop.state == IDLE
    assert not loop.scheduler.run_frame()


def test_frame_before_interval_only_renders(loop, clock, renders):
    start(loop)
    clock.advance(BASE_SPEED - 1)
    assert loop.scheduler.run_frame()
    assert loop.game.steps == 0
    assert renders == [BASE_SPEED - 1]


def test_step_fires_once_interval_elapsed(loop, clock, renders):
    start(loop)
    clock.advance(BASE_SPEED)
    loop.scheduler.run_frame()
    assert loop.game.steps == 1
    assert loop.game.head == (13, 12)
    assert loop.last_update == BASE_SPEED
    assert len(renders) == 1


def test_no_catch_up_after_long_frame(loop, clock):
    start(loop)
    clock.advance(BASE_SPEED * 5)
    loop.scheduler.run_frame()
    assert loop.game.steps == 1
    loop.scheduler.run_frame()
    assert loop.game.steps == 1


def test_pause_stops_steps_and_resume_does_not_fast_forward(loop, clock, renders):
    start(loop)
    loop.toggle_pause()
    assert loop.state == PAUSED

    clock.advance(BASE_SPEED * 10)
    assert not loop.scheduler.run_frame()
    assert loop.game.steps == 0
    assert renders == []

    loop.toggle_pause()
    assert loop.state == RUNNING
    assert loop.last_update == clock()
    loop.scheduler.run_frame()
    assert loop.game.steps == 0

    clock.advance(BASE_SPEED)
    loop.scheduler.run_frame()
    assert loop.game.steps == 1


def test_input_ignored_unless_running(loop):
    assert not loop.handle_direction(UP)
    start(loop)
    loop.toggle_pause()
    assert not loop.handle_direction(UP)
    loop.toggle_pause()
    assert loop.handle_direction(UP)
    assert not loop.handle_direction(LEFT)
    assert loop.game.next_direction == UP


def test_game_over_stops_loop(loop, clock, renders, recorder):
    start(loop)
    loop.game.snake = [(24, 12), (23, 12), (22, 12)]

    clock.advance(BASE_SPEED)
    loop.scheduler.run_frame()
    assert loop.state == TERMINAL
    assert not loop.game.running
    assert recorder.of("game_over") == [(0,)]
    rendered = len(renders)

    clock.advance(BASE_SPEED * 3)
    assert not loop.scheduler.run_frame()
    assert len(renders) == rendered
    assert loop.game.steps == 1


def test_pause_is_noop_after_game_over(loop, clock):
    start(loop)
    loop.game.snake = [(24, 12), (23, 12), (22, 12)]
    clock.advance(BASE_SPEED)
    loop.scheduler.run_frame()

    loop.toggle_pause()
    assert loop.state == TERMINAL
    assert not loop.scheduler.pending


def test_new_game_replaces_old_session(loop, clock):
    start(loop)
    old_token = loop._token
    clock.advance(BASE_SPEED)
    loop.scheduler.run_frame()

    loop.effects.particles.burst(1, 1)
    loop.start_new_game()
    assert old_token.cancelled
    assert loop.game.steps == 0
    assert loop.game.snake == [(12, 12), (11, 12), (10, 12)]
    assert len(loop.effects.particles) == 0
    assert loop.scheduler.pending


def test_stop_cancels_without_game_over(loop, recorder):
    start(loop)
    loop.stop()
    assert loop.state == IDLE
    assert not loop.scheduler.run_frame()
    assert recorder.of("game_over") == []


def test_scheduler_skips_cancelled_token():
    scheduler = FrameScheduler()
    calls = []
    token = CancelToken()
    scheduler.request(calls.append, token)
    token.cancel()
    assert not scheduler.run_frame()
    assert calls == []


def test_scheduler_runs_one_callback_per_frame():
    scheduler = FrameScheduler()
    token = CancelToken()
    calls = []
    scheduler.request(calls.append, token)
    assert scheduler.run_frame()
    assert calls == [token]
    assert not scheduler.run_frame()
