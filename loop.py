"""
Игровой цикл с фиксированным шагом.

Хост (главный цикл pygame) раз в кадр вызывает FrameScheduler.run_frame().
GameLoop сам перезаказывает себе следующий кадр, пока игра идёт.
Шаг симуляции выполняется не чаще одного раза за кадр: если кадр
запоздал, пропущенные тики не догоняются (игра просто замедляется).
"""
import pygame

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"
TERMINAL = "terminal"


class CancelToken:
    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FrameScheduler:
    """Хранит один отложенный колбэк на следующий кадр"""

    def __init__(self):
        self._pending = None

    def request(self, callback, token):
        self._pending = (callback, token)

    def cancel(self):
        if self._pending is not None:
            self._pending[1].cancel()
        self._pending = None

    @property
    def pending(self):
        return self._pending is not None and not self._pending[1].cancelled

    def run_frame(self):
        """Выполнить колбэк текущего кадра. True, если что-то выполнилось"""
        pending, self._pending = self._pending, None
        if pending is None:
            return False
        callback, token = pending
        if token.cancelled:
            return False
        callback(token)
        return True


class GameLoop:
    def __init__(self, game, scheduler=None, clock=None, effects=None, render=None):
        self.game = game
        self.scheduler = scheduler or FrameScheduler()
        self.clock = clock or pygame.time.get_ticks
        self.effects = effects
        self.render = render

        self.state = IDLE
        self.last_update = 0
        self._token = None

    def start_new_game(self):
        """Полная переинициализация, старая сессия отменяется"""
        self._stop()
        if self.effects is not None:
            self.effects.reset()
        self.game.reset()
        self.state = RUNNING
        self._schedule()

    def toggle_pause(self):
        if not self.game.running:
            return
        if self.state == RUNNING:
            self.state = PAUSED
            self._stop()
        elif self.state == PAUSED:
            self.state = RUNNING
            self._schedule()

    def handle_direction(self, direction):
        """Ввод игрока, принимается только во время игры"""
        if self.state != RUNNING:
            return False
        return self.game.set_direction(direction)

    def stop(self):
        """Остановить цикл без перехода в конец игры (например, при выходе из аккаунта)"""
        self._stop()
        if self.state in (RUNNING, PAUSED):
            self.state = IDLE
            self.game.running = False

    def _schedule(self):
        self.last_update = self.clock()
        self._token = CancelToken()
        self.scheduler.request(self._on_frame, self._token)

    def _stop(self):
        if self._token is not None:
            self._token.cancel()
            self._token = None
        self.scheduler.cancel()

    def _on_frame(self, token):
        if token.cancelled or self.state != RUNNING:
            return

        now = self.clock()
        if now - self.last_update >= self.game.speed:
            self.game.step()
            self.last_update = now

        if self.effects is not None:
            self.effects.update()
        if self.render is not None:
            self.render()

        if not self.game.running:
            # Проигрыш: больше ни шагов, ни отрисовки из цикла
            self.state = TERMINAL
            self._stop()
            return

        if not token.cancelled:
            self.scheduler.request(self._on_frame, token)

    @property
    def is_running(self):
        return self.state == RUNNING
