"""
Симуляция змейки: состояние игры и один шаг (тик) по сетке.

Матрица мира:
  0 = пусто
  1 = тело змейки
  2 = еда
  7 = голова
"""
import numpy as np

from config import (TILE_COUNT, INITIAL_SNAKE_LENGTH, SCORE_FOR_FOOD, BASE_SPEED,
                    MIN_SPEED, SPEED_STEP, SPAWN_ATTEMPTS, DIRECTIONS, RIGHT)
from events import EventBus, SCORE_CHANGED, FOOD_EATEN, GAME_OVER

EMPTY = 0
BODY = 1
FOOD_CELL = 2
HEAD = 7


class SnakeGame:
    def __init__(self, tile_count=None, events=None, rng=None):
        self.tile_count = tile_count or TILE_COUNT
        self.events = events if events is not None else EventBus()
        self.rng = rng if rng is not None else np.random.default_rng()

        self.snake = []
        self.food = None
        self.direction = RIGHT
        self.next_direction = RIGHT
        self.score = 0
        self.speed = BASE_SPEED
        self.steps = 0
        self.running = False
        self.won = False
        self.grid = np.zeros((self.tile_count, self.tile_count), dtype=np.int8)

    def reset(self):
        """Новая сессия: змейка в центре, движение вправо"""
        cx = cy = self.tile_count // 2
        self.snake = [(cx - i, cy) for i in range(INITIAL_SNAKE_LENGTH)]

        self.direction = RIGHT
        self.next_direction = RIGHT
        self.score = 0
        self.speed = BASE_SPEED
        self.steps = 0
        self.won = False
        self.running = True

        self.food = None
        self._update_grid()
        self._put_food(self._spawn_food())

    def set_direction(self, direction):
        """
        Запоминает поворот до следующего тика.
        Принимается только поворот на ось, перпендикулярную текущему движению,
        поэтому развернуться назад нельзя. Последний допустимый запрос побеждает.
        """
        direction = tuple(direction)
        if direction not in DIRECTIONS:
            return False
        dx, dy = direction
        if dx != 0 and self.direction[0] != 0:
            return False
        if dy != 0 and self.direction[1] != 0:
            return False
        self.next_direction = direction
        return True

    def step(self):
        """Один тик. Возвращает False, если игра уже закончена или закончилась сейчас"""
        if not self.running:
            return False

        self.steps += 1
        self.direction = self.next_direction

        head_x, head_y = self.snake[0]
        new_head = (head_x + self.direction[0], head_y + self.direction[1])

        # Сначала стены, потом тело целиком (включая хвост)
        if not self.in_bounds(new_head) or new_head in self.snake:
            self._finish()
            return False

        self.snake.insert(0, new_head)
        ate = new_head == self.food
        if not ate:
            self.snake.pop()
        # Голова затирает съеденную еду, матрица готова для поиска свободной клетки
        self._update_grid()

        if ate:
            self.score += SCORE_FOR_FOOD
            self._put_food(self._spawn_food())
            self.events.emit(FOOD_EATEN, new_head[0], new_head[1])
            self.speed = max(MIN_SPEED, self.speed - SPEED_STEP)
            self.events.emit(SCORE_CHANGED, self.score)

            # Свободных клеток нет - поле заполнено, победа
            if self.food is None:
                self._finish(won=True)
                return False

        return True

    def _finish(self, won=False):
        """Конец сессии, состояние змейки остаётся для отрисовки"""
        self.running = False
        self.won = won
        self.events.emit(GAME_OVER, self.score)

    def place_food(self, cell):
        """Положить еду в конкретную клетку (клетка не должна быть занята змейкой)"""
        cell = tuple(cell)
        if not self.in_bounds(cell) or cell in self.snake:
            raise ValueError(f"cannot place food at {cell}")
        self.food = cell
        self._update_grid()

    def _spawn_food(self):
        """
        Случайная пустая клетка матрицы мира: ограниченное число случайных
        попыток, затем перебор пустых клеток. None, если пустых нет.
        Матрица должна быть актуальной (см. _update_grid).
        """
        for _ in range(SPAWN_ATTEMPTS):
            x = int(self.rng.integers(self.tile_count))
            y = int(self.rng.integers(self.tile_count))
            if self.grid[y, x] == EMPTY:
                return (x, y)

        empty = np.argwhere(self.grid == EMPTY)
        if len(empty) == 0:
            return None
        y, x = empty[self.rng.integers(len(empty))]
        return (int(x), int(y))

    def _put_food(self, cell):
        self.food = cell
        if cell is not None:
            self.grid[cell[1], cell[0]] = FOOD_CELL

    def _update_grid(self):
        self.grid.fill(EMPTY)
        for x, y in self.snake[1:]:
            self.grid[y, x] = BODY
        if self.food is not None:
            self.grid[self.food[1], self.food[0]] = FOOD_CELL
        if self.snake:
            hx, hy = self.snake[0]
            self.grid[hy, hx] = HEAD

    def in_bounds(self, cell):
        x, y = cell
        return 0 <= x < self.tile_count and 0 <= y < self.tile_count

    @property
    def head(self):
        return self.snake[0] if self.snake else None

    def is_win(self):
        """Победа = змейка заполнила всё поле"""
        return self.won
