"""
Отрисовка поля: сетка, змейка с радужным градиентом, пульсирующая еда, частицы.
"""
import math

import pygame

from config import GRID_SIZE, BACKGROUND, GRID, FOOD, WHITE, PARTICLE_RADIUS


class GameRenderer:
    def __init__(self, game, effects=None):
        self.game = game
        self.effects = effects
        self.width = self.height = game.tile_count * GRID_SIZE
        self.board = pygame.Surface((self.width, self.height))
        self.overlay = pygame.Surface((self.width, self.height), pygame.SRCALPHA)

    def draw(self, screen, now, offset=(0, 0)):
        """Рисуем поле на screen со сдвигом offset (тряска)"""
        self.board.fill(BACKGROUND)
        self.draw_grid()
        self.draw_food(now)
        self.draw_snake(now)
        self.draw_particles()
        screen.blit(self.board, offset)

    def draw_grid(self):
        """Рисуем сетку"""
        for x in range(0, self.width + 1, GRID_SIZE):
            pygame.draw.line(self.board, GRID, (x, 0), (x, self.height))
        for y in range(0, self.height + 1, GRID_SIZE):
            pygame.draw.line(self.board, GRID, (0, y), (self.width, y))

    def draw_snake(self, now):
        """Радужная змейка, голова ярче"""
        length = max(1, len(self.game.snake))
        size = GRID_SIZE - 2
        for i, (x, y) in enumerate(self.game.snake):
            hue = (i * 360 / length + now / 50) % 360
            color = pygame.Color(0)
            color.hsla = (hue, 100, 70 if i == 0 else 60, 100)
            rect = pygame.Rect(x * GRID_SIZE + 1, y * GRID_SIZE + 1, size, size)
            pygame.draw.rect(self.board, color, rect, border_radius=3)

            if i == 0:
                pygame.draw.circle(self.board, WHITE, rect.center, size // 3)

    def draw_food(self, now):
        """Рисуем еду с пульсацией"""
        if self.game.food is None:
            return
        x, y = self.game.food
        center = (x * GRID_SIZE + GRID_SIZE // 2, y * GRID_SIZE + GRID_SIZE // 2)
        radius = GRID_SIZE / 2 - 2 + math.sin(now / 200) * 2
        pygame.draw.circle(self.board, FOOD, center, max(1, int(radius)))
        pygame.draw.circle(self.board, WHITE, center, max(1, int(radius / 3)))

    def draw_particles(self):
        if self.effects is None:
            return
        self.overlay.fill((0, 0, 0, 0))
        for p in self.effects.particles.particles:
            alpha = int(255 * max(0.0, min(1.0, p.life)))
            pygame.draw.circle(self.overlay, (*p.color, alpha),
                               (int(p.x), int(p.y)), PARTICLE_RADIUS)
        self.board.blit(self.overlay, (0, 0))
