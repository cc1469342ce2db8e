"""
Визуальные эффекты: частицы при поедании еды и тряска экрана при проигрыше.
На состояние игры не влияют, только слушают события.
"""
import math
import random
from dataclasses import dataclass
from typing import List, Tuple

from config import (GRID_SIZE, FOOD, PARTICLE_COUNT, PARTICLE_SPEED_MIN, PARTICLE_SPEED_MAX,
                    PARTICLE_DECAY, SHAKE_DURATION, SHAKE_INTENSITY)
from events import FOOD_EATEN, GAME_OVER


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    life: float
    color: Tuple[int, int, int]

    def update(self, decay):
        """Сдвиг на один кадр, False если частица погасла"""
        self.x += self.vx
        self.y += self.vy
        self.life -= decay
        return self.life > 0


class ParticleSystem:
    def __init__(self, cell_size=GRID_SIZE, count=PARTICLE_COUNT, decay=PARTICLE_DECAY, rng=None):
        self.cell_size = cell_size
        self.count = count
        self.decay = decay
        self.rng = rng or random.Random()
        self.particles: List[Particle] = []

    def burst(self, cell_x, cell_y, color=FOOD):
        """Кольцо частиц из центра клетки"""
        cx = (cell_x + 0.5) * self.cell_size
        cy = (cell_y + 0.5) * self.cell_size
        for i in range(self.count):
            angle = 2 * math.pi * i / self.count
            speed = self.rng.uniform(PARTICLE_SPEED_MIN, PARTICLE_SPEED_MAX)
            self.particles.append(Particle(
                x=cx,
                y=cy,
                vx=math.cos(angle) * speed,
                vy=math.sin(angle) * speed,
                life=1.0,
                color=color,
            ))

    def update(self):
        self.particles = [p for p in self.particles if p.update(self.decay)]

    def clear(self):
        self.particles = []

    def __len__(self):
        return len(self.particles)


class ScreenShake:
    """Затухающее дрожание начала координат, время в мс"""

    def __init__(self, duration=SHAKE_DURATION, intensity=SHAKE_INTENSITY, rng=None):
        self.duration = duration
        self.intensity = intensity
        self.rng = rng or random.Random()
        self.start_time = None

    def start(self, now):
        self.start_time = now

    def stop(self):
        self.start_time = None

    def active(self, now):
        if self.start_time is None:
            return False
        if now - self.start_time >= self.duration:
            self.start_time = None
            return False
        return True

    def offset(self, now):
        if not self.active(now):
            return 0, 0
        progress = (now - self.start_time) / self.duration
        strength = self.intensity * (1 - progress)
        dx = (self.rng.random() - 0.5) * strength * 2
        dy = (self.rng.random() - 0.5) * strength * 2
        return int(round(dx)), int(round(dy))


class EffectsLayer:
    """Частицы + тряска, подписываются на события игры"""

    def __init__(self, clock, particles=None, shake=None):
        self.clock = clock
        self.particles = particles if particles is not None else ParticleSystem()
        self.shake = shake if shake is not None else ScreenShake()

    def attach(self, events):
        events.subscribe(FOOD_EATEN, self.on_food_eaten)
        events.subscribe(GAME_OVER, self.on_game_over)

    def detach(self, events):
        events.unsubscribe(FOOD_EATEN, self.on_food_eaten)
        events.unsubscribe(GAME_OVER, self.on_game_over)

    def on_food_eaten(self, x, y):
        self.particles.burst(x, y)

    def on_game_over(self, score):
        self.shake.start(self.clock())

    def update(self):
        """Вызывается каждый кадр отрисовки"""
        self.particles.update()

    def offset(self):
        return self.shake.offset(self.clock())

    def reset(self):
        self.particles.clear()
        self.shake.stop()
