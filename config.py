# Настройки игры
# Поле 25x25, клетка 20 пикселей (500x500)
TILE_COUNT = 25
GRID_SIZE = 20   # размер клетки в пикселях
PANEL_WIDTH = 240  # боковая панель статистики

# Цвета (неоновая тема)
BACKGROUND = (5, 5, 8)
GRID = (0, 40, 45)
FOOD = (57, 255, 20)
PANEL = (20, 20, 28)
WHITE = (255, 255, 255)
GRAY = (140, 140, 150)
RED = (255, 60, 90)
HIGHLIGHT = (0, 243, 255)

# Направления
UP = (0, -1)
DOWN = (0, 1)
RIGHT = (1, 0)
LEFT = (-1, 0)
DIRECTIONS = (UP, DOWN, LEFT, RIGHT)

# Скорость (интервал тика в мс)
BASE_SPEED = 100
MIN_SPEED = 50   # не меньше половины базовой
SPEED_STEP = 1

# Частота кадров отрисовки
FPS = 60

# Начальная длина змейки
INITIAL_SNAKE_LENGTH = 3

# Очки за еду
SCORE_FOR_FOOD = 10

# Сколько случайных попыток до полного перебора свободных клеток
SPAWN_ATTEMPTS = 200

# Частицы
PARTICLE_COUNT = 15
PARTICLE_SPEED_MIN = 2.0
PARTICLE_SPEED_MAX = 5.0
PARTICLE_DECAY = 0.02
PARTICLE_RADIUS = 3

# Тряска экрана при проигрыше
SHAKE_DURATION = 500  # мс
SHAKE_INTENSITY = 10  # пиксели

# Звук
SAMPLE_RATE = 44100
MUSIC_VOLUME = 0.3
SFX_VOLUME = 0.5

# Аккаунты и рекорды
DB_PATH = "neon_snake.db"
MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 4
LEADERBOARD_LIMIT = 50
RECENT_SCORES = 10
