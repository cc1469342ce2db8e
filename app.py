"""
Приложение: экраны входа, игры и таблицы рекордов.
Связывает игровой цикл с базой рекордов и звуком через шину событий.
"""
import pygame

from config import (GRID_SIZE, PANEL_WIDTH, FPS, BACKGROUND, PANEL, WHITE, GRAY, RED,
                    HIGHLIGHT, UP, DOWN, LEFT, RIGHT, LEADERBOARD_LIMIT)
from database import format_date, format_login_time
from effects import EffectsLayer
from events import EventBus, SCORE_CHANGED, FOOD_EATEN, GAME_OVER
from game import SnakeGame
from loop import GameLoop, FrameScheduler, IDLE, PAUSED, TERMINAL
from renderer import GameRenderer

LOGIN = "login"
GAME = "game"
LEADERBOARD = "leaderboard"

KEY_DIRECTIONS = {
    pygame.K_UP: UP, pygame.K_w: UP,
    pygame.K_DOWN: DOWN, pygame.K_s: DOWN,
    pygame.K_LEFT: LEFT, pygame.K_a: LEFT,
    pygame.K_RIGHT: RIGHT, pygame.K_d: RIGHT,
}


class LoginForm:
    """Поля формы входа/регистрации"""

    def __init__(self):
        self.register_mode = False
        self.values = {'username': '', 'password': '', 'confirm': ''}
        self.active = 0
        self.error = ''

    @property
    def fields(self):
        if self.register_mode:
            return ['username', 'password', 'confirm']
        return ['username', 'password']

    @property
    def active_field(self):
        return self.fields[self.active]

    def toggle_mode(self):
        self.register_mode = not self.register_mode
        self.active = 0
        self.error = ''

    def next_field(self):
        self.active = (self.active + 1) % len(self.fields)

    def type_text(self, text):
        self.values[self.active_field] += text

    def backspace(self):
        self.values[self.active_field] = self.values[self.active_field][:-1]

    def clear(self):
        self.values = {'username': '', 'password': '', 'confirm': ''}
        self.active = 0
        self.error = ''


class App:
    def __init__(self, db, audio, fps=FPS, tile_count=None):
        self.db = db
        self.audio = audio
        self.fps = fps

        pygame.init()
        self.events = EventBus()
        self.game = SnakeGame(tile_count, self.events)
        self.board_size = self.game.tile_count * GRID_SIZE

        self.screen = pygame.display.set_mode((self.board_size + PANEL_WIDTH, self.board_size))
        pygame.display.set_caption('Neon Snake')
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont('arial', 18)
        self.big_font = pygame.font.SysFont('arial', 32)

        self.effects = EffectsLayer(pygame.time.get_ticks)
        self.effects.attach(self.events)
        self.renderer = GameRenderer(self.game, self.effects)
        self.scheduler = FrameScheduler()
        self.loop = GameLoop(self.game, self.scheduler, pygame.time.get_ticks,
                             self.effects, render=self.draw_game)

        # Каждый сервис подписан отдельно, ошибка одного не мешает остальным
        self.events.subscribe(SCORE_CHANGED, self.update_score)
        self.events.subscribe(FOOD_EATEN, self.on_food_eaten)
        self.events.subscribe(GAME_OVER, self.save_result)
        self.events.subscribe(GAME_OVER, self.on_game_over_sound)

        self.form = LoginForm()
        self.current_score = 0
        self.final_score = 0
        self.stats = None
        self.leaderboard = []
        self.leaderboard_offset = 0
        # Строки таблицы рекордов, помещающиеся между заголовком и подсказками
        self.leaderboard_rows = (self.board_size - 70 - 60) // 22
        self.running = False

        self.current_user = self.db.get_current_user()
        self.screen_name = GAME if self.current_user else LOGIN
        if self.current_user:
            self.update_stats()

    # --- Авторизация ---

    def handle_login(self):
        username = self.form.values['username'].strip()
        password = self.form.values['password']
        if not username or not password:
            self.form.error = 'Enter username and password'
            return

        result = self.db.login_user(username, password)
        if result['success']:
            self._enter(result)
        else:
            self.form.error = result['message']

    def handle_register(self):
        username = self.form.values['username'].strip()
        password = self.form.values['password']
        confirm = self.form.values['confirm']
        if not username or not password or not confirm:
            self.form.error = 'Fill in all fields'
            return
        if password != confirm:
            self.form.error = 'Passwords do not match'
            return

        result = self.db.register_user(username, password)
        if not result['success']:
            self.form.error = result['message']
            return

        # После регистрации сразу входим
        login = self.db.login_user(username, password)
        if login['success']:
            self._enter(login)

    def handle_guest_login(self):
        self._enter(self.db.login_as_guest())

    def _enter(self, result):
        self.current_user = dict(result['user'])
        self.current_user['login_time'] = result['login_time']
        self.form.clear()
        self.show_game_screen()

    def handle_logout(self):
        self.loop.stop()
        self.audio.stop_background_music()
        self.db.logout_user()
        self.current_user = None
        self.form.clear()
        self.screen_name = LOGIN

    # --- Экраны ---

    def show_game_screen(self):
        self.screen_name = GAME
        self.update_stats()

    def show_leaderboard(self):
        if self.loop.is_running:
            self.loop.toggle_pause()
        self.leaderboard = self.db.get_leaderboard(LEADERBOARD_LIMIT)
        self.leaderboard_offset = 0
        self.screen_name = LEADERBOARD

    def scroll_leaderboard(self, delta):
        last = max(0, len(self.leaderboard) - self.leaderboard_rows)
        self.leaderboard_offset = min(max(self.leaderboard_offset + delta, 0), last)

    def visible_leaderboard(self):
        """Пары (место, запись) для текущей прокрутки"""
        start = self.leaderboard_offset
        rows = self.leaderboard[start:start + self.leaderboard_rows]
        return [(start + i + 1, entry) for i, entry in enumerate(rows)]

    def start_game(self):
        # Микшер поднимаем после первого действия игрока
        self.audio.init()
        self.audio.start_background_music()
        self.current_score = 0
        self.loop.start_new_game()

    # --- Обработчики событий игры ---

    def update_score(self, score):
        self.current_score = score

    def on_food_eaten(self, x, y):
        self.audio.play_eat_sound()

    def save_result(self, score):
        self.final_score = score
        self.db.save_score(self.current_user['username'], score)
        self.update_stats()

    def on_game_over_sound(self, score):
        self.audio.stop_background_music()
        self.audio.play_game_over_sound()

    def update_stats(self):
        if self.current_user is not None:
            self.stats = self.db.get_user_stats(self.current_user['username'])

    # --- Ввод ---

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif self.screen_name == LOGIN:
                self.handle_login_event(event)
            elif event.type == pygame.KEYDOWN:
                if self.screen_name == GAME:
                    self.handle_game_key(event.key)
                elif self.screen_name == LEADERBOARD:
                    self.handle_leaderboard_key(event.key)

    def handle_login_event(self, event):
        if event.type == pygame.TEXTINPUT:
            self.form.type_text(event.text)
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_TAB:
                self.form.next_field()
            elif event.key == pygame.K_BACKSPACE:
                self.form.backspace()
            elif event.key == pygame.K_RETURN:
                if self.form.register_mode:
                    self.handle_register()
                else:
                    self.handle_login()
            elif event.key == pygame.K_F2:
                self.form.toggle_mode()
            elif event.key == pygame.K_F3:
                self.handle_guest_login()
            elif event.key == pygame.K_ESCAPE:
                self.running = False

    def handle_game_key(self, key):
        if key in KEY_DIRECTIONS:
            self.loop.handle_direction(KEY_DIRECTIONS[key])
        elif key == pygame.K_SPACE:
            self.toggle_pause()
        elif key in (pygame.K_RETURN, pygame.K_r):
            if self.loop.state in (IDLE, TERMINAL):
                self.start_game()
        elif key == pygame.K_l:
            self.show_leaderboard()
        elif key == pygame.K_m:
            muted = self.audio.toggle_mute()
            if not muted and self.loop.is_running:
                self.audio.start_background_music()
        elif key == pygame.K_ESCAPE:
            self.handle_logout()

    def toggle_pause(self):
        self.loop.toggle_pause()
        # Музыку могли выключить и включить обратно во время паузы
        if self.loop.is_running:
            self.audio.start_background_music()

    def handle_leaderboard_key(self, key):
        if key in (pygame.K_ESCAPE, pygame.K_BACKSPACE, pygame.K_l):
            self.show_game_screen()
        elif key in (pygame.K_UP, pygame.K_w):
            self.scroll_leaderboard(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self.scroll_leaderboard(1)
        elif key == pygame.K_PAGEUP:
            self.scroll_leaderboard(-self.leaderboard_rows)
        elif key == pygame.K_PAGEDOWN:
            self.scroll_leaderboard(self.leaderboard_rows)

    # --- Отрисовка ---

    def text(self, text, pos, color=WHITE, font=None):
        surf = (font or self.font).render(text, True, color)
        self.screen.blit(surf, pos)

    def center_text(self, text, y, color=WHITE, font=None):
        surf = (font or self.big_font).render(text, True, color)
        self.screen.blit(surf, (self.board_size // 2 - surf.get_width() // 2, y))

    def draw_game(self):
        """Кадр игрового экрана (его же вызывает игровой цикл)"""
        now = pygame.time.get_ticks()
        self.screen.fill(BACKGROUND)
        self.renderer.draw(self.screen, now, self.effects.offset())
        self.draw_panel()

        middle = self.board_size // 2
        if self.loop.state == IDLE:
            self.center_text("Press ENTER to start", middle - 20)
        elif self.loop.state == PAUSED:
            self.center_text("PAUSED", middle - 20)
        elif self.loop.state == TERMINAL:
            title = "YOU WIN!" if self.game.is_win() else "GAME OVER"
            self.center_text(title, middle - 40, RED)
            self.center_text(f"Score: {self.final_score}", middle, WHITE, self.font)
            self.center_text("R - play again   L - leaderboard", middle + 30, GRAY, self.font)

    def draw_panel(self):
        """Панель статистики"""
        x = self.board_size
        pygame.draw.rect(self.screen, PANEL, (x, 0, PANEL_WIDTH, self.board_size))
        if self.current_user is None:
            return

        stats = self.stats or {'total_games': 0, 'high_score': 0, 'avg_score': 0,
                               'recent_scores': []}
        lines = [
            (self.current_user['username'], HIGHLIGHT),
            (format_login_time(self.current_user['login_time']), GRAY),
            ("", WHITE),
            (f"Score: {self.current_score}", WHITE),
            (f"High score: {stats['high_score']}", WHITE),
            (f"Games: {stats['total_games']}", WHITE),
            (f"Avg: {stats['avg_score']}", WHITE),
            ("", WHITE),
            ("Recent:", GRAY),
        ]
        if stats['recent_scores']:
            for entry in stats['recent_scores'][:5]:
                lines.append((f"{entry['score']:>5}  {format_date(entry['date'])}", WHITE))
        else:
            lines.append(("No records yet", GRAY))

        lines += [
            ("", WHITE),
            ("Arrows/WASD  Move", GRAY),
            ("SPACE  Pause", GRAY),
            ("ENTER  Start", GRAY),
            ("L  Leaderboard", GRAY),
            ("M  Mute", GRAY),
            ("ESC  Logout", GRAY),
        ]
        for i, (line, color) in enumerate(lines):
            self.text(line, (x + 12, 16 + i * 22), color)

    def draw_login(self):
        self.screen.fill(BACKGROUND)
        title = "Register" if self.form.register_mode else "Login"
        self.text("NEON SNAKE", (40, 40), HIGHLIGHT, self.big_font)
        self.text(title, (40, 100), WHITE, self.big_font)

        labels = {'username': 'Username', 'password': 'Password', 'confirm': 'Confirm'}
        for i, field in enumerate(self.form.fields):
            value = self.form.values[field]
            if field != 'username':
                value = '*' * len(value)
            color = HIGHLIGHT if i == self.form.active else GRAY
            y = 160 + i * 50
            self.text(labels[field], (40, y), color)
            pygame.draw.rect(self.screen, color, (160, y - 4, 260, 30), 1)
            self.text(value, (168, y), WHITE)

        self.text(self.form.error, (40, 320), RED)
        hints = ["TAB  next field", "ENTER  submit",
                 "F2  " + ("back to login" if self.form.register_mode else "register"),
                 "F3  play as guest", "ESC  quit"]
        for i, hint in enumerate(hints):
            self.text(hint, (40, 360 + i * 22), GRAY)

    def draw_leaderboard(self):
        self.screen.fill(BACKGROUND)
        self.text("LEADERBOARD", (40, 20), HIGHLIGHT, self.big_font)
        if not self.leaderboard:
            self.text("No records yet", (40, 80), GRAY)
        username = self.current_user['username'] if self.current_user else None
        for i, (rank, entry) in enumerate(self.visible_leaderboard()):
            mine = entry['username'] == username
            name = entry['username'] + (" (you)" if mine else "")
            row = f"{rank:>3}. {name:<20} {entry['score']:>6}   {format_date(entry['date'])}"
            self.text(row, (40, 70 + i * 22), HIGHLIGHT if mine else WHITE)
        if len(self.leaderboard) > self.leaderboard_rows:
            self.text("UP/DOWN  scroll   PGUP/PGDN  page", (40, self.board_size - 52), GRAY)
        self.text("ESC  back", (40, self.board_size - 30), GRAY)

    def draw(self):
        if self.screen_name == LOGIN:
            self.draw_login()
        elif self.screen_name == LEADERBOARD:
            self.draw_leaderboard()
        else:
            self.draw_game()

    def run(self):
        self.running = True
        pygame.key.start_text_input()
        try:
            while self.running:
                self.handle_events()
                # Кадр игры рисует сам цикл; если он не запланирован - рисуем экран сами
                if self.screen_name != GAME or not self.scheduler.run_frame():
                    self.draw()
                pygame.display.flip()
                self.clock.tick(self.fps)
        finally:
            self.loop.stop()
            self.audio.dispose()
            pygame.quit()
