"""
SQLite база данных игроков, результатов и текущей сессии.
"""
import sqlite3
import hashlib
import time
from datetime import datetime

from config import (DB_PATH, MIN_USERNAME_LENGTH, MIN_PASSWORD_LENGTH,
                    LEADERBOARD_LIMIT, RECENT_SCORES)


def hash_password(password):
    """Хэш пароля (не защита, просто не храним пароль открытым текстом)"""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def format_date(iso_string):
    """2024-01-01T12:00:00 -> 2024/01/01 12:00"""
    return datetime.fromisoformat(iso_string).strftime("%Y/%m/%d %H:%M")


def format_login_time(iso_string):
    return f"Logged in {format_date(iso_string)}"


def _now():
    return datetime.now().isoformat(timespec="seconds")


class ScoreDatabase:
    def __init__(self, db_path=DB_PATH):
        self.db_path = db_path
        self.conn = None
        self._init_db()

    def _init_db(self):
        """Инициализация базы данных"""
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        cursor = self.conn.cursor()

        # Таблица игроков
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS users (
                username TEXT PRIMARY KEY,
                password TEXT NOT NULL,
                created_at TEXT NOT NULL,
                last_login TEXT
            )
        ''')

        # Таблица результатов
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS scores (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT NOT NULL,
                score INTEGER NOT NULL,
                date TEXT NOT NULL,
                timestamp REAL NOT NULL,
                FOREIGN KEY (username) REFERENCES users(username)
            )
        ''')

        # Текущая сессия (одна строка)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS session (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                username TEXT NOT NULL,
                login_time TEXT NOT NULL,
                is_guest INTEGER DEFAULT 0
            )
        ''')

        self.conn.commit()

    def register_user(self, username, password):
        """Регистрация нового игрока"""
        if self._get_user(username) is not None:
            return {'success': False, 'message': 'Username already exists'}

        if len(username) < MIN_USERNAME_LENGTH:
            return {'success': False,
                    'message': f'Username must be at least {MIN_USERNAME_LENGTH} characters'}

        if len(password) < MIN_PASSWORD_LENGTH:
            return {'success': False,
                    'message': f'Password must be at least {MIN_PASSWORD_LENGTH} characters'}

        cursor = self.conn.cursor()
        cursor.execute('''
            INSERT INTO users (username, password, created_at)
            VALUES (?, ?, ?)
        ''', (username, hash_password(password), _now()))
        self.conn.commit()
        return {'success': True, 'message': 'Registered'}

    def login_user(self, username, password):
        """Вход: проверка пароля и запись сессии"""
        user = self._get_user(username)
        if user is None:
            return {'success': False, 'message': 'User not found'}

        if user['password'] != hash_password(password):
            return {'success': False, 'message': 'Wrong password'}

        login_time = _now()
        cursor = self.conn.cursor()
        cursor.execute('UPDATE users SET last_login = ? WHERE username = ?',
                       (login_time, username))
        self._set_session(username, login_time, is_guest=False)
        self.conn.commit()

        return {'success': True, 'message': 'Logged in',
                'user': self._user_dict(self._get_user(username)),
                'login_time': login_time}

    def login_as_guest(self):
        """Гость: в таблицу игроков не пишется, результаты не сохраняются"""
        guest_id = f"guest_{int(time.time() * 1000)}"
        login_time = _now()
        self._set_session(guest_id, login_time, is_guest=True)
        self.conn.commit()

        user = {
            'username': guest_id,
            'is_guest': True,
            'created_at': login_time,
            'last_login': login_time,
        }
        return {'success': True, 'message': 'Guest login', 'user': user, 'login_time': login_time}

    def logout_user(self):
        self.conn.execute('DELETE FROM session')
        self.conn.commit()

    def get_current_user(self):
        """
        Текущий игрок из сохранённой сессии или None.
        Гость не хранится в таблице игроков, поэтому его сессия
        не восстанавливается и сбрасывается, как и сессия удалённого игрока.
        """
        session = self._get_session()
        if session is None:
            return None

        user = self._get_user(session['username'])
        if user is None:
            self.logout_user()
            return None

        result = self._user_dict(user)
        result['login_time'] = session['login_time']
        return result

    def save_score(self, username, score):
        """Сохранить результат игры"""
        if self._is_guest_session():
            return True

        if self._get_user(username) is None:
            return False

        cursor = self.conn.cursor()
        cursor.execute('''
            INSERT INTO scores (username, score, date, timestamp)
            VALUES (?, ?, ?, ?)
        ''', (username, int(score), _now(), time.time()))
        self.conn.commit()
        return True

    def get_user_stats(self, username):
        """Статистика игрока: игры, рекорд, средний счёт, последние результаты"""
        if self._is_guest_session():
            return {'total_games': 0, 'high_score': 0, 'avg_score': 0, 'recent_scores': []}

        if self._get_user(username) is None:
            return None

        cursor = self.conn.cursor()
        cursor.execute('''
            SELECT COUNT(*), COALESCE(MAX(score), 0), COALESCE(SUM(score), 0)
            FROM scores WHERE username = ?
        ''', (username,))
        total_games, high_score, total_score = cursor.fetchone()

        cursor.execute('''
            SELECT score, date FROM scores
            WHERE username = ?
            ORDER BY id DESC
            LIMIT ?
        ''', (username, RECENT_SCORES))
        recent = [{'score': row['score'], 'date': row['date']} for row in cursor.fetchall()]

        avg_score = round(total_score / total_games) if total_games > 0 else 0

        return {
            'total_games': total_games,
            'high_score': high_score,
            'avg_score': avg_score,
            'recent_scores': recent,
        }

    def get_leaderboard(self, limit=LEADERBOARD_LIMIT):
        """Общая таблица рекордов: по счёту, при равенстве - свежие выше"""
        cursor = self.conn.cursor()
        cursor.execute('''
            SELECT username, score, date, timestamp
            FROM scores
            ORDER BY score DESC, timestamp DESC, id DESC
            LIMIT ?
        ''', (limit,))
        return [dict(row) for row in cursor.fetchall()]

    def _get_user(self, username):
        cursor = self.conn.cursor()
        cursor.execute('SELECT * FROM users WHERE username = ?', (username,))
        return cursor.fetchone()

    @staticmethod
    def _user_dict(row):
        return {
            'username': row['username'],
            'is_guest': False,
            'created_at': row['created_at'],
            'last_login': row['last_login'],
        }

    def _set_session(self, username, login_time, is_guest):
        self.conn.execute('''
            INSERT OR REPLACE INTO session (id, username, login_time, is_guest)
            VALUES (1, ?, ?, ?)
        ''', (username, login_time, 1 if is_guest else 0))

    def _get_session(self):
        cursor = self.conn.cursor()
        cursor.execute('SELECT username, login_time, is_guest FROM session WHERE id = 1')
        return cursor.fetchone()

    def _is_guest_session(self):
        session = self._get_session()
        return session is not None and bool(session['is_guest'])

    def close(self):
        """Закрыть соединение"""
        if self.conn:
            self.conn.close()
            self.conn = None
