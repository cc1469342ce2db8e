"""
Звук в стиле ретро-приставки: синтез на NumPy, воспроизведение через pygame.mixer.

Мелодии описаны декларативно списком нот (смещение, частота, длительность, форма волны)
и заранее сводятся в один буфер, поэтому порядок нот не зависит от таймеров.
"""
from collections import namedtuple

import numpy as np
import pygame

from config import SAMPLE_RATE, MUSIC_VOLUME, SFX_VOLUME

Note = namedtuple("Note", ["offset", "freq", "duration", "wave"])

# Мелодия на пентатонике (C5 E5 G5 E5 C5 D5 E5 пауза)
MELODY = [
    (523.25, 0.2),
    (659.25, 0.2),
    (783.99, 0.2),
    (659.25, 0.2),
    (523.25, 0.2),
    (587.33, 0.2),
    (659.25, 0.4),
    (0, 0.2),  # пауза
]

# Бас (C3 E3 G3 E3)
BASS_LINE = [
    (130.81, 0.4),
    (164.81, 0.4),
    (196.00, 0.4),
    (164.81, 0.4),
]

EAT_NOTES = [
    Note(0.0, 523.25, 0.1, "square"),
    Note(0.05, 783.99, 0.1, "square"),
]

GAME_OVER_NOTES = [
    Note(0.0, 523.25, 0.15, "sawtooth"),
    Note(0.15, 466.16, 0.15, "sawtooth"),
    Note(0.3, 392.00, 0.15, "sawtooth"),
    Note(0.45, 329.63, 0.3, "sawtooth"),
    Note(0.1, 0, 0.3, "noise"),  # удар шума
]


def sequence(notes, wave):
    """Последовательные ноты -> список Note со смещениями. Паузы (freq=0) пропускаются"""
    result = []
    offset = 0.0
    for freq, duration in notes:
        if freq > 0:
            result.append(Note(round(offset, 6), freq, duration, wave))
        offset += duration
    return result, offset


def background_music():
    """Полный цикл фоновой музыки: ноты, отсортированные по времени, и длина цикла"""
    melody, melody_time = sequence(MELODY, "square")
    bass, bass_time = sequence(BASS_LINE, "sawtooth")
    notes = sorted(melody + bass, key=lambda n: (n.offset, n.freq))
    return notes, max(melody_time, bass_time)


def envelope(n, duration, sample_rate=SAMPLE_RATE):
    """ADSR: атака 10 мс, спад до 0.7 к 50 мс, удержание, затухание 100 мс"""
    t = np.arange(n) / sample_rate
    attack = min(0.01, duration)
    decay = min(0.05, duration)
    release_start = min(duration, max(decay, duration - 0.1))
    env = np.interp(t, [0.0, attack, decay, release_start, duration], [0.0, 1.0, 0.7, 0.7, 0.0])
    return env.astype(np.float32)


def tone(freq, duration, wave="square", sample_rate=SAMPLE_RATE, rng=None):
    """Одна нота как массив float32 в диапазоне [-1, 1]"""
    n = max(1, int(sample_rate * duration))
    t = np.arange(n) / sample_rate

    if wave == "square":
        samples = np.sign(np.sin(2 * np.pi * freq * t))
    elif wave == "sawtooth":
        samples = 2.0 * (t * freq - np.floor(0.5 + t * freq))
    elif wave == "noise":
        rng = rng if rng is not None else np.random.default_rng()
        samples = rng.uniform(-1, 1, n) * np.exp(-np.arange(n) / (n / 5))
        return (samples * 0.3).astype(np.float32)
    else:
        samples = np.sin(2 * np.pi * freq * t)

    return (samples * envelope(n, duration, sample_rate)).astype(np.float32)


def render_notes(notes, length=None, sample_rate=SAMPLE_RATE, rng=None):
    """Свести ноты в один буфер. length - длина в секундах (по умолчанию до конца последней ноты)"""
    if length is None:
        length = max((n.offset + n.duration for n in notes), default=0.0)
    total = max(1, int(round(sample_rate * length)))
    buffer = np.zeros(total, dtype=np.float32)

    for note in notes:
        samples = tone(note.freq, note.duration, note.wave, sample_rate, rng)
        start = int(round(note.offset * sample_rate))
        end = min(total, start + len(samples))
        if start < end:
            buffer[start:end] += samples[:end - start]

    peak = np.max(np.abs(buffer)) if len(buffer) else 0
    if peak > 1.0:
        buffer /= peak
    return buffer


def to_pcm(buffer, channels=1):
    """float32 -> int16, для стерео дублируем канал"""
    pcm = (np.clip(buffer, -1.0, 1.0) * 32767).astype(np.int16)
    if channels > 1:
        pcm = np.repeat(pcm[:, None], channels, axis=1)
    return np.ascontiguousarray(pcm)


class AudioService:
    """
    Звуковой сервис игры. Все методы работают по принципу "выстрелил и забыл":
    если микшер недоступен, сервис просто молчит и никогда не бросает исключения.
    """

    def __init__(self, enabled=True, music_volume=MUSIC_VOLUME, sfx_volume=SFX_VOLUME):
        self.enabled = enabled
        self.music_volume = music_volume
        self.sfx_volume = sfx_volume
        self.is_muted = False
        self.is_music_playing = False
        self.available = False

        self.sounds = {}
        self.music_channel = None

    def init(self):
        """Инициализация микшера и синтез звуков (после первого действия игрока)"""
        if self.available or not self.enabled:
            return self.available

        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1, buffer=512)
            sample_rate, _, channels = pygame.mixer.get_init()

            music_notes, music_length = background_music()
            self.sounds = {
                "eat": self._make_sound(render_notes(EAT_NOTES, sample_rate=sample_rate), channels),
                "game_over": self._make_sound(render_notes(GAME_OVER_NOTES, sample_rate=sample_rate), channels),
                "music": self._make_sound(render_notes(music_notes, music_length, sample_rate), channels),
            }
            self.music_channel = pygame.mixer.Channel(0)
            pygame.mixer.set_reserved(1)
            self._apply_volumes()
            self.available = True
        except pygame.error as e:
            print(f"[audio] Звук недоступен: {e}")
            self.sounds = {}
            self.available = False

        return self.available

    def dispose(self):
        self.stop_background_music()
        self.sounds = {}
        self.music_channel = None
        if self.available:
            try:
                pygame.mixer.quit()
            except pygame.error as e:
                print(f"[audio] Ошибка при закрытии микшера: {e}")
        self.available = False

    @staticmethod
    def _make_sound(buffer, channels):
        return pygame.sndarray.make_sound(to_pcm(buffer, channels))

    def _apply_volumes(self):
        if "music" in self.sounds:
            self.sounds["music"].set_volume(self.music_volume)
        for name in ("eat", "game_over"):
            if name in self.sounds:
                self.sounds[name].set_volume(self.sfx_volume)

    def _play(self, name):
        if not self.available or self.is_muted or name not in self.sounds:
            return False
        try:
            self.sounds[name].play()
            return True
        except pygame.error as e:
            print(f"[audio] Не удалось проиграть {name}: {e}")
            return False

    def play_eat_sound(self):
        return self._play("eat")

    def play_game_over_sound(self):
        return self._play("game_over")

    def start_background_music(self):
        if not self.available or self.is_muted or self.is_music_playing:
            return False
        try:
            self.music_channel.play(self.sounds["music"], loops=-1)
            self.is_music_playing = True
        except pygame.error as e:
            print(f"[audio] Не удалось запустить музыку: {e}")
        return self.is_music_playing

    def stop_background_music(self):
        if self.is_music_playing and self.music_channel is not None:
            try:
                self.music_channel.stop()
            except pygame.error as e:
                print(f"[audio] Не удалось остановить музыку: {e}")
        self.is_music_playing = False

    def toggle_mute(self):
        self.is_muted = not self.is_muted
        if self.is_muted:
            self.stop_background_music()
        return self.is_muted

    def set_music_volume(self, volume):
        self.music_volume = max(0.0, min(1.0, volume))
        self._apply_volumes()

    def set_sfx_volume(self, volume):
        self.sfx_volume = max(0.0, min(1.0, volume))
        self._apply_volumes()
