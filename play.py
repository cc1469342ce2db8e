"""
Запуск игры.

Использование:
    python play.py                      # Обычный запуск
    python play.py --mute               # Без звука
    python play.py --db scores.db       # Другая база рекордов
    python play.py --tile-count 20      # Поле 20x20
"""
import argparse

from config import DB_PATH, FPS, TILE_COUNT
from database import ScoreDatabase
from audio import AudioService
from app import App


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Neon Snake')
    parser.add_argument('--db', default=DB_PATH, help='Путь к базе рекордов')
    parser.add_argument('--fps', type=int, default=FPS, help='Кадров в секунду')
    parser.add_argument('--tile-count', type=int, default=TILE_COUNT, help='Размер поля в клетках')
    parser.add_argument('--mute', action='store_true', help='Отключить звук')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.tile_count < 5:
        raise SystemExit("--tile-count must be at least 5")

    db = ScoreDatabase(args.db)
    audio = AudioService(enabled=not args.mute)
    print(f"Database: {args.db}")

    try:
        App(db, audio, fps=args.fps, tile_count=args.tile_count).run()
    finally:
        db.close()


if __name__ == "__main__":
    main()
