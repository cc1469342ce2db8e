"""
Шина событий игры.

Симуляция публикует события, подписчики (интерфейс, звук, эффекты,
база рекордов) регистрируются через subscribe. Ошибка в одном подписчике
не прерывает шаг игры и не мешает остальным.
"""
from collections import defaultdict

# События симуляции
SCORE_CHANGED = "score_changed"   # (score)
FOOD_EATEN = "food_eaten"         # (x, y)
GAME_OVER = "game_over"           # (final_score)


class EventBus:
    def __init__(self):
        self._listeners = defaultdict(list)

    def subscribe(self, event, listener):
        """Подписать обработчик на событие"""
        self._listeners[event].append(listener)
        return listener

    def unsubscribe(self, event, listener):
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)

    def listeners(self, event):
        return list(self._listeners[event])

    def emit(self, event, *args):
        """
        Синхронно вызывает всех подписчиков в порядке подписки.
        Возвращает количество обработчиков, упавших с ошибкой.
        """
        failed = 0
        for listener in list(self._listeners[event]):
            try:
                listener(*args)
            except Exception as e:
                failed += 1
                name = getattr(listener, "__name__", repr(listener))
                print(f"[events] {event}: ошибка в обработчике {name}: {e}")
        return failed
