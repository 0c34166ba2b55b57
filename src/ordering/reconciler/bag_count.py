"""Observable bag count for the navigation badge."""

from collections.abc import Callable

BagCountCallback = Callable[[int], None]


class BagCount:
    def __init__(self) -> None:
        self._subscribers: list[BagCountCallback] = []
        self.value: int | None = None

    def subscribe(self, callback: BagCountCallback) -> Callable[[], None]:
        """Register ``callback``; it is called at once if a count is known."""
        self._subscribers.append(callback)
        if self.value is not None:
            callback(self.value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, count: int) -> None:
        self.value = count
        for callback in list(self._subscribers):
            callback(count)
