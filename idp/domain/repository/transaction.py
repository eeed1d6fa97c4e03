"""Work deferred until the request transaction commits."""

from collections.abc import Awaitable, Callable

import logfire

Callback = Callable[[], Awaitable[None]]


class AfterCommit:
    """Callbacks run once the current request transaction has committed.

    Registered by domain services whose side effects must not be seen
    before the data they depend on, such as dropping a cached copy of a
    row. Nothing runs when the transaction rolls back.
    """

    def __init__(self) -> None:
        self._callbacks: list[Callback] = []

    def add(self, callback: Callback) -> None:
        self._callbacks.append(callback)

    async def run(self) -> None:
        """Run and forget the registered callbacks, in order.

        The data is already committed, so a failing callback is logged and
        the rest still run.
        """
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                await callback()
            except Exception as e:
                logfire.error("After-commit callback failed", error=str(e))
