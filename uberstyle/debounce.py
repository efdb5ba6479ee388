"""Debounced callbacks built on a cancellable scheduled task."""
import asyncio


def running_loop_scheduler(delay: float, callback):
    """Schedule callback on the running event loop. Returns its TimerHandle."""
    return asyncio.get_running_loop().call_later(delay, callback)


def loop_scheduler(loop):
    """Scheduler backed by a specific asyncio event loop's call_later."""
    def schedule(delay: float, callback):
        return loop.call_later(delay, callback)
    return schedule


class Debouncer:
    """
    Delay calls to func until `wait` seconds pass without another call.

    Every call cancels the pending task (if any) and schedules a new one with
    the latest arguments. `scheduler(delay, callback)` must return an object
    with a cancel() method. The default schedules on the running event loop,
    so callbacks run on the same thread as the caller.
    """

    def __init__(self, func, wait: float, *, scheduler=None):
        self.func = func
        self.wait = wait
        self.scheduler = scheduler or running_loop_scheduler
        self._pending = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def __call__(self, *args, **kwargs):
        self.cancel()
        handle = None

        def fire():
            if self._pending is handle:
                self._pending = None
            self.func(*args, **kwargs)

        handle = self.scheduler(self.wait, fire)
        self._pending = handle
        return handle

    def cancel(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
