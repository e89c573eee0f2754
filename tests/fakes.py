"""
Test doubles for the watch coordinator.
"""


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Records scheduled callbacks; tests run them explicitly."""

    def __init__(self):
        self.timers = []

    def __call__(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def run_next(self):
        timer = self.timers.pop(0)
        timer.callback()
        return timer


class FakeWatch:
    instances = []

    def __init__(self, paths, callback):
        self.paths = paths
        self.callback = callback
        self.closed = False
        FakeWatch.instances.append(self)

    def close(self):
        self.closed = True

