# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

"""
Timing of the time a client spends waiting for the service and decoding
its responses.
"""

import time

import attr


__all__ = ["Timer", "Benchmark"]


@attr.s
class Timer(object):
    """
    Accumulate the duration of repeated operations.

    @ivar seconds: A no-argument callable returning the current time.
    @ivar count: How many operations were timed.
    @ivar total: Their combined duration, in seconds.
    """
    seconds = attr.ib(default=time.time, repr=False)
    count = attr.ib(default=0)
    total = attr.ib(default=0.0)

    def add(self, duration):
        self.count += 1
        self.total += duration

    def start(self):
        return self.seconds()

    def stop(self, started):
        self.add(self.seconds() - started)

    def measure(self, f, *args, **kwargs):
        """
        Call C{f} with the given arguments, adding the time it takes.
        """
        started = self.start()
        try:
            return f(*args, **kwargs)
        finally:
            self.stop(started)

    def reset(self):
        self.count = 0
        self.total = 0.0


@attr.s
class Benchmark(object):
    """
    Per-client timers: C{service} covers query round-trips and C{xml} covers
    response decoding.
    """
    seconds = attr.ib(default=time.time, repr=False)
    service = attr.ib(default=None)
    xml = attr.ib(default=None)

    def __attrs_post_init__(self):
        if self.service is None:
            self.service = Timer(self.seconds)
        if self.xml is None:
            self.xml = Timer(self.seconds)
