import logging

logger = logging.getLogger(__name__)


# Raised by the exception-based surfaces of the containers when an allocator refuses a request.
class AllocationError(MemoryError):
    pass


class Allocator(object):
    # Base allocator. Subclasses decide whether a request can be served; callers always go through
    # alloc and free so that every object a container creates is released through the same allocator.

    # Builds a fresh object with the given factory, or returns None if the allocation fails. O(1) plus
    # whatever the factory costs.
    def alloc(self, factory, *args, **kwargs):
        raise NotImplementedError

    # Takes back an object previously returned by alloc on this allocator. O(1)
    def free(self, obj):
        raise NotImplementedError


class ZeroedAllocator(Allocator):
    # The default allocator. Factories are expected to produce objects whose fields all start out
    # empty (None or 0), so a freshly allocated bucket has no chain and a fresh entry has no binding.
    # It never fails.

    # O(1) plus the cost of the factory
    def alloc(self, factory, *args, **kwargs):
        return factory(*args, **kwargs)

    # Nothing to do, the garbage collector reclaims the object once the container drops it. O(1)
    def free(self, obj):
        assert obj is not None


# Shared default used whenever a container is created without an explicit allocator.
calloc_allocator = ZeroedAllocator()


class TrackingAllocator(ZeroedAllocator):
    # Allocator that remembers every live object it has handed out. Used to find leaks and double
    # frees, and to inject allocation failures at a chosen point. Live objects are tracked by
    # identity so that objects defining __eq__ or __hash__ are still told apart. Initializes in O(1)
    def __init__(self):
        self.live = {}
        self.allocations = 0
        self.frees = 0
        self.failures = 0
        self.remaining_successes = None
        self.pending_failures = 0

    # Serves the request unless a failure has been scheduled. O(1) plus the cost of the factory
    def alloc(self, factory, *args, **kwargs):
        if self.should_fail():
            self.failures += 1
            logger.debug("injected allocation failure for %s", getattr(factory, "__name__", factory))
            return None
        obj = super().alloc(factory, *args, **kwargs)
        self.live[id(obj)] = obj
        self.allocations += 1
        return obj

    # Releasing an object this allocator does not consider live is a bug in the caller. O(1)
    def free(self, obj):
        super().free(obj)
        if id(obj) not in self.live or self.live[id(obj)] is not obj:
            raise ValueError("free of an object not allocated by this allocator: %r" % (obj,))
        del self.live[id(obj)]
        self.frees += 1

    # Decides whether the current request is one of the scheduled failures. O(1)
    def should_fail(self):
        if self.pending_failures > 0:
            self.pending_failures -= 1
            return True
        if self.remaining_successes is not None:
            if self.remaining_successes == 0:
                return True
            self.remaining_successes -= 1
        return False

    # Lets the next n allocations through and fails every one after that until reset_failures. O(1)
    def fail_after(self, n):
        assert n >= 0
        self.remaining_successes = n

    # Fails the next count allocations, then goes back to normal. O(1)
    def fail_next(self, count=1):
        assert count > 0
        self.pending_failures = count

    # Cancels any scheduled failures. O(1)
    def reset_failures(self):
        self.remaining_successes = None
        self.pending_failures = 0

    # Number of objects handed out and not yet freed. O(1)
    def outstanding(self):
        return len(self.live)

    # Logs a warning for each type of object still live and returns the total count. O(n)
    def report_leaks(self):
        counts = {}
        for obj in self.live.values():
            name = type(obj).__name__
            counts[name] = counts.get(name, 0) + 1
        for name in sorted(counts):
            logger.warning("%d live %s object(s) never freed", counts[name], name)
        return len(self.live)
