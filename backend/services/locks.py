from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock


class InstructorLocks:
    """Per-instructor mutexes held across a conflict check and its commit.

    At most one writer per instructor runs the create/approve path at a
    time within this process. One lock is kept per instructor id for the
    life of the registry, so the table grows with the number of distinct
    instructors and never with the number of bookings.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[str, Lock] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _lock_for(self, instructor_id: str) -> Lock:
        with self._guard:
            lock = self._locks.get(instructor_id)
            if lock is None:
                lock = Lock()
                self._locks[instructor_id] = lock
            return lock

    @contextmanager
    def hold(self, instructor_id: str | None) -> Iterator[None]:
        if not instructor_id:
            yield
            return

        with self._lock_for(instructor_id):
            yield
