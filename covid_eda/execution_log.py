import time
from contextlib import contextmanager
from typing import List, Iterator


class ExecutionLog:
    """Ordered list of one-line "operation -> result in ms" entries."""

    def __init__(self):
        self.entries: List[str] = []

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def append(self, entry: str) -> None:
        self.entries.append(entry)

    @contextmanager
    def timed(self, operation: str):
        # Caller sets result["rows"] inside the block
        result = {}
        start = time.time()
        yield result
        elapsed_ms = (time.time() - start) * 1000
        rows = result.get("rows")
        outcome = f"{rows:,} rows" if rows is not None else "done"
        self.entries.append(f"{operation} -> {outcome} in {elapsed_ms:.2f}ms")
