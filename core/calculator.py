from abc import ABC, abstractmethod
from typing import Any, Iterable, List

class Calculator(ABC):
    # Short label used in reports and log messages
    title: str = ""

    @abstractmethod
    def compute(self, entry: Any) -> Any:
        """Computes the result record for one entry. Must not raise for out-of-table values."""
        pass

    def compute_all(self, entries: Iterable[Any]) -> List[Any]:
        """Computes every entry in order. Entries carry no identity, the caller owns row indexing."""
        return [self.compute(entry) for entry in entries]
