from collections.abc import Callable, Iterable

from geolocator.models.common import Location

MAX_ADDRESSES = 25


class AddressSet:
    """Insertion-ordered, de-duplicated, capacity-bounded set of addresses.

    Each normalized address owns one result slot, empty until a lookup reports
    success for it. The optional `on_change` callback fires on every accepted
    `add`, which is how the owning client learns its results went stale.
    """

    def __init__(self, on_change: Callable[[], None] | None = None) -> None:
        self._slots: dict[str, Location | None] = {}
        self._on_change = on_change

    @staticmethod
    def normalize(raw: str) -> str:
        return str(raw).lower().strip()

    def add(self, raw: str) -> bool:
        """Add an address, returning False only when the set is already full.

        Re-adding a known address (in any case or padding) is accepted and
        leaves the entries untouched.
        """
        if len(self._slots) >= MAX_ADDRESSES:
            return False

        key = self.normalize(raw)
        if key not in self._slots:
            self._slots[key] = None

        if self._on_change is not None:
            self._on_change()
        return True

    def add_many(self, raws: Iterable[str]) -> list[bool]:
        return [self.add(raw) for raw in raws]

    def count(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, raw: object) -> bool:
        return isinstance(raw, str) and self.normalize(raw) in self._slots

    def keys(self) -> list[str]:
        return list(self._slots)

    def single_key(self) -> str:
        """Return the only address held; defined only for a one-element set."""
        if len(self._slots) != 1:
            raise ValueError(f"single_key() requires exactly one address, set holds {len(self._slots)}")
        return next(iter(self._slots))

    def get(self, raw: str) -> Location | None:
        return self._slots.get(self.normalize(raw))

    def all(self) -> dict[str, Location | None]:
        return dict(self._slots)

    def store_results(self, results: list[Location | None]) -> None:
        """Replace every slot at once, matching `results` to keys by position."""
        if len(results) != len(self._slots):
            raise ValueError(f"Expected {len(self._slots)} results, got {len(results)}")
        self._slots = dict(zip(self._slots, results))
