from abc import ABCMeta
from abc import abstractmethod
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import MutableMapping
from typing import Any


class _MultiDict(MutableMapping, metaclass=ABCMeta):
    """
    An ordered sequence of (key, value) fields with a dictionary interface.

    The raw fields are always available as `fields`. Several fields may share
    a canonical key (see `_kconv`); lookups and assignments then act on the
    first of them.
    """

    fields: tuple[tuple[Any, Any], ...]

    def __init__(self, fields: Iterable[tuple[Any, Any]] = ()):
        super().__init__()
        self.fields = tuple(tuple(i) for i in fields)  # type: ignore

    def __repr__(self):
        fields = (repr(field) for field in self.fields)
        return "{cls}[{fields}]".format(
            cls=type(self).__name__, fields=", ".join(fields)
        )

    @staticmethod
    @abstractmethod
    def _kconv(key: Any) -> Any:
        """
        This method converts a key to its canonical representation.
        For example, header words are case-insensitive, so this method returns key.lower().
        """

    def _index(self, key) -> int:
        key = self._kconv(key)
        for i, (k, _) in enumerate(self.fields):
            if self._kconv(k) == key:
                return i
        return -1

    def __getitem__(self, key):
        i = self._index(key)
        if i < 0:
            raise KeyError(key)
        return self.fields[i][1]

    def __setitem__(self, key, value):
        """
        Replace the value of the first matching field, keeping the spelling of
        its key. If there is none, a new field is added at the bottom.
        """
        i = self._index(key)
        if i < 0:
            self.fields += ((key, value),)
        else:
            self.fields = (
                self.fields[:i] + ((self.fields[i][0], value),) + self.fields[i + 1 :]
            )

    def __delitem__(self, key):
        if key not in self:
            raise KeyError(key)
        key = self._kconv(key)
        self.fields = tuple(
            field for field in self.fields if key != self._kconv(field[0])
        )

    def __iter__(self) -> Iterator[Any]:
        seen = set()
        for key, _ in self.fields:
            key_kconv = self._kconv(key)
            if key_kconv not in seen:
                seen.add(key_kconv)
                yield key

    def __len__(self):
        return len({self._kconv(key) for key, _ in self.fields})

    def __eq__(self, other):
        if isinstance(other, _MultiDict):
            return self.fields == other.fields
        return False

    def copy(self):
        return type(self)(self.fields)
