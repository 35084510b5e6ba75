"""HTTP header map for forge_functional responses and requests."""

from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from multidict import CIMultiDict


class Headers:
    """Case-insensitive header map.

    Lookups ignore case; iteration keeps the names as they were set.
    """

    def __init__(self, headers: Optional[Union[Mapping[str, str], "Headers"]] = None) -> None:
        if isinstance(headers, Headers):
            self._headers = headers._headers.copy()
        else:
            self._headers = CIMultiDict(headers or {})

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get the first value of a header, or ``default`` when it is not set."""
        return self._headers.get(name, default)

    def get_all(self, name: str) -> List[str]:
        """Get every value of a header."""
        return self._headers.getall(name, [])

    def set(self, name: str, value: str) -> None:
        """Set a header, replacing any previous value."""
        self._headers[name] = str(value)

    def add(self, name: str, value: str) -> None:
        """Add a value to a header without replacing existing ones."""
        self._headers.add(name, str(value))

    def remove(self, name: str) -> None:
        """Remove a header if present."""
        self._headers.popall(name, None)

    def has(self, name: str) -> bool:
        """Check if a header is set."""
        return name in self._headers

    def reset(self) -> None:
        """Remove all headers."""
        self._headers.clear()

    def items(self) -> List[Tuple[str, str]]:
        return list(self._headers.items())

    def to_dict(self) -> Dict[str, str]:
        return {name: value for name, value in self._headers.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._headers

    def __getitem__(self, name: str) -> str:
        return self._headers[name]

    def __setitem__(self, name: str, value: str) -> None:
        self.set(name, value)

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers.keys())

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"Headers({self.to_dict()!r})"
