"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from .interfaces.io import Seekable

RequestBody = bytes | str | Seekable | Iterable[bytes] | None


@dataclass(kw_only=True, frozen=True)
class URI:
    """Destination of an HTTP request.

    :param path: The percent-encoded path. Defaults to `/` when unset.
    :param query: The percent-encoded query string without the leading `?`.
    """

    host: str
    path: str | None = None
    scheme: str = "https"
    port: int | None = None
    query: str | None = None
    fragment: str | None = None

    @property
    def netloc(self) -> str:
        if self.port is not None:
            return f"{self.host}:{self.port}"
        return self.host

    def build(self) -> str:
        url = f"{self.scheme}://{self.netloc}{self.path or '/'}"
        if self.query:
            url = f"{url}?{self.query}"
        if self.fragment:
            url = f"{url}#{self.fragment}"
        return url


class Field:
    """A single header name with one or more values."""

    def __init__(self, *, name: str, values: Iterable[str] | None = None):
        self.name = name
        self.values: list[str] = list(values) if values is not None else []

    def add(self, value: str) -> None:
        """Append a value to the field."""
        self.values.append(value)

    def set(self, values: list[str]) -> None:
        """Overwrite existing field values."""
        self.values = values

    def remove(self, value: str) -> None:
        """Remove all matching entries from list."""
        try:
            while True:
                self.values.remove(value)
        except ValueError:
            return

    def as_string(self, delimiter: str = ", ") -> str:
        """Get comma-delimited string of all values."""
        return delimiter.join(self.values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return False
        return self.name == other.name and self.values == other.values

    def __repr__(self) -> str:
        return f"Field(name={self.name!r}, values={self.values!r})"


class Fields:
    """Collection of header fields, looked up case-insensitively.

    Names are compared after trimming surrounding whitespace. Fields passed in
    at construction whose names only differ in case or surrounding whitespace
    are merged into a single field, keeping the first name seen.
    """

    def __init__(self, initial: Iterable[Field] | None = None):
        self.entries: dict[str, Field] = {}
        for fld in initial or ():
            self.extend(fld)

    def set_field(self, field: Field) -> None:
        """Set entry for a Field name, replacing any existing values."""
        self.entries[self._normalize_field_name(field.name)] = field

    def get_field(self, name: str) -> Field:
        """Retrieve Field entry."""
        return self.entries[self._normalize_field_name(name)]

    def remove_field(self, name: str) -> None:
        """Delete entry from collection."""
        del self.entries[self._normalize_field_name(name)]

    def extend(self, field: Field) -> None:
        """Append the values of a field, creating the entry if it's missing."""
        key = self._normalize_field_name(field.name)
        if key in self.entries:
            self.entries[key].values.extend(field.values)
        else:
            self.entries[key] = Field(name=field.name, values=field.values)

    def _normalize_field_name(self, name: str) -> str:
        return name.strip().lower()

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self._normalize_field_name(key) in self.entries

    def __getitem__(self, name: str) -> Field:
        return self.get_field(name)

    def __iter__(self) -> Iterator[Field]:
        yield from self.entries.values()

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fields):
            return False
        return self.entries == other.entries

    def __repr__(self) -> str:
        return f"Fields({list(self.entries.values())!r})"


@dataclass(kw_only=True)
class AWSRequest:
    destination: URI
    method: str
    fields: Fields = field(default_factory=Fields)
    body: RequestBody = None

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        headers: Mapping[str, Any] | None = None,
        body: RequestBody = None,
    ) -> "AWSRequest":
        """Build a request from a URL string and a plain header mapping.

        Header values may be a single value or an iterable of values. Values
        that aren't strings are converted with `str`, and bytes are decoded.
        """
        url_parts = urlsplit(url)
        if url_parts.hostname is None:
            raise ValueError(f"URL has no host to send the request to: {url!r}")
        uri = URI(
            scheme=url_parts.scheme or "https",
            host=url_parts.hostname,
            port=url_parts.port,
            path=url_parts.path or None,
            query=url_parts.query or None,
            fragment=url_parts.fragment or None,
        )
        fields = Fields()
        for name, value in (headers or {}).items():
            if isinstance(value, Iterable) and not isinstance(value, str | bytes):
                values = [str(item) for item in value]
            elif isinstance(value, bytes):
                values = [value.decode()]
            else:
                values = [str(value)]
            fields.extend(Field(name=name, values=values))
        return cls(destination=uri, method=method, fields=fields, body=body)
