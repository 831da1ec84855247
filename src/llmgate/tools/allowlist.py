"""Run-scoped URL allowlist."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlparse

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True)
class UrlAllowlist:
    """Ordered set of host suffixes; everything outside it is denied.

    A host matches an entry when it equals the entry or is a subdomain of it
    (``sub.example.com`` matches ``example.com``; ``example.com.evil.com``
    does not).
    """

    hosts: tuple[str, ...] = ()

    @classmethod
    def from_entries(cls, entries: Iterable[str]) -> UrlAllowlist:
        """Trim, lower-case and de-duplicate entries, dropping empty ones."""
        seen: dict[str, None] = {}
        for entry in entries:
            host = entry.strip().lower().rstrip(".")
            if host:
                seen.setdefault(host, None)
        return cls(tuple(seen))

    def __bool__(self) -> bool:
        return bool(self.hosts)

    def allows_host(self, host: str) -> bool:
        host = host.strip().lower().rstrip(".")
        if not host:
            return False
        return any(host == entry or host.endswith(f".{entry}") for entry in self.hosts)

    def allows(self, url: str) -> bool:
        """Return True when *url* targets an allowed host."""
        try:
            host = urlparse(url).hostname
        except ValueError:
            return False
        return host is not None and self.allows_host(host)
