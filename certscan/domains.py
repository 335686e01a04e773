"""Domain name utilities backed by the public suffix list."""

from __future__ import annotations

import re

_ICANN_START = "===BEGIN ICANN DOMAINS==="
_ICANN_END = "===END ICANN DOMAINS==="
_DELIM_RE = re.compile(r"===.+===")


def to_unicode(domain: str) -> str:
    """Convert punycode (``xn--``) labels of a domain name to Unicode."""
    labels = []
    for label in domain.split("."):
        if label.lower().startswith("xn--"):
            try:
                label = label[4:].encode("ascii").decode("punycode")
            except UnicodeError as err:
                raise ValueError(f"invalid punycode label: {label!r}") from err
        labels.append(label)
    return ".".join(labels)


def is_subdomain(a: str, b: str) -> bool:
    """True if ``a`` is ``b`` or a subdomain of ``b`` (case-insensitive)."""
    headlen = len(a) - len(b)
    if not a or not b or headlen < 0:
        return False
    a = a.lower()
    b = b.lower()
    return a == b or (a.endswith(b) and a[:headlen].endswith("."))


def reverse_domain(s: str) -> str:
    """Turn ``a.b.c`` into ``c.b.a``."""
    return ".".join(reversed(s.split(".")))


class DomainSuffixes:
    """Public domain suffixes (ICANN section only) and lookups over them."""

    def __init__(self) -> None:
        self._reversed_suffixes: set[str] | None = None

    def load(self, path: str) -> None:
        """Load the ICANN suffixes from a public suffix list file."""
        suffixes: set[str] = set()
        in_icann = False
        with open(path, encoding="utf-8") as fh:
            for raw in fh:
                line = raw.strip()
                if not line:
                    continue
                if line.startswith("//"):
                    found = _DELIM_RE.search(line)
                    if found:
                        if found.group(0) == _ICANN_START:
                            in_icann = True
                        elif found.group(0) == _ICANN_END:
                            in_icann = False
                elif in_icann:
                    suffixes.add(reverse_domain(to_unicode(line)))
        if not suffixes:
            self._reversed_suffixes = None
            raise ValueError(f"No domain suffixes in suffix file: {path}")
        self._reversed_suffixes = suffixes

    def domain_parts(self, s: str) -> tuple[str, str, str, bool]:
        """Split a domain into (subdomain, second level, public suffix, ok).

        ``sub.example.com`` gives ``("sub", "example", "com", True)``.
        """
        if self._reversed_suffixes is None:
            raise RuntimeError("DomainSuffixes not loaded")
        parts = s.split(".")
        for i in range(len(parts)):
            tld = ".".join(parts[i:])
            if reverse_domain(tld) in self._reversed_suffixes:
                if i == 0:
                    return "", "", tld, False
                if i == 1:
                    return "", parts[0], tld, True
                return ".".join(parts[: i - 1]), parts[i - 1], tld, True
        return "", "", "", False

    def same_second_level_domain(self, a: str, b: str) -> tuple[bool, bool]:
        """Return (same second level domain, both domains valid)."""
        _, a2nd, atld, aok = self.domain_parts(a)
        _, b2nd, btld, bok = self.domain_parts(b)
        return atld == btld and a2nd == b2nd, aok and bok

    def dump(self) -> None:
        """Print the loaded suffixes for debugging."""
        loaded = self._reversed_suffixes is not None
        print(f"Domain suffixes. Loaded={'true' if loaded else 'false'}.")
        if self._reversed_suffixes is not None:
            print(f" {len(self._reversed_suffixes)} domain suffixes:")
            for key in sorted(self._reversed_suffixes):
                print(f"  '{key}'")