"""Structured service identifiers for versioned API namespaces.

Service definitions are keyed by fully-qualified identifiers following the
``<ModuleName>\\V<version>\\<LocalName>`` convention, e.g.
``Shop\\V2\\Rest\\Order\\Controller``. This module parses such identifiers once
into a ``ServiceId`` so callers compare fields instead of re-scanning strings.
"""

from __future__ import annotations

from typing import NamedTuple

SEPARATOR = "\\"
VERSION_PREFIX = "V"


class ServiceId(NamedTuple):
    module: str
    version: str
    local_name: str

    def __str__(self) -> str:
        return SEPARATOR.join((self.module, f"{VERSION_PREFIX}{self.version}", self.local_name))


def parse_service_id(identifier: str, module_name: str) -> ServiceId | None:
    """Parse a service identifier relative to a known module name.

    The module name is required because module names may themselves contain
    namespace separators (``Vendor\\Shop``), which makes the version segment
    ambiguous without it.

    Args:
        identifier: Fully-qualified service identifier
        module_name: Module the identifier is expected to live under

    Returns:
        ServiceId, or None when the identifier is not ``<module>\\V<version>\\<rest>``

    Examples:
        >>> parse_service_id("Shop\\\\V2\\\\Rest\\\\Order\\\\Controller", "Shop")
        ServiceId(module='Shop', version='2', local_name='Rest\\\\Order\\\\Controller')
        >>> parse_service_id("Shop\\\\Rest\\\\Order", "Shop") is None
        True
    """
    prefix = module_name + SEPARATOR
    if not module_name or not identifier.startswith(prefix):
        return None

    version_segment, sep, local_name = identifier[len(prefix):].partition(SEPARATOR)
    if not sep or not local_name:
        return None
    if not version_segment.startswith(VERSION_PREFIX) or len(version_segment) == len(VERSION_PREFIX):
        return None

    return ServiceId(module_name, version_segment[len(VERSION_PREFIX):], local_name)


def version_token(version: int | str) -> str:
    """Normalize a version given as int or string to its bare token.

    Examples:
        >>> version_token(1)
        '1'
        >>> version_token("v2")
        '2'
    """
    token = str(version).strip()
    if len(token) > 1 and token[0] in "vV":
        token = token[1:]
    return token


__all__ = ["ServiceId", "parse_service_id", "version_token"]
