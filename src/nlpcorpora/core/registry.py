"""Registry mapping format tags to handlers.

Adding a format means registering a handler; nothing here changes::

    @register_format("my-format")
    class MyReader(BaseCorpusReader):
        ...

A class is instantiated per lookup with the caller's options; an instance
is returned as is.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from nlpcorpora.core.errors import ConfigurationError
from nlpcorpora.core.protocols import FormatHandler

__all__ = [
    "register_format",
    "unregister_format",
    "registered_formats",
    "get_handler",
]

_REGISTRY: dict[str, type | FormatHandler] = {}

H = TypeVar("H")


def register_format(tag: str, handler: H | None = None) -> H | Callable[[H], H]:
    """Register a handler class or instance under ``tag``.

    Use as a class decorator, or call directly with a handler. A later
    registration under the same tag replaces the earlier one.
    """

    def decorator(target: H) -> H:
        _REGISTRY[tag] = target
        return target

    if handler is None:
        return decorator
    return decorator(handler)


def unregister_format(tag: str) -> None:
    """Remove a registration. Unknown tags are ignored."""
    _REGISTRY.pop(tag, None)


def _load_builtin_formats() -> None:
    # Reader modules register themselves on import
    import nlpcorpora.readers  # noqa: F401


def registered_formats() -> list[str]:
    """Return the registered format tags."""
    _load_builtin_formats()
    return sorted(_REGISTRY)


def get_handler(tag: str, **options: Any) -> FormatHandler:
    """Return a handler for ``tag``.

    Args:
        tag: Registered format tag.
        **options: Constructor options for handler classes.

    Raises:
        ConfigurationError: If the tag is not registered, the options are
            not accepted by the handler class, or options are given for a
            handler registered as an instance.
    """
    _load_builtin_formats()
    try:
        entry = _REGISTRY[tag]
    except KeyError:
        known = ", ".join(sorted(_REGISTRY)) or "none"
        raise ConfigurationError(
            f"Unknown corpus format {tag!r} (registered formats: {known})"
        ) from None

    if isinstance(entry, type):
        try:
            return entry(**options)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid options for format {tag!r}: {exc}") from exc
    if options:
        raise ConfigurationError(
            f"Format {tag!r} is registered as an instance and takes no options"
        )
    return entry
