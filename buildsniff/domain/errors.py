from __future__ import annotations


class ConversionError(ValueError):
    """A structural converter was handed a document it cannot read.

    The message is prefixed with the converter context, e.g.
    ``Failed to extract JSON from pytest HTML: ...``.
    """


class RegistryError(RuntimeError):
    """The capability registry breaks one of its own invariants."""
