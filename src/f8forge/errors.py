"""
f8forge.errors - Error Taxonomy
===============================

Three kinds of failure exist in f8forge:

- ``ValidationFailure``: a user-facing reason a command cannot run (the target
  file already exists, camel-core is missing, ...). Commands turn it into a
  failed ``CommandResult`` and commit nothing.
- ``RecoverableScanError``: one file in a multi-file scan could not be read or
  parsed. It is logged and the scan carries on with the next file.
- ``ContractViolation``: the caller handed the merger a structurally invalid
  target (e.g. ``None`` instead of a collection). Fatal for that call.
"""

from __future__ import annotations


class ForgeError(Exception):
    """Base class for all f8forge errors."""


class ValidationFailure(ForgeError):
    """A command precondition failed; the message is shown to the user."""


class RecoverableScanError(ForgeError):
    """A single file could not be scanned."""

    def __init__(self, file_uri: str, reason: str) -> None:
        super().__init__(f"Cannot scan {file_uri}: {reason}")
        self.file_uri = file_uri
        self.reason = reason


class ContractViolation(ForgeError):
    """The caller broke the merger's input contract."""
