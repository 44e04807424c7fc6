from __future__ import annotations


class RegistryError(Exception):
    """Base class for authoring defects found in the guidance corpus."""


class ParseError(RegistryError):
    def __init__(self, message: str, source: str | None = None, errors: list[str] | None = None):
        self.source = source
        self.errors = errors or []
        detail = f"{source}: {message}" if source else message
        if self.errors:
            detail = f"{detail} ({'; '.join(self.errors)})"
        super().__init__(detail)


class MissingReferenceError(RegistryError, KeyError):
    def __init__(self, identifier: str, referenced_by: str | None = None):
        self.identifier = identifier
        self.referenced_by = referenced_by
        if referenced_by:
            message = f"skill {referenced_by!r} references unknown skill {identifier!r}"
        else:
            message = f"unknown skill {identifier!r}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return self.args[0]


class CycleError(RegistryError):
    def __init__(self, path: list[str]):
        self.path = list(path)
        super().__init__("skill reference cycle: " + " -> ".join(self.path))
