from __future__ import annotations


class LitgenError(Exception):
    """Base class for every fault raised while compiling, scanning or regenerating."""

    def __init__(self, message: str, *, offset: int | None = None, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.line = line

    @property
    def kind(self) -> str:
        return type(self).__name__

    def location(self, path: str | None = None) -> str:
        parts: list[str] = [path or "<memory>"]
        if self.line is not None:
            parts.append(str(self.line))
        elif self.offset is not None:
            parts.append(f"@{self.offset}")
        return ":".join(parts)

    def describe(self, path: str | None = None) -> str:
        return f"{self.location(path)}: {self.kind}: {self.message}"


# ---------- structural ----------

class StructuralError(LitgenError):
    pass


class UnterminatedExpression(StructuralError):
    pass


class UnterminatedDirective(StructuralError):
    pass


class TemplateSyntaxError(StructuralError):
    pass


# ---------- render / execution ----------

class UndefinedParameter(LitgenError):
    def __init__(self, name: str, **kwargs) -> None:
        super().__init__(f"undefined parameter `{name}`", **kwargs)
        self.name = name


class NegativeIndent(LitgenError):
    def __init__(self, message: str = "unindent() called at indent level 0", **kwargs) -> None:
        super().__init__(message, **kwargs)


class ExecutionFault(LitgenError):
    def __init__(self, error: BaseException, **kwargs) -> None:
        super().__init__(f"{type(error).__name__}: {error}", **kwargs)
        self.error = error


class LineCountDrift(LitgenError):
    def __init__(self, declared: int, actual: int, **kwargs) -> None:
        super().__init__(f"directive declares {declared} script lines, found {actual}", **kwargs)
        self.declared = declared
        self.actual = actual


class SentinelCollision(LitgenError):
    def __init__(self, number: int, **kwargs) -> None:
        super().__init__(f"generated line {number} is a region sentinel and would end the region early", **kwargs)
        self.number = number
