from __future__ import annotations
from pathlib import Path
from typing import Optional, Union


class RulesError(Exception):
    """Base error for anything that stops a rules load."""

    def __init__(
        self, path: Union[str, Path], message: str, detail: Optional[str] = None
    ) -> None:
        self.path = path
        self.message = message
        self.detail = detail
        super().__init__(self._render())

    def _render(self) -> str:
        text = f"{self.message}: {self.path}"
        if self.detail:
            text = f"{text} ({self.detail})"
        return text


class ParseError(RulesError):
    def __init__(self, path: Union[str, Path], detail: str) -> None:
        super().__init__(path, "Failed to load rules YAML from", detail)


class IoError(RulesError):
    @classmethod
    def from_os_error(
        cls, path: Union[str, Path], message: str, exc: OSError
    ) -> "IoError":
        return cls(path, message, exc.strerror or str(exc))


class InvalidInputError(RulesError):
    def __init__(
        self,
        path: Union[str, Path],
        reason: str = "is neither a file nor a directory",
        message: str = "Unhandled input type",
    ) -> None:
        self.reason = reason
        super().__init__(path, message)

    def _render(self) -> str:
        return f"{self.message}: {self.path} {self.reason}"
