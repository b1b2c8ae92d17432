"""
Compilation errors

Malformed directives, unsupported command arguments and unexpected
tokens are reported as TokenError, a SyntaxError that carries the
offending token and its 1-based position.
"""

from typing import Optional

from ..models.tokens import Token


class TokenError(SyntaxError):
    """
    Structural or semantic error at a specific markup token

    Attributes:
        token: Offending token (compare with Token(...) in tests)
        lineno: 1-based line of the token, 0 if unknown
        offset: 1-based column of the token, 0 if unknown
    """

    def __init__(self, token: Optional[Token], message: str, file_path: str = "") -> None:
        super().__init__(message)
        self.msg = message
        self.token = token
        self.filename = file_path or None
        self.lineno = token.line if token is not None else 0
        self.offset = token.column if token is not None else 0

    def __str__(self) -> str:
        if self.lineno:
            return f"{self.msg} (line {self.lineno}, column {self.offset})"
        return self.msg
