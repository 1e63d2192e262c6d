"""featuregate ライブラリの例外型定義"""

from __future__ import annotations


class FeatureFlagError(Exception):
    """featuregate ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class FeatureFlagErrorCodes:
    """エラーコード定数。"""

    FLAG_NOT_FOUND: str = "FLAG_NOT_FOUND"
    FLAG_ALREADY_EXISTS: str = "FLAG_ALREADY_EXISTS"
    CONFIG_ERROR: str = "CONFIG_ERROR"


class ValidationError(Exception):
    """Validation error with field name, message, and code."""

    def __init__(self, field: str, message: str, *, code: str | None = None) -> None:
        self.field = field
        self.message = message
        self.code = code if code is not None else f"INVALID_{field.upper()}"
        super().__init__(f"ValidationError({field}, {self.code}): {message}")
