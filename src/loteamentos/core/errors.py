# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception hierarchy for loteamentos."""

from __future__ import annotations

from typing import Iterable, List


class LoteamentosError(Exception):
    """Base exception for all loteamentos errors."""


# --- CSV import ---


class CsvImportError(LoteamentosError):
    """Raised when a CSV file cannot be imported."""


class FormatError(CsvImportError):
    """The CSV text has no header and data row."""

    def __init__(self, message: str = "") -> None:
        super().__init__(
            message
            or "Arquivo CSV inválido: deve conter pelo menos o cabeçalho e uma linha de dados"
        )


class SchemaError(CsvImportError):
    """One or more required columns are missing from the header row."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing: List[str] = list(missing)
        super().__init__(f"Cabeçalhos obrigatórios ausentes: {', '.join(self.missing)}")


class RowShapeError(CsvImportError):
    """A data row has a different field count than the header."""

    def __init__(self, line: int, expected: int, found: int) -> None:
        self.line = line
        self.expected = expected
        self.found = found
        super().__init__(
            f"Linha {line}: número de colunas não confere com o cabeçalho "
            f"(esperado {expected}, encontrado {found})"
        )


class RowValueError(CsvImportError):
    """A data row fails type, enumeration or required-field validation."""

    def __init__(self, line: int, rule: str) -> None:
        self.line = line
        self.rule = rule
        super().__init__(f"Linha {line}: {rule}")


# --- Auth ---


class AuthError(LoteamentosError):
    """Raised for invalid credentials or directory conflicts."""


class DuplicateUserError(AuthError):
    """A user with the same email or id already exists."""


# --- Areas ---


class AreaNotFoundError(LoteamentosError):
    """Raised when an area id does not exist in the collection."""


class AreaValidationError(LoteamentosError, ValueError):
    """Raised when area fields fail validation (every failure listed)."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))
