from __future__ import annotations


class ContractsError(RuntimeError):
    """Base error for the contracts package"""


class ContractsResourceError(ContractsError):
    """A packaged schema file is missing or unreadable; the install is broken."""


class PlanValidationError(ContractsError):
    """
    A plan description does not match the shipped schema.

    `problems` holds one `path: message` line per schema violation.
    """

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = list(problems or [])
