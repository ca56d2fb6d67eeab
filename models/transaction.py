from dataclasses import dataclass
from datetime import date as Date
from typing import Optional


@dataclass
class Transaction:
    id: int
    date: Date
    username: str
    description: str
    custom_description: str = ""
    account: str = ""
    credit: Optional[float] = None
    debit: Optional[float] = None

    def dedup_key(self) -> tuple[Date, str, str]:
        """Identity used by statement import: amounts and account are ignored."""
        return (self.date, self.description, self.username)

    @property
    def display_description(self) -> str:
        return self.custom_description or self.description

    @property
    def credit_amount(self) -> float:
        return self.credit or 0.0

    @property
    def debit_amount(self) -> float:
        return self.debit or 0.0
