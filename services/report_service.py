from datetime import date

from matplotlib.dates import DateFormatter
from matplotlib.figure import Figure

from services.filter_service import FilterService
from services.transaction_service import TransactionService
from utils.constants import STATEMENT_DATE_FORMAT, AccountFilter


class ReportService:
    def __init__(self, tx_service: TransactionService, filter_service: FilterService, username: str):
        self._tx_svc = tx_service
        self._filter_svc = filter_service
        self._username = username

    def get_totals(
        self, after_date: date | None = None, before_date: date | None = None
    ) -> dict:
        """Return {credit, debit, fluctuation} over the date range, all accounts."""
        transactions = self._filter_svc.get_transactions_by_date(after_date, before_date)
        credit = sum(t.credit_amount for t in transactions)
        debit = sum(t.debit_amount for t in transactions)
        return {"credit": credit, "debit": debit, "fluctuation": credit - debit}

    def get_chart_series(
        self,
        account: str | AccountFilter,
        after_date: date | None = None,
        before_date: date | None = None,
    ) -> dict[str, list[tuple[date, float]]]:
        """Return {account: [(day, net amount of that day), ...]} oldest first."""
        if account is AccountFilter.ALL:
            accounts = self._tx_svc.get_accounts(self._username)
        else:
            accounts = [account]

        series = {}
        for name in accounts:
            transactions = self._filter_svc.get_transactions(
                name, only_credits=False, only_debits=False,
                before_date=before_date, after_date=after_date,
            )
            by_day: dict[date, float] = {}
            for tx in sorted(transactions, key=lambda t: t.date):
                by_day[tx.date] = by_day.get(tx.date, 0.0) + tx.credit_amount - tx.debit_amount
            series[name] = list(by_day.items())
        return series

    def build_chart_figure(self, series: dict[str, list[tuple[date, float]]]) -> Figure:
        """Line chart, one line per account."""
        fig = Figure(figsize=(8, 4), dpi=100, tight_layout=True)
        ax = fig.add_subplot(111)

        if not any(series.values()):
            ax.text(0.5, 0.5, "No data", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            return fig

        for account, points in series.items():
            if not points:
                continue
            ax.plot(
                [d for d, _ in points],
                [amount for _, amount in points],
                marker="o", label=account,
            )

        ax.set_xlabel("Date")
        ax.set_ylabel("Amount")
        ax.xaxis.set_major_formatter(DateFormatter(STATEMENT_DATE_FORMAT))
        ax.tick_params(axis="x", labelrotation=90, labelsize=8)
        ax.legend()
        return fig
