"""ReportDataCollector — flattens a TaxReport into sheet rows."""

from dataclasses import dataclass, field

from cgtcalc.domain.models.tax import Disposal, TaxReport

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class ReportData:
    """Rows for every report sheet; each is a list of row tuples."""

    summary: list[tuple] = field(default_factory=list)
    disposals: list[tuple] = field(default_factory=list)
    pools: list[tuple] = field(default_factory=list)


def _tax_year_label(year: int) -> str:
    return f"{year - 1}/{str(year)[-2:]}"


def disposal_row(disposal: Disposal) -> tuple:
    trade = disposal.trade
    return (
        trade.date_time.strftime(DATE_FORMAT),
        _tax_year_label(disposal.tax_year),
        trade.exchange or "",
        trade.kind.value,
        trade.buy.currency.code,
        float(trade.buy.amount),
        trade.sell.currency.code,
        float(trade.sell.amount),
        float(trade.rate),
        float(disposal.buy_value.amount),
        float(disposal.sell_value.amount),
        float(disposal.fee_value.amount),
        float(disposal.allowable_costs.amount),
        float(disposal.gain().amount),
    )


class ReportDataCollector:
    """Collects summary, disposal and pool rows from a calculated TaxReport."""

    def collect(self, report: TaxReport, year: int | None = None) -> ReportData:
        data = ReportData()
        gains = report.gains(year)

        data.summary = [
            ("Tax Year", _tax_year_label(year) if year is not None else "All"),
            ("Disposals", len(gains)),
            ("Total Proceeds (GBP)", float(gains.total_proceeds().amount)),
            ("Total Allowable Costs (GBP)", float(gains.total_allowable_costs().amount)),
            ("Total Fees (GBP)", float(gains.total_fees().amount)),
            ("Total Gain (GBP)", float(gains.total_gain().amount)),
        ]
        data.disposals = [disposal_row(d) for d in gains]
        data.pools = [
            (code, float(pool.total.amount), float(pool.costs.amount), float(pool.cost_basis()))
            for code, pool in sorted(report.pools.items())
        ]
        return data
