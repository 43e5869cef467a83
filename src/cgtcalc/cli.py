"""Command-line entry point.

Usage:
    cgtcalc import coinbase fills.csv > trades.csv
    cgtcalc import bittrex orders.csv > trades.csv
    cgtcalc import binance --symbol ETH-BTC > trades.csv
    cgtcalc prices coingecko > prices.csv
    cgtcalc report cgt trades.csv --prices prices.csv --year 2019 --xlsx cgt.xlsx
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import IO

from cgtcalc.accounting.tax_engine import calculate
from cgtcalc.container import Container
from cgtcalc.domain.models.tax import Gains
from cgtcalc.exceptions import CgtCalcError
from cgtcalc.infra.cex import bittrex, coinbase
from cgtcalc.infra.cex.trade_csv import read_trades, write_trades
from cgtcalc.infra.price.prices import Prices
from cgtcalc.report.csv_writer import write_disposals
from cgtcalc.report.data_collector import ReportDataCollector
from cgtcalc.report.excel_writer import ExcelWriter

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cgtcalc", description="UK Capital Gains Tax calculator")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    imp = commands.add_parser("import", help="import trades from an exchange, writes trades CSV to stdout")
    sources = imp.add_subparsers(dest="source", required=True)
    for name in ("coinbase", "bittrex"):
        src = sources.add_parser(name)
        src.add_argument("file", type=Path)
    binance = sources.add_parser("binance")
    binance.add_argument("--symbol", required=True, help="market as BASE-QUOTE, e.g. BTC-GBP")

    prices = commands.add_parser("prices", help="download historical prices, writes prices CSV to stdout")
    feeds = prices.add_subparsers(dest="feed", required=True)
    cg = feeds.add_parser("coingecko")
    cg.add_argument("--currency", action="append", dest="currencies", help="currency code (repeatable)")

    report = commands.add_parser("report", help="calculate reports from a trades CSV")
    kinds = report.add_subparsers(dest="kind", required=True)
    cgt = kinds.add_parser("cgt")
    cgt.add_argument("file", type=Path, help="trades CSV")
    cgt.add_argument("--prices", type=Path, help="prices CSV (default: fetch from CoinGecko)")
    cgt.add_argument("--year", type=int, help="tax year, named by the calendar year it ends in")
    cgt.add_argument("--csv", type=Path, dest="csv_path", help="write disposals CSV here")
    cgt.add_argument("--xlsx", type=Path, dest="xlsx_path", help="write Excel workbook here")
    return parser


async def _fetch_prices(container: Container, codes: list[str]) -> Prices:
    async with container.coingecko_http() as http:
        provider = container.coingecko(http_client=http)
        return await provider.load_prices(codes)


async def _import_binance(container: Container, symbol: str) -> list:
    async with container.binance_http() as http:
        loader = container.binance_loader(client=container.binance_client(http_client=http))
        return await loader.load(symbol)


def _print_summary(gains: Gains, out: IO[str]) -> None:
    label = f"{gains.year - 1}/{gains.year}" if gains.year is not None else "all years"
    out.write(f"Tax year {label}: {len(gains)} disposals\n")
    out.write(f"  Proceeds:         {gains.total_proceeds().display()}\n")
    out.write(f"  Allowable costs:  {gains.total_allowable_costs().display()}\n")
    out.write(f"  Gain:             {gains.total_gain().display()}\n")


def run(args: argparse.Namespace, container: Container, out: IO[str]) -> None:
    settings = container.settings()

    if args.command == "import":
        if args.source == "coinbase":
            with args.file.open(newline="") as f:
                trades = coinbase.read_fills(f)
        elif args.source == "bittrex":
            with args.file.open(newline="") as f:
                trades = bittrex.read_orders(f)
        else:
            trades = asyncio.run(_import_binance(container, args.symbol))
        write_trades(trades, out)

    elif args.command == "prices":
        prices = asyncio.run(_fetch_prices(container, args.currencies or settings.price_currencies))
        prices.write_csv(out)

    elif args.command == "report":
        with args.file.open(newline="") as f:
            trades = read_trades(f)
        if args.prices is not None:
            with args.prices.open(newline="") as f:
                prices = Prices.read_csv(f)
        else:
            prices = asyncio.run(_fetch_prices(container, settings.price_currencies))

        report = calculate(trades, prices, settings)
        if args.year is not None:
            _print_summary(report.gains(args.year), out)
        else:
            for year in report.tax_years():
                _print_summary(report.gains(year), out)

        if args.csv_path is not None:
            with args.csv_path.open("w", newline="") as f:
                write_disposals(report.gains(args.year), f)
            logger.info("Disposals written to %s", args.csv_path)
        if args.xlsx_path is not None:
            data = ReportDataCollector().collect(report, args.year)
            args.xlsx_path.write_bytes(ExcelWriter().write_to_buffer(data).getvalue())
            logger.info("Workbook written to %s", args.xlsx_path)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    container = Container()
    level = "DEBUG" if args.verbose else container.settings().log_level
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)-5s %(name)s - %(message)s", stream=sys.stderr)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    try:
        run(args, container, sys.stdout)
    except CgtCalcError as e:
        logger.error("%s", e)
        return 1
    return 0
