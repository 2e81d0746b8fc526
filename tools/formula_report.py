from __future__ import annotations

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from config.container import Container  # noqa: E402
from domain.exceptions import BakersFormulaError  # noqa: E402
from domain.models import Formula  # noqa: E402
from domain.services.formula_analyzer import FormulaAnalysis  # noqa: E402
from domain.services.number_parser import parse_user_number  # noqa: E402
from domain.services.percentage_table import (  # noqa: E402
    BakersPercentageRow,
    BakersPercentageTable,
)
from ui.formatters import fmt_finding, fmt_percent, fmt_weight  # noqa: E402

load_dotenv(dotenv_path=ROOT / ".env")

SHEET_SUFFIXES = (".csv", ".xlsx", ".xlsm", ".xls")


def _parse_positive_decimal(value: str) -> Decimal:
    number = parse_user_number(value)
    if number is None or number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got '{value}'")
    return number


def _parse_positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a whole number, got '{value}'") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def load_formula(container: Container, path: Path) -> Formula:
    if path.suffix.lower() in SHEET_SUFFIXES:
        result = container.import_formula_sheet.execute(path)
        for warning in result.warnings:
            print(f"warning: {warning}", file=sys.stderr)
        return result.formula
    return container.load_formula.execute(path.name)


def render_rows(rows: tuple[BakersPercentageRow, ...], formula: Formula) -> list[str]:
    rounding = formula.display.rounding
    width = max((len(row.ingredient) for row in rows), default=10)
    return [
        f"  {row.ingredient:<{width}}  {fmt_weight(row.weight, rounding):>12}  "
        f"{fmt_percent(row.percentage):>8}"
        for row in rows
    ]


def render_report(
    formula: Formula,
    table: BakersPercentageTable,
    analysis: FormulaAnalysis,
) -> str:
    rounding = formula.display.rounding
    lines = [
        f"{formula.name or 'Untitled formula'} (v{formula.version})",
        f"Yield: {formula.yield_.pieces} x {fmt_weight(formula.yield_.weight_per_piece, rounding)}",
        "",
        f"Total flour:        {fmt_weight(analysis.total_flour, rounding)}",
        f"Total weight:       {fmt_weight(analysis.total_weight, rounding)}",
        f"Hydration:          {fmt_percent(analysis.hydration)}",
        f"Salt:               {fmt_percent(analysis.salt_percentage)}",
        f"Prefermented flour: {fmt_percent(analysis.prefermented_flour_percentage)}",
    ]

    if table.is_empty():
        lines += ["", "No flour in formula: baker's percentages unavailable."]
    else:
        lines += ["", "Total formula:"] + render_rows(table.total_formula, formula)
        lines += ["", "Final mix:"] + render_rows(table.final_mix, formula)
        for breakdown in table.preferments + table.soakers:
            lines += ["", f"{breakdown.name}:"] + render_rows(breakdown.rows, formula)

    lines.append("")
    if analysis.findings:
        lines.append("Findings:")
        lines += [f"  {fmt_finding(finding)}" for finding in analysis.findings]
    else:
        lines.append("No findings.")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Print a baker's percentage report for a saved or imported formula.",
    )
    parser.add_argument(
        "formula_path",
        type=Path,
        help="Formula JSON file, or a CSV / Excel ingredient sheet to import.",
    )
    parser.add_argument(
        "--pieces",
        type=_parse_positive_int,
        default=None,
        help="Scale to this many pieces (keeps piece weight unless --piece-weight).",
    )
    parser.add_argument(
        "--piece-weight",
        dest="piece_weight",
        type=_parse_positive_decimal,
        default=None,
        help="Scale to this weight per piece in grams.",
    )
    parser.add_argument(
        "--export",
        dest="export_path",
        type=Path,
        default=None,
        help="Also write an Excel workbook (relative paths go under FORMULA_EXPORT_DIR).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    container = Container(saves_directory=args.formula_path.resolve().parent)
    try:
        formula = load_formula(container, args.formula_path)
        if args.pieces is not None or args.piece_weight is not None:
            formula = container.scale_formula.to_yield(
                formula,
                args.pieces or formula.yield_.pieces,
                args.piece_weight or formula.yield_.weight_per_piece,
            )

        table = container.build_table.execute(formula)
        analysis = container.analyze_formula.execute(formula)
        print(render_report(formula, table, analysis))

        if args.export_path:
            output = container.exports_directory / args.export_path
            output.parent.mkdir(parents=True, exist_ok=True)
            container.export_formula.execute(formula, output)
            print(f"\nExported to {output}")
    except BakersFormulaError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
