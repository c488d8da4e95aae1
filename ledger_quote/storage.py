import logging
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from .formatter import format_rate
from .results import QuoteFailure, QuoteResult

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ["url", "from", "to", "status", "stage", "rate", "error"]


def results_to_frame(results: Iterable[QuoteResult]) -> pd.DataFrame:
    """
    One row per spec: successes carry the rate, failures the stage and error.
    """
    rows = []
    for r in results:
        failed = isinstance(r, QuoteFailure)
        rows.append({
            "url": r.spec.url,
            "from": r.spec.from_,
            "to": r.spec.to,
            "status": "failed" if failed else "ok",
            "stage": r.stage.value if failed else None,
            "rate": None if failed else format_rate(r.rate),
            "error": r.message if failed else None,
        })
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def save_df(df: pd.DataFrame, path: str | Path) -> None:
    """
    Persist a run report as CSV. Empty reports are not written.
    """
    if df.empty:
        return

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path, index=False)
    logger.info("Saved %s", out_path)


def append_prices(lines: Iterable[str], path: str | Path) -> int:
    """
    Append price directives to a ledger price-db file, one per line.

    Returns the number of lines written.
    """
    lines = list(lines)
    if not lines:
        return 0

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("a", encoding="utf-8") as fh:
        for line in lines:
            fh.write(line + "\n")
    logger.info("Appended %d prices to %s", len(lines), out_path)
    return len(lines)
