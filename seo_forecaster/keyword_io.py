import html
import io
import logging
import math
import zipfile
from typing import List, Optional, Sequence

import pandas as pd

from .engine import round_half_up
from .errors import KeywordImportError
from .models import Keyword, Projection, SensitivityPoint, Settings

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"keyword", "searchvolume"}
# Fallbacks for optional columns (and unparsable cells)
COLUMN_DEFAULTS = {"position": 20, "targetposition": 10, "difficulty": 50}
SUPPORTED_EXTENSIONS = ("csv", "xlsx")

SAMPLE_CSV = (
    "keyword,searchVolume,position,targetPosition,difficulty\n"
    "gas bbq,8000,8,3,50\n"
    "charcoal bbq,6500,12,5,60\n"
    "bbq grill,5000,9,4,55\n"
)

EXPORT_HEADER = "Month,Traffic,Conversions,Revenue,ROI"


# ===============================
# Import
# ===============================
def _int_column(df: pd.DataFrame, col: str, default: int) -> pd.Series:
    """Numeric column truncated to int; missing, blank, unparsable, infinite or zero cells take `default`."""
    if col not in df.columns:
        return pd.Series([default] * len(df), index=df.index, dtype="int64")
    values = pd.to_numeric(df[col], errors="coerce").replace([math.inf, -math.inf], math.nan).fillna(0)
    values = values.apply(lambda v: int(v)).astype("int64")
    return values.where(values != 0, default)


def keywords_from_frame(df: pd.DataFrame) -> List[Keyword]:
    """
    Accept a table with columns keyword, searchVolume and optionally position,
    targetPosition, difficulty (header case and surrounding spaces are ignored).
    Every row must have a keyword and a positive search volume, otherwise the
    whole table is rejected.
    """
    df = df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise KeywordImportError(f"Missing required columns: {sorted(missing)}")
    df = df.dropna(how="all")
    if df.empty:
        raise KeywordImportError("The file contains no keyword rows.")

    text = df["keyword"].fillna("").astype(str).str.strip()
    volume = _int_column(df, "searchvolume", 0)
    position = _int_column(df, "position", COLUMN_DEFAULTS["position"])
    target = _int_column(df, "targetposition", COLUMN_DEFAULTS["targetposition"])
    difficulty = _int_column(df, "difficulty", COLUMN_DEFAULTS["difficulty"])

    bad = (text == "") | (volume <= 0)
    if bad.any():
        logger.warning("Rejected keyword file: %d invalid rows", int(bad.sum()))
        raise KeywordImportError("File must contain valid 'keyword' and 'searchVolume' columns with positive values.")

    return [
        Keyword(t, int(v), int(p), int(tp), int(d))
        for t, v, p, tp, d in zip(text, volume, position, target, difficulty)
    ]


def load_keywords(file_bytes: bytes, filename: str) -> List[Keyword]:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in SUPPORTED_EXTENSIONS:
        raise KeywordImportError("Unsupported file format. Please upload a .csv or .xlsx file.")
    try:
        if ext == "csv":
            df = pd.read_csv(io.BytesIO(file_bytes), skip_blank_lines=True)
        else:
            df = pd.read_excel(io.BytesIO(file_bytes), sheet_name=0)
    except (ValueError, pd.errors.ParserError, zipfile.BadZipFile) as e:
        raise KeywordImportError(f"Error parsing {ext.upper()} file. Please check the format.") from e
    try:
        keywords = keywords_from_frame(df)
    except OverflowError as e:
        raise KeywordImportError("Numeric values in the file are out of range.") from e
    logger.info("Imported %d keywords from %s", len(keywords), filename)
    return keywords


def keyword_entry_error(text: str, volume: int, position: float, target: float, difficulty: int) -> Optional[str]:
    """Message for the first problem with a manually entered keyword, or None if it is usable."""
    if not text or not text.strip():
        return "Keyword cannot be empty."
    if volume <= 0:
        return "Search Volume must be positive."
    if not (1 <= position <= 100 and 1 <= target <= 100):
        return "Positions must be between 1 and 100."
    if not 1 <= difficulty <= 100:
        return "Difficulty must be between 1 and 100."
    return None


def keywords_to_frame(keywords: Sequence[Keyword]) -> pd.DataFrame:
    return pd.DataFrame(
        [kw.to_dict() for kw in keywords],
        columns=["keyword", "searchVolume", "position", "targetPosition", "difficulty"],
    )


# ===============================
# Export
# ===============================
def projections_to_csv(projections: Sequence[Projection]) -> str:
    rows = [f"{p.month},{p.traffic},{p.conversions},{p.revenue},{p.roi}" for p in projections]
    return "\n".join([EXPORT_HEADER] + rows)


def projections_to_frame(projections: Sequence[Projection]) -> pd.DataFrame:
    return pd.DataFrame([{
        "Month": p.month,
        "Traffic": p.traffic,
        "Traffic Low": p.traffic_range[0],
        "Traffic High": p.traffic_range[1],
        "Conversions": p.conversions,
        "Conversions Low": p.conversions_range[0],
        "Conversions High": p.conversions_range[1],
        "Revenue": float(p.revenue),
        "Revenue Low": p.revenue_range[0],
        "Revenue High": p.revenue_range[1],
        "ROI (%)": float(p.roi),
    } for p in projections])


def breakdown_to_frame(projection: Projection) -> pd.DataFrame:
    return pd.DataFrame([{
        "Keyword": c.keyword,
        "Traffic": round_half_up(c.traffic),
        "Conversions": round_half_up(c.conversions),
        "Revenue": round(c.revenue, 2),
    } for c in projection.keyword_breakdown], columns=["Keyword", "Traffic", "Conversions", "Revenue"])


def sweep_to_frame(points: Sequence[SensitivityPoint], value_label: str) -> pd.DataFrame:
    return pd.DataFrame(
        [{value_label: p.value, "Total Traffic": p.traffic, "Total Conversions": p.conversions,
          "Total Revenue": p.revenue} for p in points],
        columns=[value_label, "Total Traffic", "Total Conversions", "Total Revenue"],
    )


def render_print_html(projections: Sequence[Projection], settings: Settings, break_even: Optional[str]) -> str:
    """Standalone printable report: projection table with ranges plus the break-even line."""
    sym = html.escape(settings.currency_symbol)
    rows = "".join(
        f"<tr><td>{html.escape(p.month)}</td>"
        f"<td>{p.traffic} ({p.traffic_range[0]} - {p.traffic_range[1]})</td>"
        f"<td>{p.conversions} ({p.conversions_range[0]} - {p.conversions_range[1]})</td>"
        f"<td>{p.revenue} ({p.revenue_range[0]:.2f} - {p.revenue_range[1]:.2f})</td>"
        f"<td>{p.roi}%</td></tr>"
        for p in projections
    )
    return f"""<html>
  <head>
    <title>SEO Forecast</title>
    <style>
      body {{ font-family: Arial, sans-serif; padding: 20px; }}
      table {{ width: 100%; border-collapse: collapse; margin-bottom: 20px; }}
      th, td {{ border: 1px solid #ddd; padding: 8px; text-align: right; }}
      th {{ background-color: #f2f2f2; text-align: left; }}
      h2 {{ text-align: center; }}
      .break-even {{ background-color: #e6ffe6; padding: 10px; border-radius: 5px; }}
    </style>
  </head>
  <body onload="window.print()">
    <h2>SEO Forecast</h2>
    <table>
      <thead>
        <tr><th>Month</th><th>Traffic (±10%)</th><th>Conversions (±10%)</th><th>Revenue ({sym}) (±10%)</th><th>ROI</th></tr>
      </thead>
      <tbody>{rows}</tbody>
    </table>
    <div class="break-even">
      <strong>Break-Even Analysis:</strong> You will recover your {sym}{settings.investment:,.0f} investment by {html.escape(break_even or "N/A")}.
    </div>
  </body>
</html>
"""
