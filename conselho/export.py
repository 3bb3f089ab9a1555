from __future__ import annotations

from io import BytesIO
from typing import Any, Dict, Sequence

import pandas as pd
from xlsxwriter.utility import xl_col_to_name

from .schema import STUDENT_NAME
from .scoring import REPORT_COLUMNS, YES
from .utils import is_blank

SHEET_NAME = "Relatorio"


def _csv_value(v: Any) -> str:
    if is_blank(v):
        return ""
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    s = str(v)
    if "," in s or "\n" in s or "\r" in s:
        return '"' + s.replace('"', '""') + '"'
    return s


def report_to_csv(rows: Sequence[Dict[str, Any]], columns: Sequence[str] = REPORT_COLUMNS) -> str:
    """
    Linha de cabeçalho + uma linha por aluno, separadas por vírgula.
    Valor com vírgula ou quebra de linha vai entre aspas (aspas internas dobradas).
    """
    lines = [",".join(_csv_value(c) for c in columns)]
    for r in rows:
        lines.append(",".join(_csv_value(r.get(c)) for c in columns))
    return "\n".join(lines)


def report_dataframe(rows: Sequence[Dict[str, Any]]) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=list(REPORT_COLUMNS))


def export_to_excel_bytes(rows: Sequence[Dict[str, Any]]) -> bytes:
    df = report_dataframe(rows)
    bio = BytesIO()

    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)

        wb = writer.book
        ws = writer.sheets[SHEET_NAME]

        fmt_header = wb.add_format({"bold": True, "bg_color": "#F2F2F2", "border": 1, "valign": "vcenter"})
        fmt_alert = wb.add_format({"bg_color": "#FEF7E0"})
        fmt_risk = wb.add_format({"font_color": "#C5221F", "bold": True})

        ws.freeze_panes(1, 0)
        ws.autofilter(0, 0, max(1, len(df)), len(df.columns) - 1)
        for col, name in enumerate(df.columns):
            ws.write(0, col, name, fmt_header)
            w = max(10, min(40, int(len(str(name)) * 1.2) + 4))
            ws.set_column(col, col, 32 if name == STUDENT_NAME else w)

        last_row = len(df)
        last_col = len(df.columns) - 1
        if last_row:
            # linha inteira destacada quando há alerta
            alert_col = xl_col_to_name(list(df.columns).index("ALERTA"))
            ws.conditional_format(1, 0, last_row, last_col, {
                "type": "formula",
                "criteria": f'=${alert_col}2<>""',
                "format": fmt_alert,
            })
            for name in ("Risco_Nota", "Risco_Frequencia"):
                j = list(df.columns).index(name)
                ws.conditional_format(1, j, last_row, j, {
                    "type": "cell",
                    "criteria": "==",
                    "value": f'"{YES}"',
                    "format": fmt_risk,
                })

    return bio.getvalue()

