from __future__ import annotations

import logging
from io import BytesIO
from typing import Any, Dict, List, Optional

import pandas as pd
from openpyxl import load_workbook

from .parse import parse_delimited_text, records_from_matrix

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = (".csv", ".txt")
EXCEL_EXTENSIONS = (".xlsx", ".xlsm", ".xls")

_ENCODINGS = ["utf-8-sig", "utf-8", "cp1252"]


class SourceReadError(Exception):
    """Arquivo não pôde ser lido; `message` é o texto mostrado ao usuário."""

    def __init__(self, message: str, source_name: str = ""):
        super().__init__(f"{source_name}: {message}" if source_name else message)
        self.message = message
        self.source_name = source_name


class UnsupportedFormatError(SourceReadError):
    pass


def _extension(name: str) -> str:
    name = (name or "").lower()
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


# =========================
# CSV: decodificação tolerante
# =========================
def decode_text(data: bytes) -> str:
    for enc in _ENCODINGS:
        try:
            return data.decode(enc)
        except UnicodeDecodeError:
            continue
    # latin-1 decodifica qualquer sequência de bytes
    return data.decode("latin-1")


# =========================
# Excel: planilha como matriz, com células mescladas expandidas
# =========================
def _sheet_to_matrix_with_merged(wb_bytes: bytes, sheet_name: str) -> List[List[Any]]:
    wb = load_workbook(BytesIO(wb_bytes), read_only=False, data_only=True)
    ws = wb[sheet_name]
    merged_map = {}
    for r in ws.merged_cells.ranges:
        min_col, min_row, max_col, max_row = r.bounds
        top_val = ws.cell(min_row, min_col).value
        for rr in range(min_row, max_row + 1):
            for cc in range(min_col, max_col + 1):
                merged_map[(rr, cc)] = top_val

    rows = []
    for r in range(1, ws.max_row + 1):
        row_vals = []
        for c in range(1, ws.max_column + 1):
            v = ws.cell(r, c).value
            if (r, c) in merged_map and (v is None or str(v).strip() == ""):
                v = merged_map[(r, c)]
            row_vals.append(v)
        rows.append(row_vals)
    return rows


def list_sheets(data: bytes, source_name: str = "") -> List[str]:
    try:
        return list(pd.ExcelFile(BytesIO(data)).sheet_names)
    except Exception as e:
        logger.warning("Falha ao listar planilhas de %s: %s", source_name, e)
        raise SourceReadError("Não consegui ler o arquivo. Verifique o formato e tente novamente.", source_name) from e


def read_sheet_matrix(data: bytes, sheet_name: str, source_name: str = "") -> List[List[Any]]:
    if _extension(source_name) != ".xls":
        try:
            return _sheet_to_matrix_with_merged(data, sheet_name)
        except Exception as e:
            logger.debug("openpyxl falhou em %s/%s (%s); tentando pandas", source_name, sheet_name, e)

    try:
        df = pd.read_excel(BytesIO(data), sheet_name=sheet_name, header=None)
    except Exception as e:
        logger.warning("Falha ao ler planilha %s/%s: %s", source_name, sheet_name, e)
        raise SourceReadError("Não consegui ler a planilha. Verifique o formato e tente novamente.", source_name) from e
    return df.astype(object).values.tolist()


# =========================
# Main: arquivo de um bimestre -> registros
# =========================
def load_period_source(
    source_name: str,
    data: bytes,
    sheet_name: Optional[str] = None,
    header_row: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Lê o arquivo de um bimestre. Retorna:
      {
        "source_name": <nome do arquivo>,
        "sheet_name": <planilha ou 'CSV'>,
        "sheets": <planilhas disponíveis (Excel)>,
        "headers": <cabeçalhos já normalizados>,
        "records": <registros>,
        "header_row": <linha do cabeçalho, 0-based>,
      }
    Excel sem sheet_name usa a primeira planilha; a linha de cabeçalho é
    detectada quando header_row não é informado.
    """
    ext = _extension(source_name)

    if ext in TEXT_EXTENSIONS:
        headers, records = parse_delimited_text(decode_text(data))
        return {
            "source_name": source_name,
            "sheet_name": "CSV",
            "sheets": [],
            "headers": headers,
            "records": records,
            "header_row": 0,
        }

    if ext in EXCEL_EXTENSIONS:
        sheets = list_sheets(data, source_name)
        if not sheets:
            raise SourceReadError("A pasta de trabalho não tem planilhas.", source_name)
        sheet = sheet_name if sheet_name in sheets else sheets[0]
        matrix = read_sheet_matrix(data, sheet, source_name)
        headers, records, meta = records_from_matrix(matrix, header_row=header_row)
        return {
            "source_name": source_name,
            "sheet_name": sheet,
            "sheets": sheets,
            "headers": headers,
            "records": records,
            "header_row": meta["header_row"],
        }

    raise UnsupportedFormatError("Formato não suportado. Use CSV, XLSX ou XLS.", source_name)
