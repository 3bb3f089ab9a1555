"""
Leitura de texto delimitado e de matrizes (planilhas) para registros de aluno.

Registro = dict {campo canônico ou cabeçalho bruto: valor}. Células passam
pela conversão tolerante (coerce_cell); vazias ficam None.

Limitação conhecida: campos entre aspas contendo o separador NÃO são
suportados pelo leitor de texto; a linha é dividida em todo separador.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .header_detect import MAX_SCAN_ROWS, Matrix, detect_header_row, matrix_rows
from .numeric import coerce_cell
from .schema import canonical_header, is_canonical
from .utils import is_blank

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

# só \r\n, \r e \n separam linhas
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def _header_keys(raw_headers: Sequence[Any]) -> List[str]:
    keys = []
    for c, h in enumerate(raw_headers):
        if is_blank(h):
            keys.append(f"col_{c + 1}")
            continue
        key = canonical_header(str(h).strip())
        keys.append(key)
    return keys


def _ordered_unique(keys: Sequence[str]) -> List[str]:
    seen = set()
    out = []
    for k in keys:
        if k not in seen:
            seen.add(k)
            out.append(k)
    return out


def _make_record(keys: Sequence[str], cells: Sequence[Any]) -> Record:
    rec: Record = {}
    # cabeçalho repetido: a coluna mais à direita prevalece
    for i, k in enumerate(keys):
        rec[k] = coerce_cell(cells[i]) if i < len(cells) else None
    return rec


def _log_unrecognized(headers: Sequence[str]) -> None:
    unknown = [h for h in headers if not is_canonical(h)]
    if unknown:
        logger.info("Cabeçalhos não reconhecidos (mapear manualmente): %s", unknown)


def guess_delimiter(first_line: str) -> str:
    # ';' só quando a primeira linha tem ';' e nenhuma ','
    return ";" if ";" in first_line and "," not in first_line else ","


def parse_delimited_text(text: str) -> Tuple[List[str], List[Record]]:
    """
    Texto CSV -> (cabeçalhos, registros).
    Primeira linha não vazia é o cabeçalho; linhas em branco são ignoradas.
    """
    if text is None:
        raise TypeError("text não pode ser None")

    lines = [ln for ln in _LINE_BREAK_RE.split(str(text)) if ln.strip()]
    if not lines:
        return [], []

    sep = guess_delimiter(lines[0])
    keys = _header_keys([h.strip() for h in lines[0].split(sep)])

    records = [_make_record(keys, [c.strip() for c in ln.split(sep)]) for ln in lines[1:]]

    headers = _ordered_unique(keys)
    _log_unrecognized(headers)
    return headers, records


def records_from_matrix(
    matrix: Matrix,
    header_row: Optional[int] = None,
    max_scan_rows: int = MAX_SCAN_ROWS,
) -> Tuple[List[str], List[Record], Dict[str, Any]]:
    """
    Matriz [linha][coluna] -> (cabeçalhos, registros, meta).
    header_row=None usa detect_header_row; meta informa a linha usada.
    """
    rows = matrix_rows(matrix)
    detected = header_row is None
    if detected:
        header_row = detect_header_row(rows, max_scan_rows=max_scan_rows)
    header_row = max(0, int(header_row))

    meta = {"header_row": header_row, "detected": detected}
    if header_row >= len(rows):
        return [], [], meta

    keys = _header_keys(rows[header_row])
    records = []
    for row in rows[header_row + 1:]:
        if not row or all(is_blank(v) for v in row):
            continue
        records.append(_make_record(keys, row))

    headers = _ordered_unique(keys)
    _log_unrecognized(headers)
    return headers, records, meta
