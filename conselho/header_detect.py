from __future__ import annotations

import logging
from typing import Any, List, Sequence, Union

import pandas as pd

from .schema import canonical_header, is_canonical
from .utils import RULES, is_blank

logger = logging.getLogger(__name__)

Matrix = Union[pd.DataFrame, Sequence[Sequence[Any]]]

MAX_SCAN_ROWS = int(RULES.get("header_scan_rows", 20))


def matrix_rows(matrix: Matrix) -> List[List[Any]]:
    # DataFrame (read_excel header=None) ou lista de listas -> lista de listas
    if matrix is None:
        raise TypeError("matrix não pode ser None")
    if isinstance(matrix, pd.DataFrame):
        return matrix.astype(object).values.tolist()
    return [list(r) if r is not None else [] for r in matrix]


def score_header_row(row: Sequence[Any]) -> int:
    """
    Pontuação de "cara de cabeçalho":
      2 por célula que vira campo canônico, 1 por texto qualquer, 0 por vazia.
    """
    score = 0
    for v in row:
        if is_blank(v):
            continue
        score += 2 if is_canonical(canonical_header(v)) else 1
    return score


def detect_header_row(matrix: Matrix, max_scan_rows: int = MAX_SCAN_ROWS) -> int:
    """
    Índice (0-based) da linha de cabeçalho entre as primeiras max_scan_rows.
    Empate fica com a linha mais acima; linhas vazias não concorrem.
    Matriz vazia -> 0.
    """
    rows = matrix_rows(matrix)
    best_row = 0
    best_score = -1

    for r in range(min(len(rows), max_scan_rows)):
        row = rows[r]
        if not row or all(is_blank(v) for v in row):
            continue
        score = score_header_row(row)
        if score > best_score:
            best_score = score
            best_row = r

    logger.debug("Linha de cabeçalho detectada: %d (score=%d)", best_row, best_score)
    return best_row
