from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .mapping import HeaderMapping, apply_mapping
from .merge import build_current_base, first_present, index_by_key
from .numeric import to_number
from .schema import ACC_ATTENDANCE_PCT, ATTENDANCE_PCT, ID_FIELDS, NUMBER, STATUS, STUDENT_NAME, SUBJECTS
from .situation import filter_visible
from .utils import RULES

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

YES = "SIM"
NO = "NÃO"
ALERT_MARKER = RULES.get("alert_marker", "⚠️ Verificar caso")

_THRESHOLDS = RULES.get("thresholds", {})
DEFAULT_PARAMS = {
    "min_average": float(_THRESHOLDS.get("min_average", 5)),
    "min_attendance": float(_THRESHOLDS.get("min_attendance", 75)),
}

# notas fora desta faixa não entram na média (ex.: "1.234" lido como 1234)
GRADE_MIN, GRADE_MAX = (float(x) for x in RULES.get("grade_range", [0, 100]))

REPORT_COLUMNS: Tuple[str, ...] = (
    NUMBER,
    STUDENT_NAME,
    STATUS,
    "Media_1B",
    "Media_2B",
    "Media_1e2",
    "Media_3B",
    "Media_Parcial_1_2_3",
    "Frequencia_1B_%",
    "Frequencia_2B_%",
    "Frequencia_Acumulada_%",
    "Risco_Nota",
    "Risco_Frequencia",
    "ALERTA",
)


def mean_of(values: Sequence[Optional[float]]) -> Optional[float]:
    # média de 2 casas dos valores presentes; nenhum valor -> None
    vals = [v for v in values if v is not None]
    if not vals:
        return None
    return round(float(np.mean(vals)), 2)


def subject_average(record: Optional[Record]) -> Optional[float]:
    if record is None:
        return None
    grades = []
    for subject in SUBJECTS:
        g = to_number(record.get(subject))
        if g is None or not (GRADE_MIN <= g <= GRADE_MAX):
            continue
        grades.append(g)
    return mean_of(grades)


def _attendance(record: Optional[Record], field: str) -> Optional[float]:
    return to_number(record.get(field)) if record is not None else None


def attendance_aggregate(
    l1: Optional[Record],
    l2: Optional[Record],
    l3: Optional[Record],
) -> Optional[float]:
    """
    Frequência acumulada:
      1) Frequencia_%_Acumulada do 3º bimestre
      2) Frequencia_% do 3º bimestre
      3) média de Frequencia_% do 1º e 2º, arredondada ao inteiro
    """
    acc = _attendance(l3, ACC_ATTENDANCE_PCT)
    if acc is None:
        acc = _attendance(l3, ATTENDANCE_PCT)
    if acc is not None:
        return acc

    vals = [v for v in (_attendance(l1, ATTENDANCE_PCT), _attendance(l2, ATTENDANCE_PCT)) if v is not None]
    if not vals:
        return None
    # meio arredonda para cima (82.5 -> 83)
    return float(np.floor(np.mean(vals) + 0.5))


def risk_flag(value: Optional[float], minimum: float) -> str:
    if value is None:
        return ""
    return YES if value < minimum else NO


def build_report_row(
    l1: Optional[Record],
    l2: Optional[Record],
    l3: Optional[Record],
    min_average: float,
    min_attendance: float,
) -> Record:
    row: Record = {f: first_present(f, l1, l2, l3) for f in ID_FIELDS}

    m1 = subject_average(l1)
    m2 = subject_average(l2)
    m3 = subject_average(l3)
    m12 = mean_of([m1, m2])
    freq = attendance_aggregate(l1, l2, l3)

    row["Media_1B"] = m1
    row["Media_2B"] = m2
    row["Media_1e2"] = m12
    row["Media_3B"] = m3
    row["Media_Parcial_1_2_3"] = mean_of([m1, m2, m3])
    row["Frequencia_1B_%"] = _attendance(l1, ATTENDANCE_PCT)
    row["Frequencia_2B_%"] = _attendance(l2, ATTENDANCE_PCT)
    row["Frequencia_Acumulada_%"] = freq
    row["Risco_Nota"] = risk_flag(m12, min_average)
    row["Risco_Frequencia"] = risk_flag(freq, min_attendance)
    row["ALERTA"] = ALERT_MARKER if YES in (row["Risco_Nota"], row["Risco_Frequencia"]) else ""
    return row


def sort_report(rows: Sequence[Record]) -> List[Record]:
    # alertas primeiro, depois nome do aluno
    return sorted(rows, key=lambda r: (not r.get("ALERTA"), str(r.get(STUDENT_NAME) or "")))


def _build_report(
    p1: Sequence[Record],
    p2: Sequence[Record],
    p3: Sequence[Record],
    min_average: float,
    min_attendance: float,
) -> List[Record]:
    m1 = index_by_key(p1)
    m2 = index_by_key(p2)
    # sem arquivo do 3º bimestre, a base unida faz o papel dele
    m3 = index_by_key(p3 if p3 else build_current_base(p1, p2))

    keys: Dict[str, None] = {}
    for m in (m1, m2, m3):
        for k in m:
            keys.setdefault(k, None)

    rows = [
        build_report_row(m1.get(k), m2.get(k), m3.get(k), min_average, min_attendance)
        for k in keys
    ]
    visible = filter_visible(rows)
    report = sort_report(visible)

    logger.info(
        "Relatório: %d alunos, %d com alerta, %d excluídos pela situação",
        len(report),
        sum(1 for r in report if r["ALERTA"]),
        len(rows) - len(visible),
    )
    return report


def _freeze(records: Optional[Sequence[Record]]) -> Tuple:
    # tipo na chave: True == 1 == 1.0 para o lru_cache, mas não para to_number
    return tuple(tuple((k, type(v), v) for k, v in r.items()) for r in records or ())


def _freeze_mapping(mapping: Optional[HeaderMapping]) -> Tuple:
    return tuple(sorted((mapping or {}).items()))


@lru_cache(maxsize=32)
def _report_cached(f1: Tuple, f2: Tuple, f3: Tuple, maps: Tuple, min_average: float, min_attendance: float) -> Tuple:
    datasets = []
    for frozen, mapping in zip((f1, f2, f3), maps):
        records = [{k: v for k, _, v in items} for items in frozen]
        datasets.append(apply_mapping(records, dict(mapping)) if mapping else records)
    report = _build_report(*datasets, min_average, min_attendance)
    return tuple(tuple(r.items()) for r in report)


def compute_report(
    p1: Optional[Sequence[Record]],
    p2: Optional[Sequence[Record]],
    p3: Optional[Sequence[Record]] = None,
    params: Optional[Dict[str, float]] = None,
    mappings: Optional[Sequence[Optional[HeaderMapping]]] = None,
) -> List[Record]:
    """
    Relatório final: uma linha por aluno (colunas REPORT_COLUMNS), sem os
    excluídos pela situação, com alertas primeiro e depois por nome.

    Derivação pura das entradas; o resultado é memorizado pela tupla
    (conjuntos, mapeamentos, limites) e recalculado só quando algo muda.
    params: {"min_average": 5, "min_attendance": 75}
    mappings: até três HeaderMapping, um por bimestre (None = sem ajuste)
    """
    params = {**DEFAULT_PARAMS, **(params or {})}
    maps = list(mappings or [])[:3]
    maps += [None] * (3 - len(maps))
    frozen_maps = tuple(_freeze_mapping(m) for m in maps)
    min_average = float(params["min_average"])
    min_attendance = float(params["min_attendance"])

    cache_key = (_freeze(p1), _freeze(p2), _freeze(p3), frozen_maps, min_average, min_attendance)
    try:
        hash(cache_key)
    except TypeError:
        # célula com valor não hashable (lista, dict): calcula sem cache
        datasets = [apply_mapping(p or [], m) if m else list(p or []) for p, m in zip((p1, p2, p3), maps)]
        return _build_report(*datasets, min_average, min_attendance)

    return [dict(items) for items in _report_cached(*cache_key)]
