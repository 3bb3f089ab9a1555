"""
Chave de aluno e junção dos bimestres.

Chave = Numero aparado + "::" + Aluno aparado. Dentro de um mesmo conjunto,
chave repetida é resolvida pela última linha (sem erro).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from .numeric import coerce_edit
from .schema import ID_FIELDS, NUMBER, STUDENT_NAME
from .situation import filter_visible
from .utils import is_blank

logger = logging.getLogger(__name__)

KEY_SEP = "::"

Record = Dict[str, Any]


def _key_part(v: Any) -> str:
    if is_blank(v):
        return ""
    # 1 (CSV) e 1.0 (planilha) são o mesmo número de chamada
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v).strip()


def student_key(record: Record) -> str:
    return _key_part(record.get(NUMBER)) + KEY_SEP + _key_part(record.get(STUDENT_NAME))


def index_by_key(records: Optional[Sequence[Record]]) -> Dict[str, Record]:
    out: Dict[str, Record] = {}
    dups = 0
    for rec in records or []:
        k = student_key(rec)
        if k in out:
            dups += 1
        out[k] = rec
    if dups:
        logger.warning("%d chave(s) de aluno repetida(s); prevalece a última linha", dups)
    return out


def first_present(field: str, *records: Optional[Record]) -> Any:
    for rec in records:
        if rec is None:
            continue
        v = rec.get(field)
        if not is_blank(v):
            return v
    return ""


def build_current_base(
    p1: Optional[Sequence[Record]],
    p2: Optional[Sequence[Record]],
    p3: Optional[Sequence[Record]] = None,
) -> List[Record]:
    """
    União das chaves dos três bimestres. Identificação vem do 1º, senão 2º,
    senão 3º; campos do 3º bimestre são sobrepostos quando existem.
    Ordem: primeira aparição da chave (1º, 2º, 3º).
    """
    maps = [index_by_key(p) for p in (p1, p2, p3)]
    m3 = maps[2]

    keys: Dict[str, None] = {}
    for m in maps:
        for k in m:
            keys.setdefault(k, None)

    out = []
    for k in keys:
        found = [m.get(k) for m in maps]
        base: Record = {f: first_present(f, *found) for f in ID_FIELDS}
        if k in m3:
            base.update(m3[k])
        out.append(base)
    return out


def working_set(
    p1: Optional[Sequence[Record]],
    p2: Optional[Sequence[Record]],
    p3: Optional[Sequence[Record]] = None,
) -> List[Record]:
    # grade editável do bimestre atual: base unida sem os alunos excluídos
    return filter_visible(build_current_base(p1, p2, p3))


def replace_field(dataset: Sequence[Record], key: str, field: str, value: Any) -> List[Record]:
    """
    Edição de uma célula: devolve um novo conjunto onde só o campo `field`
    do registro com chave `key` mudou. Com chaves repetidas, altera a última.
    """
    if dataset is None:
        raise TypeError("dataset não pode ser None")
    out = list(dataset)
    for i in range(len(out) - 1, -1, -1):
        if student_key(out[i]) == key:
            rec = dict(out[i])
            rec[field] = coerce_edit(value)
            out[i] = rec
            return out

    logger.warning("Edição ignorada: aluno '%s' não está no conjunto", key)
    return out
