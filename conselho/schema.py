"""
Campos canônicos e normalização de cabeçalhos.

Qualquer cabeçalho digitado por uma secretaria ("Nº", "Aluno(a)",
"Frequência %", "Português") é levado a um identificador fixo. A busca é
exata após remover acentos, espaços externos e caixa; não há correspondência
aproximada. Cabeçalho sem correspondência volta inalterado e segue para o
mapeamento manual.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from .utils import RULES, norm_text

logger = logging.getLogger(__name__)

# Identificação
NUMBER = "Numero"
STUDENT_NAME = "Aluno"
STATUS = "Situacao"

# Frequência
ABSENCES = "Faltas"
ATTENDANCE_PCT = "Frequencia_%"
ACC_ABSENCES = "Faltas_Acumuladas"
ACC_ATTENDANCE_PCT = "Frequencia_%_Acumulada"

SUBJECTS: Tuple[str, ...] = (
    "Arte",
    "Biologia",
    "Educacao Financeira",
    "Filosofia",
    "Fisica",
    "Geografia",
    "Historia",
    "Lingua Inglesa",
    "Lingua Portuguesa",
    "Matematica",
    "Quimica",
    "Redacao e Leitura",
)

ID_FIELDS: Tuple[str, ...] = (NUMBER, STUDENT_NAME, STATUS)
ATTENDANCE_FIELDS: Tuple[str, ...] = (ABSENCES, ATTENDANCE_PCT, ACC_ABSENCES, ACC_ATTENDANCE_PCT)

CANONICAL_FIELDS: Tuple[str, ...] = ID_FIELDS + ATTENDANCE_FIELDS + SUBJECTS
_CANONICAL_SET = frozenset(CANONICAL_FIELDS)

# Grafias conhecidas -> campo canônico. Chaves na grafia natural;
# a comparação é sempre feita sobre norm_text(chave).
HEADER_VARIANTS: Dict[str, str] = {
    # identificação
    "n": NUMBER,
    "no": NUMBER,
    "nº": NUMBER,
    "n°": NUMBER,
    "n.º": NUMBER,
    "nro": NUMBER,
    "num": NUMBER,
    "numero": NUMBER,
    "número": NUMBER,
    "nº de chamada": NUMBER,
    "numero de chamada": NUMBER,
    "aluno": STUDENT_NAME,
    "aluno(a)": STUDENT_NAME,
    "nome": STUDENT_NAME,
    "nome do aluno": STUDENT_NAME,
    "nome do(a) aluno(a)": STUDENT_NAME,
    "estudante": STUDENT_NAME,
    "sit": STATUS,
    "situação": STATUS,
    "situacao": STATUS,
    "situação do aluno": STATUS,
    "status": STATUS,
    # frequência/faltas
    "faltas": ABSENCES,
    "total de faltas": ABSENCES,
    "faltas acumuladas": ACC_ABSENCES,
    "faltas_acumuladas": ACC_ABSENCES,
    "faltas acum.": ACC_ABSENCES,
    "frequência_%": ATTENDANCE_PCT,
    "freq_%": ATTENDANCE_PCT,
    "freq %": ATTENDANCE_PCT,
    "frequência": ATTENDANCE_PCT,
    "frequência %": ATTENDANCE_PCT,
    "frequência (%)": ATTENDANCE_PCT,
    "% frequência": ATTENDANCE_PCT,
    "frequência_%_acumulada": ACC_ATTENDANCE_PCT,
    "frequência acumulada": ACC_ATTENDANCE_PCT,
    "frequência acumulada %": ACC_ATTENDANCE_PCT,
    "frequência % acum.": ACC_ATTENDANCE_PCT,
    # disciplinas (variações comuns)
    "língua portuguesa": "Lingua Portuguesa",
    "português": "Lingua Portuguesa",
    "língua inglesa": "Lingua Inglesa",
    "inglês": "Lingua Inglesa",
    "educação financeira": "Educacao Financeira",
    "redação e leitura": "Redacao e Leitura",
    "matemática": "Matematica",
    "física": "Fisica",
    "história": "Historia",
    "química": "Quimica",
}


def _build_lookup() -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    # campos de identificação/frequência resolvem para si mesmos;
    # disciplinas ficam na lista fechada de _SUBJECT_LOOKUP
    for field in ID_FIELDS + ATTENDANCE_FIELDS:
        lookup[norm_text(field)] = field

    for raw, field in HEADER_VARIANTS.items():
        key = norm_text(raw)
        if lookup.get(key, field) != field:
            raise ValueError(f"Cabeçalho '{raw}' aponta para '{field}' e para '{lookup[key]}'")
        lookup[key] = field

    for raw, field in (RULES.get("header_aliases") or {}).items():
        if field not in _CANONICAL_SET:
            logger.warning("Alias '%s' ignorado: campo desconhecido '%s'", raw, field)
            continue
        lookup[norm_text(raw)] = field
    return lookup


# Construído uma vez no import, nunca alterado.
_HEADER_LOOKUP: Dict[str, str] = _build_lookup()
_SUBJECT_LOOKUP: Dict[str, str] = {norm_text(s): s for s in SUBJECTS}


def canonical_header(raw: Any) -> Any:
    """Campo canônico do cabeçalho ou o próprio valor, se não reconhecido."""
    key = norm_text(raw)
    if not key:
        return raw
    field = _HEADER_LOOKUP.get(key) or _SUBJECT_LOOKUP.get(key)
    if field is None:
        return raw
    return field


def is_canonical(name: Any) -> bool:
    return isinstance(name, str) and name in _CANONICAL_SET
