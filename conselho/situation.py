from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Sequence

from .schema import STATUS
from .utils import RULES, norm_text

logger = logging.getLogger(__name__)

# Transferidos (recebidos ou expedidos), não comparecimento, remanejados e
# baixa por transferência. Aplicados sobre o texto sem acentos e em minúsculas.
DEFAULT_EXCLUSION_PATTERNS = [
    r"transferencia",
    r"transferid[oa]",
    r"nao[\s_]*comparec",
    r"remanejad[oa]",
    r"baixa.*transf",
]

_EXCLUSION_RE = re.compile("|".join(RULES.get("exclusion_patterns") or DEFAULT_EXCLUSION_PATTERNS))


def normalize_status(s: Any) -> str:
    return norm_text(s)


def is_excluded_status(s: Any) -> bool:
    n = normalize_status(s)
    if not n:
        return False
    return bool(_EXCLUSION_RE.search(n))


def filter_visible(records: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Remove da visão externa os alunos com situação excluída (os dados de origem ficam intactos)."""
    out = [r for r in records if not is_excluded_status(r.get(STATUS))]
    hidden = len(records) - len(out)
    if hidden:
        logger.debug("%d aluno(s) ocultos pela situação", hidden)
    return out
