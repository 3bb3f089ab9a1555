from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .schema import CANONICAL_FIELDS, canonical_header, is_canonical

logger = logging.getLogger(__name__)

IGNORE = "(ignorar)"

# opções oferecidas ao usuário para cada coluna do arquivo
MAPPING_CHOICES: Tuple[str, ...] = (IGNORE,) + CANONICAL_FIELDS

# cabeçalho do arquivo -> campo canônico ou IGNORE
HeaderMapping = Dict[str, str]


def guess_mapping(headers: Iterable[str]) -> HeaderMapping:
    """Sugestão inicial: o palpite automático de canonical_header para cada coluna."""
    return {h: canonical_header(h) for h in headers}


def unresolved_headers(headers: Iterable[str], mapping: Optional[HeaderMapping] = None) -> List[str]:
    # colunas que ainda não apontam para campo canônico nem foram ignoradas
    mapping = mapping or {}
    out = []
    for h in headers:
        dest = mapping.get(h) or canonical_header(h)
        if dest != IGNORE and not is_canonical(dest):
            out.append(h)
    return out


def _destination(key: str, mapping: HeaderMapping) -> Any:
    dest = mapping.get(key)
    if not dest:
        dest = canonical_header(key)
    return dest


def apply_mapping(records: Sequence[Dict[str, Any]], mapping: Optional[HeaderMapping]) -> List[Dict[str, Any]]:
    """
    Renomeia as chaves de cada registro conforme o mapeamento.
    Chave sem entrada cai no palpite automático; destino IGNORE é descartado.
    Devolve registros novos, os de entrada não são alterados.
    """
    if records is None:
        raise TypeError("records não pode ser None")
    mapping = mapping or {}
    if not records:
        return []

    out = []
    dropped = set()
    for rec in records:
        new: Dict[str, Any] = {}
        for orig, value in rec.items():
            dest = _destination(orig, mapping)
            if not dest or dest == IGNORE:
                dropped.add(orig)
                continue
            new[dest] = value
        out.append(new)

    logger.info("Mapeamento aplicado: %d registros, colunas ignoradas: %s", len(out), sorted(map(str, dropped)))
    return out
