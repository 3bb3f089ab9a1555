"""
Conversão numérica com convenção brasileira (vírgula decimal, ponto de milhar).

Duas políticas distintas, cada uma com seu ponto de uso:
- coerce_cell: ao montar o registro. Converte o que parece número e devolve
  o texto original quando não tem certeza.
- to_number: na agregação. Número finito ou None, nunca texto.
"""
from __future__ import annotations

import math
import re
from numbers import Real
from typing import Any, Optional

from .utils import is_blank

_NUMERIC_RE = re.compile(r"^[-+]?\d+(\.\d+)?$")


def _as_finite(v: Real) -> Optional[float]:
    f = float(v)
    return f if math.isfinite(f) else None


def _parse(txt: str) -> Optional[float]:
    if not _NUMERIC_RE.match(txt):
        return None
    if "." in txt:
        return float(txt)
    return int(txt)


def coerce_cell(v: Any) -> Any:
    """
    Política tolerante: "7,5" -> 7.5, "1.234" -> 1234, "99" -> 99.
    Texto que não é número volta sem alteração (apenas sem espaços externos);
    célula vazia vira None.
    """
    if is_blank(v):
        return None
    if isinstance(v, bool):
        return v
    if isinstance(v, Real):
        f = _as_finite(v)
        return v if f is not None else None
    if not isinstance(v, str):
        return v

    s = v.strip()
    parsed = _parse(s.replace(".", "").replace(",", "."))
    return s if parsed is None else parsed


def to_number(v: Any) -> Optional[float]:
    """
    Política estrita: número finito ou None.
    Com vírgula presente, pontos são separadores de milhar; sem vírgula,
    um único ponto é o decimal ("7.5" e "7,5" valem 7.5).
    """
    if is_blank(v) or isinstance(v, bool):
        return None
    if isinstance(v, Real):
        return _as_finite(v)
    if not isinstance(v, str):
        return None

    s = v.strip().replace(" ", "")
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    parsed = _parse(s)
    return None if parsed is None else float(parsed)


def coerce_edit(v: Any) -> Any:
    # valor digitado na grade: número quando possível, senão o texto aparado
    if is_blank(v):
        return None
    n = to_number(v)
    if n is None:
        return v.strip() if isinstance(v, str) else v
    return int(n) if n.is_integer() else n
