import json
import logging
import re
import unicodedata
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = BASE_DIR / "data"


def load_json(path: Path, default: Any):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return default
    except (OSError, ValueError) as e:
        logger.warning("Não foi possível ler %s: %s", path, e)
        return default


def rules_path() -> Path:
    return DEFAULT_DATA_DIR / "rules.json"


RULES = load_json(rules_path(), {})

_DASH_CHARS_RE = re.compile(r"[\u2010\u2011\u2012\u2013\u2014\u2212]")
_NBSP_RE = re.compile(r"[\u00A0\u2007\u202F]")  # variantes de NBSP


def strip_accents(s: str) -> str:
    # "Frequência" -> "Frequencia"
    decomposed = unicodedata.normalize("NFD", s)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def is_blank(v: Any) -> bool:
    # None, NaN do pandas e texto só com espaços contam como célula vazia
    if v is None:
        return True
    if isinstance(v, float) and v != v:
        return True
    if isinstance(v, str):
        return not v.strip()
    return False


def norm_text(s: Any) -> str:
    """
    Normalização de texto para comparação:
    - BOM/espaços não separáveis
    - aspas externas
    - todos os tipos de traço -> '-'
    - lower, sem acentos
    - espaços colapsados
    """
    if is_blank(s):
        return ""

    s = str(s)
    s = s.replace("\ufeff", "")
    s = _NBSP_RE.sub(" ", s)
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ('"', "'"):
        s = s[1:-1].strip()
    s = strip_accents(s.lower())
    s = _DASH_CHARS_RE.sub("-", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s
