"""
Este pacote contém:
- normalização de cabeçalhos para os campos canônicos
- conversão numérica (vírgula decimal / ponto de milhar)
- leitura de CSV e de planilhas (com detecção da linha de cabeçalho)
- mapeamento manual de colunas
- junção dos três bimestres por aluno
- filtro por situação (transferidos, remanejados, não comparecimento)
- médias, frequência acumulada e riscos
- exportação do relatório
"""
from .schema import CANONICAL_FIELDS, SUBJECTS, canonical_header
from .numeric import coerce_cell, to_number
from .parse import parse_delimited_text, records_from_matrix
from .header_detect import detect_header_row
from .mapping import IGNORE, MAPPING_CHOICES, apply_mapping, guess_mapping, unresolved_headers
from .merge import build_current_base, replace_field, student_key, working_set
from .situation import filter_visible, is_excluded_status
from .scoring import REPORT_COLUMNS, compute_report
from .export import export_to_excel_bytes, report_dataframe, report_to_csv
from .ingest import SourceReadError, UnsupportedFormatError, list_sheets, load_period_source

__all__ = [
    "CANONICAL_FIELDS",
    "SUBJECTS",
    "canonical_header",
    "coerce_cell",
    "to_number",
    "parse_delimited_text",
    "records_from_matrix",
    "detect_header_row",
    "IGNORE",
    "MAPPING_CHOICES",
    "apply_mapping",
    "guess_mapping",
    "unresolved_headers",
    "build_current_base",
    "replace_field",
    "student_key",
    "working_set",
    "filter_visible",
    "is_excluded_status",
    "REPORT_COLUMNS",
    "compute_report",
    "export_to_excel_bytes",
    "report_dataframe",
    "report_to_csv",
    "SourceReadError",
    "UnsupportedFormatError",
    "list_sheets",
    "load_period_source",
]
