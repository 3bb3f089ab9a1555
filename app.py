from __future__ import annotations
import logging
import pandas as pd
import streamlit as st
from conselho.ingest import SourceReadError, list_sheets, load_period_source, EXCEL_EXTENSIONS
from conselho.mapping import MAPPING_CHOICES, apply_mapping, guess_mapping, unresolved_headers
from conselho.merge import replace_field, student_key, working_set
from conselho.situation import filter_visible
from conselho.schema import ACC_ABSENCES, ACC_ATTENDANCE_PCT, NUMBER, STUDENT_NAME, SUBJECTS
from conselho.scoring import DEFAULT_PARAMS, compute_report
from conselho.export import export_to_excel_bytes, report_dataframe, report_to_csv

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

PERIODS = [("b1", "1º bimestre"), ("b2", "2º bimestre"), ("b3", "3º bimestre")]
GRID_COLUMNS = [NUMBER, STUDENT_NAME, *SUBJECTS, ACC_ABSENCES, ACC_ATTENDANCE_PCT]

st.set_page_config(page_title="Conselho – Notas & Faltas", layout="wide")
st.title("Conselho de classe – risco por nota e frequência")
# =========================

# Limites
# =========================
c1, c2 = st.columns(2)
with c1:
    min_average = st.number_input("Média mínima", value=float(DEFAULT_PARAMS["min_average"]), step=0.1)
with c2:
    min_attendance = st.number_input("Frequência mínima (%)", value=float(DEFAULT_PARAMS["min_attendance"]), step=1.0)
params = {"min_average": min_average, "min_attendance": min_attendance}
# =========================

# Uploads + planilha + linha de cabeçalho + mapeamento
# =========================
st.session_state.setdefault("mappings", {})


def _load_period(qual: str, label: str) -> list[dict]:
    up = st.file_uploader(f"{label} (CSV/XLSX/XLS)", type=["csv", "xlsx", "xlsm", "xls"], key=f"{qual}__file")
    if up is None:
        return []

    name = up.name
    data = up.getvalue()
    sheet = None
    header_row = None
    try:
        if name.lower().endswith(EXCEL_EXTENSIONS):
            sheets = list_sheets(data, name)
            if len(sheets) > 1:
                sheet = st.selectbox("Planilha", sheets, key=f"{qual}__sheet")
            if st.checkbox("Definir linha do cabeçalho", key=f"{qual}__hdr_manual"):
                header_row = int(st.number_input("Linha do cabeçalho", min_value=1, value=1, key=f"{qual}__hdr")) - 1
        src = load_period_source(name, data, sheet_name=sheet, header_row=header_row)
    except SourceReadError as e:
        st.error(e.message)
        return []

    headers = src["headers"]
    src_key = f"{qual}::{name}::{src['sheet_name']}"
    mapping = st.session_state["mappings"].setdefault(src_key, guess_mapping(headers))

    with st.expander("Mapear cabeçalhos", expanded=bool(unresolved_headers(headers, mapping))):
        st.caption("Associe cada coluna a um campo canônico. Deixe como “(ignorar)” para colunas irrelevantes.")
        for h in headers:
            options = list(MAPPING_CHOICES)
            current = mapping.get(h, h)
            if current not in options:
                options.append(current)
            mapping[h] = st.selectbox(h, options, index=options.index(current), key=f"{src_key}__map__{h}")

    pending = unresolved_headers(headers, mapping)
    if pending:
        st.warning(f"Colunas não reconhecidas: {', '.join(map(str, pending))}")
    st.caption(f"Linhas carregadas: {len(src['records'])} · cabeçalho na linha {src['header_row'] + 1}")

    st.session_state[f"{qual}__mapping"] = mapping
    return src["records"]


raw = {}
cols = st.columns(3)
for (qual, label), col in zip(PERIODS, cols):
    with col:
        st.subheader(label)
        raw[qual] = _load_period(qual, label)

maps = {qual: st.session_state.get(f"{qual}__mapping") for qual, _ in PERIODS}
p1 = apply_mapping(raw["b1"], maps["b1"])
p2 = apply_mapping(raw["b2"], maps["b2"])
p3 = apply_mapping(raw["b3"], maps["b3"])
# =========================

# Digitação do 3º bimestre
# =========================
st.subheader("3º bimestre (Conselho) – digitação rápida / conferência")
grid_source = filter_visible(p3) if p3 else working_set(p1, p2)
# conjunto editado: o 3º bimestre inteiro (ou a base unida, se ainda não houver arquivo)
current = list(p3) if p3 else list(grid_source)
if grid_source:
    grid_df = pd.DataFrame([{c: r.get(c) for c in GRID_COLUMNS} for r in grid_source], columns=GRID_COLUMNS).astype(object)
    edited_df = st.data_editor(
        grid_df,
        hide_index=True,
        width="stretch",
        disabled=[NUMBER, STUDENT_NAME],
        key="b3__grid",
    )
    for i, rec in enumerate(grid_source):
        key = student_key(rec)
        for c in GRID_COLUMNS[2:]:
            new = edited_df.iat[i, GRID_COLUMNS.index(c)]
            old = rec.get(c)
            if pd.isna(new) and old is None:
                continue
            if new != old:
                current = replace_field(current, key, c, "" if pd.isna(new) else str(new))
else:
    st.info("Carregue o 1º e o 2º bimestre (ou o 3º) para montar a grade.")
# =========================

# Relatório
# =========================
report = compute_report(p1, p2, current, params=params)

st.subheader("Relatório – risco por nota e frequência")
if not report:
    st.warning("Carregue os arquivos dos bimestres.")
else:
    st.dataframe(report_dataframe(report), width="stretch", hide_index=True)
    st.caption('Dica: os casos com "⚠️ Verificar caso" aparecem primeiro.')

    d1, d2 = st.columns(2)
    with d1:
        st.download_button(
            "Exportar relatório (CSV)",
            data=report_to_csv(report).encode("utf-8"),
            file_name="relatorio_conselho.csv",
            mime="text/csv",
        )
    with d2:
        st.download_button(
            "Exportar relatório (Excel)",
            data=export_to_excel_bytes(report),
            file_name="relatorio_conselho.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
