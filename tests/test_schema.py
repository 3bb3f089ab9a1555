"""
Normalização de cabeçalhos

Cobre:
- grafias do dicionário (acentos, caixa, espaços)
- lista fechada de disciplinas
- cabeçalho desconhecido volta inalterado (sem palpite aproximado)
"""

import pytest

from conselho.schema import (
    ABSENCES,
    ACC_ABSENCES,
    ACC_ATTENDANCE_PCT,
    ATTENDANCE_PCT,
    CANONICAL_FIELDS,
    HEADER_VARIANTS,
    NUMBER,
    STATUS,
    STUDENT_NAME,
    SUBJECTS,
    canonical_header,
    is_canonical,
)


class TestTables:
    def test_twelve_subjects(self):
        assert len(SUBJECTS) == 12
        assert len(set(SUBJECTS)) == 12

    def test_variants_point_to_canonical_fields(self):
        for raw, field in HEADER_VARIANTS.items():
            assert field in CANONICAL_FIELDS, f"'{raw}' -> '{field}'"

    def test_every_canonical_field_resolves_to_itself(self):
        for field in CANONICAL_FIELDS:
            assert canonical_header(field) == field


class TestDictionary:
    @pytest.mark.parametrize("raw, expected", [
        ("Nº", NUMBER),
        ("numero", NUMBER),
        ("Aluno(a)", STUDENT_NAME),
        ("NOME", STUDENT_NAME),
        ("Situação", STATUS),
        ("Faltas", ABSENCES),
        ("Faltas acumuladas", ACC_ABSENCES),
        ("Frequência_%", ATTENDANCE_PCT),
        ("Freq_%", ATTENDANCE_PCT),
        ("Frequência acumulada", ACC_ATTENDANCE_PCT),
        ("Português", "Lingua Portuguesa"),
        ("Inglês", "Lingua Inglesa"),
    ])
    def test_known_spellings(self, raw, expected):
        assert canonical_header(raw) == expected

    @pytest.mark.parametrize("raw", ["situacao", "  SITUAÇÃO ", "Situação\t", "sItUaÇãO"])
    def test_case_space_and_accents_do_not_matter(self, raw):
        assert canonical_header(raw) == STATUS


class TestSubjects:
    @pytest.mark.parametrize("raw, expected", [
        ("Arte", "Arte"),
        ("MATEMÁTICA", "Matematica"),
        ("  física ", "Fisica"),
        ("Redação e Leitura", "Redacao e Leitura"),
        ("educacao financeira", "Educacao Financeira"),
    ])
    def test_subject_list_match(self, raw, expected):
        assert canonical_header(raw) == expected


class TestUnrecognized:
    @pytest.mark.parametrize("raw", ["Matemátca", "Nota final", "Obs.", "Sociologia"])
    def test_unknown_header_returned_unchanged(self, raw):
        assert canonical_header(raw) == raw
        assert not is_canonical(canonical_header(raw))

    def test_empty_header_returned_unchanged(self):
        assert canonical_header("") == ""
        assert canonical_header(None) is None
