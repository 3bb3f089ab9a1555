"""
Chave de aluno, junção dos bimestres e edição da grade.
"""

from conselho.merge import (
    KEY_SEP,
    build_current_base,
    index_by_key,
    replace_field,
    student_key,
    working_set,
)
from conselho.schema import ACC_ATTENDANCE_PCT, NUMBER, STATUS, STUDENT_NAME


def rec(n, name, **extra):
    r = {NUMBER: n, STUDENT_NAME: name}
    r.update(extra)
    return r


P1 = [rec(1, "ANA", Situacao="ATIVO", Arte=8), rec(2, "BRUNO", Situacao="ATIVO", Arte=4)]
P2 = [rec(2, "BRUNO", Situacao="TRANSFERIDO", Arte=5), rec(3, "CARLA", Situacao="ATIVO")]
P3 = [rec(3, "CARLA", Arte=9), rec(4, "DANI", Situacao="ATIVO", Arte=7)]


class TestStudentKey:
    def test_trimmed_parts(self):
        assert student_key({NUMBER: " 7 ", STUDENT_NAME: " ANA  "}) == "7" + KEY_SEP + "ANA"

    def test_missing_fields_degenerate_key(self):
        assert student_key({}) == KEY_SEP

    def test_int_and_float_number_match(self):
        assert student_key(rec(1, "ANA")) == student_key(rec(1.0, "ANA")) == student_key(rec("1", "ANA"))


class TestIndex:
    def test_last_write_wins(self):
        m = index_by_key([rec(1, "ANA", Arte=5), rec(1, "ANA", Arte=9)])
        assert len(m) == 1
        assert m[student_key(rec(1, "ANA"))]["Arte"] == 9

    def test_none_input(self):
        assert index_by_key(None) == {}


class TestCurrentBase:
    def test_key_union(self):
        base = build_current_base(P1, P2, P3)
        keys = {student_key(r) for r in base}
        expected = set(index_by_key(P1)) | set(index_by_key(P2)) | set(index_by_key(P3))
        assert keys == expected
        assert len(base) == 4

    def test_key_union_independent_of_order(self):
        a = {student_key(r) for r in build_current_base(P1, P2, P3)}
        b = {student_key(r) for r in build_current_base(P3, P1, P2)}
        assert a == b

    def test_identity_prefers_first_period(self):
        base = {student_key(r): r for r in build_current_base(P1, P2)}
        assert base[student_key(rec(2, "BRUNO"))][STATUS] == "ATIVO"

    def test_period3_fields_overlay(self):
        base = {student_key(r): r for r in build_current_base(P1, P2, P3)}
        carla = base[student_key(rec(3, "CARLA"))]
        assert carla["Arte"] == 9
        assert carla[STATUS] == "ATIVO"

    def test_base_without_period3_has_only_identity(self):
        base = build_current_base(P1, P2)
        assert all(set(r) == {NUMBER, STUDENT_NAME, STATUS} for r in base)

    def test_sources_not_mutated(self):
        before = [dict(r) for r in P3]
        build_current_base(P1, P2, P3)
        assert P3 == before

    def test_working_set_hides_excluded(self):
        names = [r[STUDENT_NAME] for r in working_set(P2, P1)]
        # identidade vem do primeiro conjunto (P2): BRUNO está transferido
        assert "BRUNO" not in names
        assert names == ["CARLA", "ANA"]


class TestReplaceField:
    def test_single_field_changes(self):
        data = build_current_base(P1, P2)
        key = student_key(rec(1, "ANA"))
        out = replace_field(data, key, ACC_ATTENDANCE_PCT, "82,5")

        assert out is not data
        edited = [r for r in out if student_key(r) == key][0]
        assert edited[ACC_ATTENDANCE_PCT] == 82.5
        assert edited[STATUS] == "ATIVO"
        # o conjunto original fica intacto
        assert ACC_ATTENDANCE_PCT not in [r for r in data if student_key(r) == key][0]
        # os demais registros não mudam
        assert [r for r in out if student_key(r) != key] == [r for r in data if student_key(r) != key]

    def test_unknown_key_returns_copy(self):
        data = list(P1)
        out = replace_field(data, "99::NINGUEM", "Arte", "5")
        assert out == data

    def test_blank_value_clears(self):
        out = replace_field(P1, student_key(P1[0]), "Arte", "")
        assert out[0]["Arte"] is None
