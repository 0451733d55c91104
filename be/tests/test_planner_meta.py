import pytest

from Planning.planner_meta import (
    PLANNER_META_PREFIX, PlannerMeta, encode_planner_meta, normalize_planner_meta, parse_planner_meta,
)


class TestParsePlannerMeta:
    """Reading the descriptor out of a task objective."""

    def test_subphase_without_parent(self):
        meta, ok = parse_planner_meta('__planner_meta__:{"kind":"subphase"}')
        assert ok
        assert meta.is_subphase
        assert meta.parent_task_id == ""

    def test_task_under_subphase_is_normalized(self):
        objective = '  __planner_meta__:  {"kind":" TASK ","parentType":"SubPhase","parentId":"  s1 "}  '
        meta, ok = parse_planner_meta(objective)
        assert ok
        assert meta == PlannerMeta(kind="task", parent_type="subphase", parent_id="s1")
        assert meta.parent_task_id == "s1"

    def test_task_under_phase_has_no_parent_task(self):
        meta, ok = parse_planner_meta('__planner_meta__:{"kind":"task","parentType":"phase","parentId":"p1"}')
        assert ok
        assert meta.parent_task_id == ""

    @pytest.mark.parametrize("objective", [
        None,
        "",
        "Entregar o portal",
        "__planner_meta__:",
        "__planner_meta__:{not json",
        "__planner_meta__:[1, 2]",
        '__planner_meta__:{"kind":"milestone"}',
        '__planner_meta__:{"kind":"task"}',
        '__planner_meta__:{"kind":"task","parentType":"project","parentId":"x"}',
        '__planner_meta__:{"kind":"task","parentType":"task","parentId":7}',
        '__planner_meta__:{"version":2,"kind":"subphase"}',
        'prefix first __planner_meta__:{"kind":"subphase"}',
    ])
    def test_anything_else_is_no_meta(self, objective):
        meta, ok = parse_planner_meta(objective)
        assert not ok
        assert meta is None

    def test_explicit_current_version_is_accepted(self):
        _, ok = parse_planner_meta('__planner_meta__:{"version":1,"kind":"subphase"}')
        assert ok


class TestEncodePlannerMeta:
    def test_wire_form(self):
        meta = normalize_planner_meta("task", "subphase", "s1")
        assert encode_planner_meta(meta) == (
            PLANNER_META_PREFIX + '{"kind":"task","parentType":"subphase","parentId":"s1"}'
        )

    @pytest.mark.parametrize("meta", [
        PlannerMeta("subphase"),
        PlannerMeta("task", "phase", "p1"),
        PlannerMeta("task", "task", "t9"),
    ])
    def test_parse_reads_back_what_was_written(self, meta):
        assert parse_planner_meta(encode_planner_meta(meta)) == (meta, True)
