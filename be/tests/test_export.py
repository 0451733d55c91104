from datetime import date, datetime, timezone
from types import SimpleNamespace

from Planning.export import build_project_export
from Planning.hierarchy import UNLINKED_PHASE_ID
from Planning.planner_meta import PlannerMeta, encode_planner_meta

GENERATED_AT = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


def phase(phase_id, starts_on=None, ends_on=None, position=0):
    return SimpleNamespace(id=phase_id, name=phase_id.upper(), description="", starts_on=starts_on,
                           ends_on=ends_on, position=position, files=[])


def task(task_id, phase_id=None, status="planejada", meta=None, starts_on=None, ends_on=None, position=0):
    return SimpleNamespace(
        id=task_id, phase_id=phase_id, name=task_id.upper(), description="", status=status,
        objective=encode_planner_meta(meta) if meta else "", starts_on=starts_on, ends_on=ends_on,
        position=position, files=[],
    )


def project(phases=(), tasks=()):
    return SimpleNamespace(id="proj", name="Portal", phases=list(phases), tasks=list(tasks))


class TestBuildProjectExport:
    def test_unlinked_tasks_get_a_synthetic_phase(self):
        export = build_project_export(
            project(tasks=[task("t1", status="planejada"), task("t2", status="concluida")]),
            now=GENERATED_AT,
        )
        rows = export.planning
        assert [(row.id, row.level, row.kind) for row in rows] == [
            (UNLINKED_PHASE_ID, 0, "phase"),
            ("t1", 1, "task"),
            ("t2", 1, "task"),
        ]
        assert rows[0].title == "Unlinked"
        assert rows[0].phase_id == ""
        assert rows[0].progress_percent == 50
        assert rows[0].status == "iniciada"
        assert rows[1].parent_id == UNLINKED_PHASE_ID
        assert [rows[1].status, rows[2].status] == ["planejada", "concluida"]

        summary = export.summary
        assert summary.total_phases == 0
        assert summary.total_tasks == 2
        assert summary.total_tracked_tasks == 2
        assert summary.total_completed_tasks == 1
        assert summary.project_percent == 50
        assert export.generated_at == GENERATED_AT

    def test_subphase_rows(self):
        in_s1 = PlannerMeta("task", "subphase", "s1")
        export = build_project_export(project(
            phases=[phase("p1")],
            tasks=[
                task("s1", "p1", meta=PlannerMeta("subphase")),
                task("t2", "p1", "planejada", in_s1, starts_on=date(2024, 1, 8)),
                task("t1", "p1", "concluida", in_s1, starts_on=date(2024, 1, 2)),
            ],
        ))
        rows = {row.id: row for row in export.planning}
        assert [row.id for row in export.planning] == ["p1", "s1", "t1", "t2"]
        assert rows["p1"].progress_percent == 50
        assert rows["s1"].kind == "subphase"
        assert rows["s1"].level == 1
        assert rows["s1"].status == "iniciada"
        assert rows["s1"].progress_percent == 50
        assert rows["t1"].parent_id == "s1"
        assert rows["t1"].phase_id == "p1"
        assert rows["t1"].level == 2

    def test_leaf_keeps_stored_status_and_parent_is_derived(self):
        export = build_project_export(project(
            phases=[phase("p1")],
            tasks=[
                task("parent", "p1", status="cancelada"),
                task("child", "p1", status="concluida", meta=PlannerMeta("task", "task", "parent")),
                task("legacy", "p1", status="em_andamento"),
            ],
        ))
        rows = {row.id: row for row in export.planning}
        assert rows["parent"].status == "concluida"
        assert rows["parent"].kind == "task"
        assert rows["legacy"].status == "iniciada"

    def test_cyclic_tasks_are_not_emitted_twice(self):
        export = build_project_export(project(
            phases=[phase("p1")],
            tasks=[
                task("a", "p1", meta=PlannerMeta("task", "task", "b")),
                task("b", "p1", meta=PlannerMeta("task", "task", "a")),
            ],
        ))
        ids = [row.id for row in export.planning]
        assert len(ids) == len(set(ids))
        assert export.summary.total_tasks == 2

    def test_empty_project(self):
        export = build_project_export(project())
        assert export.planning == []
        assert export.summary.project_percent == 0

    def test_feeding_derived_statuses_back_is_stable(self):
        in_s1 = PlannerMeta("task", "subphase", "s1")
        tasks = [
            task("s1", "p1", meta=PlannerMeta("subphase")),
            task("t1", "p1", "concluida", in_s1),
            task("t2", "p1", "planejada", in_s1),
            task("parent", "p1", "planejada"),
            task("child", "p1", "concluida", PlannerMeta("task", "task", "parent")),
            task("loose", status="iniciada"),
        ]
        first = build_project_export(project(phases=[phase("p1")], tasks=tasks), now=GENERATED_AT)

        derived = {row.id: row.status for row in first.planning if row.kind != "phase"}
        for item in tasks:
            item.status = derived[item.id]
        second = build_project_export(project(phases=[phase("p1")], tasks=tasks), now=GENERATED_AT)

        def shape(export):
            return [(row.id, row.parent_id, row.level, row.kind, row.status, row.progress_percent)
                    for row in export.planning]

        assert shape(second) == shape(first)
        assert second.summary == first.summary
