import pytest

from Planning.errors import InvalidInputError, ProjectNotFoundError
from Planning.status import apply_project_status, normalize_project_status


class _StatusStore:
    def __init__(self, completed_tasks=False, exists=True):
        self.completed_tasks = completed_tasks
        self.exists = exists
        self.calls = []

    def project_exists(self, project_id):
        return self.exists

    def has_completed_tasks(self, project_id):
        return self.completed_tasks

    def update_project_status(self, project_id, status, active):
        self.calls.append(("status", status, active))

    def deactivate_project_phases(self, project_id):
        self.calls.append(("phases",))

    def cancel_project_tasks(self, project_id):
        self.calls.append(("tasks",))


class TestNormalizeProjectStatus:
    @pytest.mark.parametrize("value, expected", [
        ("planejamento", "planejamento"),
        ("Planejado", "planejamento"),
        ("planejada", "planejamento"),
        ("em_andamento", "andamento"),
        (" em andamento ", "andamento"),
        ("concluida", "concluido"),
        ("CANCELADA", "cancelado"),
    ])
    def test_synonyms(self, value, expected):
        assert normalize_project_status(value) == expected

    @pytest.mark.parametrize("value", ["", None, "arquivado"])
    def test_unknown_status_is_invalid(self, value):
        with pytest.raises(InvalidInputError):
            normalize_project_status(value)


class TestApplyProjectStatus:
    def test_cancel_cascades(self):
        store = _StatusStore()
        assert apply_project_status(store, "p", "cancelado") == "cancelado"
        assert store.calls == [("status", "cancelado", False), ("phases",), ("tasks",)]

    def test_completion_is_held_back_by_concluded_tasks(self):
        store = _StatusStore(completed_tasks=True)
        assert apply_project_status(store, "p", "concluido") == "andamento"
        assert store.calls == [("status", "andamento", True)]

    def test_completion_without_concluded_tasks(self):
        store = _StatusStore()
        assert apply_project_status(store, "p", "concluida") == "concluido"

    def test_other_statuses_reactivate(self):
        store = _StatusStore()
        apply_project_status(store, "p", "planejamento")
        assert store.calls == [("status", "planejamento", True)]

    def test_missing_project(self):
        with pytest.raises(ProjectNotFoundError):
            apply_project_status(_StatusStore(exists=False), "p", "andamento")
