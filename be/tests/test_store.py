from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from Database.session import transaction
from Planning import errors
from Planning.service import ProjectService
from Planning.store import ProjectStore, map_persistence_error
from Planning.timeline import recalculate_timeline
from Schemas.Planning.PhaseSchema import PhaseCreate
from Schemas.Planning.ProjectSchema import ProjectCreate
from Schemas.Planning.TaskSchema import TaskCreate


@pytest.fixture()
def service(db):
    return ProjectService(db, actor="user-staff")


def seed_subphase_project(service):
    project = service.create_project(ProjectCreate(name="Portal"))
    phase = service.create_phase(project.id, PhaseCreate(name="P1"))
    subphase = service.create_task(project.id, TaskCreate(
        name="S1", projectPhaseId=phase.id, plannerMeta={"kind": "subphase"},
    ))
    for name, starts_on, ends_on in (("T1", "2024-01-02", "2024-01-10"), ("T2", "2024-01-08", "2024-01-25")):
        service.create_task(project.id, TaskCreate(
            name=name, projectPhaseId=phase.id, startsOn=starts_on, endsOn=ends_on,
            plannerMeta={"kind": "task", "parentType": "subphase", "parentId": subphase.id},
        ))
    return project.id


class TestTimelineWrites:
    def test_fixed_point_performs_no_writes(self, db, service):
        project_id = seed_subphase_project(service)

        store = ProjectStore(db)
        with transaction(db):
            result = recalculate_timeline(store, project_id)
        assert result.writes == 0
        assert store.writes == 0

    def test_changed_dates_are_written_once(self, db, service):
        project_id = seed_subphase_project(service)
        store = ProjectStore(db)
        with transaction(db):
            store.update_project_dates(project_id, None, None)
        store.writes = 0

        with transaction(db):
            recalculate_timeline(store, project_id)
        assert store.writes == 1
        assert store.load_project_dates(project_id) == (date(2024, 1, 2), date(2024, 1, 25))


class TestProjectStore:
    def test_list_rows_only_include_active(self, db, service):
        project_id = seed_subphase_project(service)
        store = ProjectStore(db)
        with transaction(db):
            store.deactivate_project_phases(project_id)
        assert store.list_phase_timeline_rows(project_id) == []
        assert len(store.list_task_timeline_rows(project_id)) == 3

    def test_load_missing_project(self, db):
        with pytest.raises(errors.ProjectNotFoundError):
            ProjectStore(db).load_project("missing")


class _Diag:
    def __init__(self, constraint_name):
        self.constraint_name = constraint_name


class _DriverError(Exception):
    def __init__(self, pgcode, constraint_name):
        super().__init__("driver error")
        self.pgcode = pgcode
        self.diag = _Diag(constraint_name)


class TestMapPersistenceError:
    @pytest.mark.parametrize("pgcode, constraint, expected", [
        ("23505", "projects_name_lower_key", errors.ProjectNameInUseError),
        ("23505", "project_types_code_lower_key", errors.ProjectTypeCodeInUseError),
        ("23505", "other_key", errors.ConflictError),
        ("23503", "projects_project_type_id_fkey", errors.MissingProjectTypeError),
        ("23503", "project_tasks_responsible_user_id_fkey", errors.MissingResponsibleUserError),
        ("23514", "project_monthly_charges_dates_check", errors.InvalidInputError),
    ])
    def test_postgres_errors(self, pgcode, constraint, expected):
        error = IntegrityError("INSERT", {}, _DriverError(pgcode, constraint))
        assert type(map_persistence_error(error)) is expected

    def test_sqlite_unique_message(self):
        error = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: index 'projects_name_lower_key'"))
        assert isinstance(map_persistence_error(error), errors.ProjectNameInUseError)

    def test_unknown_error_is_returned_unchanged(self):
        error = IntegrityError("INSERT", {}, Exception("disk I/O error"))
        assert map_persistence_error(error) is error
