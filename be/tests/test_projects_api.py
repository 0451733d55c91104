"""
HTTP tests for the project routes: CRUD, status cascades, recalculation and export.
"""
from jose import jwt

from APIs import Core
from Models.Admin.AuditLog import AuditLog
from Models.Planning.Project import Project, ProjectTask


def add_phase(client, project_id, **payload):
    payload.setdefault("name", "Fase")
    response = client.post(f"/projects/{project_id}/phases", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def add_task(client, project_id, **payload):
    payload.setdefault("name", "Tarefa")
    response = client.post(f"/projects/{project_id}/tasks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestProjectCrud:
    def test_create_and_get(self, client, create_project):
        created = create_project(
            name="  Portal Acme  ",
            clientIds=["client-acme", "client-acme"],
            managerUserIds=["user-manager"],
            startDate="2024-01-01",
            endDate="2024-03-01T10:00:00Z",
        )
        assert created["name"] == "Portal Acme"
        assert created["lifecycleType"] == "temporario"
        assert created["status"] == "planejamento"
        assert created["projectTypeName"] == "Website"
        assert created["projectCategoryName"] == "Software"
        assert created["endDate"] == "2024-03-01"
        assert [c["clientId"] for c in created["clients"]] == ["client-acme"]
        assert [m["userId"] for m in created["managers"]] == ["user-manager"]

        response = client.get(f"/projects/{created['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_list_with_search_and_counts(self, client, create_project):
        project = create_project(clientIds=["client-acme"])
        create_project(name="Intranet", objective="Rede interna", projectTypeId=None)
        add_phase(client, project["id"])

        response = client.get("/projects", params={"search": "portal"})
        assert response.status_code == 200
        items = response.json()
        assert [item["name"] for item in items] == ["Portal Acme"]
        assert items[0]["clientsCount"] == 1
        assert items[0]["phasesCount"] == 1

        assert len(client.get("/projects", params={"search": "website"}).json()) == 1
        assert len(client.get("/projects").json()) == 2

    def test_only_active_filter(self, client, create_project):
        create_project(name="Ativo")
        create_project(name="Parado", active=False)
        names = [item["name"] for item in client.get("/projects", params={"onlyActive": "true"}).json()]
        assert names == ["Ativo"]

    def test_name_conflict_is_case_insensitive(self, client, create_project):
        create_project(name="Portal Acme")
        response = client.post("/projects", json={"name": "PORTAL ACME"})
        assert response.status_code == 409
        assert response.json() == {"detail": "project name already in use"}

    def test_invalid_payloads(self, client):
        cases = [
            {"name": "   "},
            {"name": "X", "lifecycleType": "eterno"},
            {"name": "X", "startDate": "2024-02-01", "endDate": "2024-01-01"},
            {"name": "X", "startDate": "01/02/2024"},
            {"objective": "sem nome"},
        ]
        for payload in cases:
            response = client.post("/projects", json=payload)
            assert response.status_code == 400, payload
            assert "detail" in response.json()

    def test_missing_references_are_invalid_input(self, client):
        assert client.post("/projects", json={"name": "X", "projectTypeId": "nope"}).status_code == 400
        assert client.post("/projects", json={"name": "X", "clientIds": ["nope"]}).status_code == 400
        assert client.post("/projects", json={"name": "X", "managerUserIds": ["nope"]}).status_code == 400

    def test_partial_update(self, client, create_project):
        project = create_project(clientIds=["client-acme"], lifecycleType="recorrente")
        response = client.patch(f"/projects/{project['id']}", json={"objective": "Portal v2", "clientIds": []})
        assert response.status_code == 200
        body = response.json()
        assert body["objective"] == "Portal v2"
        assert body["name"] == "Portal Acme"
        assert body["lifecycleType"] == "recorrente"
        assert body["clients"] == []

    def test_unknown_project(self, client):
        assert client.get("/projects/missing").status_code == 404
        assert client.patch("/projects/missing", json={"name": "X"}).status_code == 404
        assert client.delete("/projects/missing").status_code == 404
        assert client.post("/projects/missing/recalculate").status_code == 404

    def test_delete_cascades(self, client, create_project, db):
        project = create_project()
        phase = add_phase(client, project["id"])
        add_task(client, project["id"], projectPhaseId=phase["id"])

        response = client.delete(f"/projects/{project['id']}")
        assert response.status_code == 204
        assert db.query(Project).count() == 0
        assert db.query(ProjectTask).count() == 0

    def test_writes_are_audited(self, client, create_project, db):
        project = create_project()
        entry = db.query(AuditLog).filter(AuditLog.resource_id == project["id"]).one()
        assert entry.action == "create_project"
        assert entry.actor == "user-staff"


class TestProjectStatus:
    def test_cancel_cascade(self, client, create_project):
        project = create_project()
        phase = add_phase(client, project["id"])
        for status in ("planejada", "planejada", "iniciada"):
            add_task(client, project["id"], projectPhaseId=phase["id"], status=status)

        response = client.patch(f"/projects/{project['id']}/status", json={"status": "cancelado"})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "cancelado"
        assert body["active"] is False
        assert all(p["active"] is False for p in body["phases"])
        assert len(body["tasks"]) == 3
        assert all(t["status"] == "cancelada" and t["active"] is False for t in body["tasks"])

        again = client.patch(f"/projects/{project['id']}/status", json={"status": "cancelada"}).json()
        assert again["status"] == "cancelado"
        assert [(t["id"], t["status"], t["active"]) for t in again["tasks"]] == \
            [(t["id"], t["status"], t["active"]) for t in body["tasks"]]

    def test_completion_guard(self, client, create_project):
        project = create_project()
        add_task(client, project["id"], status="concluida")

        response = client.patch(f"/projects/{project['id']}/status", json={"status": "concluido"})
        assert response.status_code == 200
        assert response.json()["status"] == "andamento"

    def test_invalid_status(self, client, create_project):
        project = create_project()
        response = client.patch(f"/projects/{project['id']}/status", json={"status": "arquivado"})
        assert response.status_code == 400

    def test_cancelled_project_cannot_be_reactivated_by_patch(self, client, create_project):
        project = create_project()
        client.patch(f"/projects/{project['id']}/status", json={"status": "cancelado"})
        response = client.patch(f"/projects/{project['id']}", json={"active": True})
        assert response.status_code == 400


class TestRecalculateAndExport:
    def build_subphase_scenario(self, client, project_id):
        phase = add_phase(client, project_id, name="P1", startsOn="2024-01-05", endsOn="2024-01-20")
        subphase = add_task(client, project_id, name="S1", projectPhaseId=phase["id"],
                            plannerMeta={"kind": "subphase"})
        under_s1 = {"kind": "task", "parentType": "subphase", "parentId": subphase["id"]}
        add_task(client, project_id, name="T1", projectPhaseId=phase["id"], status="concluida",
                 startsOn="2024-01-02", endsOn="2024-01-10", plannerMeta=under_s1)
        add_task(client, project_id, name="T2", projectPhaseId=phase["id"],
                 startsOn="2024-01-08", endsOn="2024-01-25", plannerMeta=under_s1)
        return phase, subphase

    def test_subphase_aggregation(self, client, create_project):
        project = create_project()
        phase, subphase = self.build_subphase_scenario(client, project["id"])

        body = client.post(f"/projects/{project['id']}/recalculate").json()
        tasks = {t["id"]: t for t in body["tasks"]}
        assert (tasks[subphase["id"]]["startsOn"], tasks[subphase["id"]]["endsOn"]) == ("2024-01-02", "2024-01-25")
        assert (body["phases"][0]["startsOn"], body["phases"][0]["endsOn"]) == ("2024-01-02", "2024-01-25")
        assert (body["startDate"], body["endDate"]) == ("2024-01-02", "2024-01-25")
        assert tasks[subphase["id"]]["plannerMeta"] == {"kind": "subphase", "parentType": "", "parentId": ""}

        export = client.get(f"/projects/{project['id']}/export").json()
        rows = {row["id"]: row for row in export["planning"]}
        assert rows[phase["id"]]["progressPercent"] == 50
        assert rows[subphase["id"]]["progressPercent"] == 50
        assert rows[subphase["id"]]["kind"] == "subphase"
        assert export["summary"]["projectPercent"] == 50
        assert export["summary"]["totalTasks"] == 3
        assert export["project"]["id"] == project["id"]

    def test_recalculate_is_idempotent(self, client, create_project):
        project = create_project()
        self.build_subphase_scenario(client, project["id"])

        first = client.post(f"/projects/{project['id']}/recalculate").json()
        second = client.post(f"/projects/{project['id']}/recalculate").json()
        assert first == second

    def test_derived_statuses_fed_back_keep_the_export(self, client, create_project):
        project = create_project()
        self.build_subphase_scenario(client, project["id"])

        def planning_shape():
            client.post(f"/projects/{project['id']}/recalculate")
            export = client.get(f"/projects/{project['id']}/export").json()
            return [
                (row["id"], row["parentId"], row["level"], row["kind"], row["status"],
                 row["progressPercent"], row["startsOn"], row["endsOn"])
                for row in export["planning"]
            ]

        first = planning_shape()
        for row_id, _, _, kind, status, _, _, _ in first:
            if kind != "phase":
                response = client.patch(f"/projects/{project['id']}/tasks/{row_id}", json={"status": status})
                assert response.status_code == 200
        assert planning_shape() == first

    def test_pdf_export(self, client, create_project):
        project = create_project()
        self.build_subphase_scenario(client, project["id"])

        response = client.get(f"/projects/{project['id']}/export-pdf", params={"theme": "dark", "font": "arima"})
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")


class TestAuth:
    def test_missing_token(self, client):
        client.headers.pop("Authorization")
        assert client.get("/projects").status_code == 401

    def test_bad_token(self, client):
        client.headers["Authorization"] = "Bearer not-a-token"
        assert client.get("/projects").status_code == 401

    def test_missing_permission(self, client, make_token):
        client.headers["Authorization"] = f"Bearer {make_token(permissions=['projects.read'])}"
        assert client.get("/projects").status_code == 200
        assert client.post("/projects", json={"name": "X"}).status_code == 403

    def test_health_is_public(self, client):
        client.headers.pop("Authorization")
        assert client.get("/health").json() == {"status": "ok"}

    def test_tokens_are_rejected_without_secret_key(self, client, monkeypatch):
        monkeypatch.setattr(Core, "SECRET_KEY", None)
        forged = jwt.encode({"sub": "x", "permissions": ["*"]}, "", algorithm="HS256")
        client.headers["Authorization"] = f"Bearer {forged}"
        assert client.get("/projects").status_code == 401
