from Models.Planning.Project import ProjectMonthlyCharge


def charges_url(project):
    return f"/projects/{project['id']}/monthly-charges"


class TestMonthlyCharges:
    def test_create_defaults(self, client, create_project):
        project = create_project()
        response = client.post(charges_url(project), json={"title": "Hospedagem", "amount": 150.5})
        assert response.status_code == 201
        charge = response.json()
        assert charge["dueDay"] == 1
        assert charge["status"] == "pendente"

        listed = client.get(charges_url(project)).json()
        assert [c["id"] for c in listed] == [charge["id"]]

    def test_invalid_values(self, client, create_project):
        project = create_project()
        for payload in (
            {"title": "X", "amount": -1},
            {"title": "X", "dueDay": 32},
            {"title": "X", "status": "atrasado"},
            {"title": " "},
        ):
            assert client.post(charges_url(project), json=payload).status_code == 400, payload

    def test_partial_update_of_pending_charge(self, client, create_project):
        project = create_project()
        charge = client.post(charges_url(project), json={"title": "Suporte", "amount": 100, "dueDay": 10}).json()

        response = client.patch(f"{charges_url(project)}/{charge['id']}", json={"amount": 120})
        assert response.status_code == 200
        assert response.json()["amount"] == 120
        assert response.json()["dueDay"] == 10
        assert response.json()["title"] == "Suporte"

        response = client.patch(f"{charges_url(project)}/{charge['id']}", json={"status": "pago"})
        assert response.json()["status"] == "pago"

    def test_paid_charge_is_locked_but_deletable(self, client, create_project, db):
        project = create_project()
        charge = client.post(charges_url(project), json={"title": "Suporte", "status": "pago"}).json()
        url = f"{charges_url(project)}/{charge['id']}"

        response = client.patch(url, json={"title": "Outro"})
        assert response.status_code == 409
        assert response.json() == {"detail": "paid or cancelled monthly charges cannot be edited"}

        assert client.delete(url).status_code == 204
        assert db.query(ProjectMonthlyCharge).count() == 0
        assert client.delete(url).status_code == 404

    def test_unknown_charge(self, client, create_project):
        project = create_project()
        assert client.patch(f"{charges_url(project)}/missing", json={"amount": 1}).status_code == 404
        assert client.get("/projects/missing/monthly-charges").status_code == 404
