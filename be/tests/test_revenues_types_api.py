class TestRevenues:
    def test_create_with_receipts(self, client, create_project):
        project = create_project()
        response = client.post(f"/projects/{project['id']}/revenues", json={
            "title": "Entrada",
            "amount": 5000,
            "expectedOn": "2024-02-10",
            "receipts": [{"fileName": "nf.pdf", "fileKey": "receipts/nf.pdf", "issuedOn": "2024-02-11"}],
        })
        assert response.status_code == 201
        revenue = response.json()
        assert revenue["status"] == "pendente"
        assert revenue["receipts"][0]["issuedOn"] == "2024-02-11"

        detail = client.get(f"/projects/{project['id']}").json()
        assert [r["id"] for r in detail["revenues"]] == [revenue["id"]]

    def test_status_update(self, client, create_project):
        project = create_project()
        revenue = client.post(f"/projects/{project['id']}/revenues", json={"title": "Entrada", "amount": 10}).json()
        url = f"/projects/{project['id']}/revenues/{revenue['id']}"

        assert client.patch(url, json={"status": "Recebido"}).json()["status"] == "recebido"
        assert client.patch(url, json={"status": "estornado"}).status_code == 400
        assert client.patch(f"/projects/{project['id']}/revenues/missing", json={"status": "recebido"}).status_code == 404

    def test_negative_amount(self, client, create_project):
        project = create_project()
        response = client.post(f"/projects/{project['id']}/revenues", json={"title": "X", "amount": -5})
        assert response.status_code == 400


class TestProjectTypes:
    def test_categories_and_types(self, client):
        categories = client.get("/project-categories").json()
        assert [c["code"] for c in categories] == ["software"]

        types = client.get("/project-types", params={"categoryId": "category-software"}).json()
        assert [(t["code"], t["categoryName"]) for t in types] == [("website", "Software")]

    def test_create_and_update(self, client):
        response = client.post("/project-types", json={"categoryId": "category-software", "code": " ERP ", "name": "ERP"})
        assert response.status_code == 201
        created = response.json()
        assert created["code"] == "erp"

        response = client.patch(f"/project-types/{created['id']}", json={"active": False})
        assert response.status_code == 200
        assert response.json()["active"] is False
        active = client.get("/project-types", params={"onlyActive": "true"}).json()
        assert [t["code"] for t in active] == ["website"]

    def test_conflicts_and_missing_category(self, client):
        duplicate_code = {"categoryId": "category-software", "code": "WEBSITE", "name": "Outro"}
        assert client.post("/project-types", json=duplicate_code).status_code == 409
        duplicate_name = {"categoryId": "category-software", "code": "site2", "name": "website"}
        assert client.post("/project-types", json=duplicate_name).status_code == 409
        missing = {"categoryId": "nope", "code": "x", "name": "X"}
        assert client.post("/project-types", json=missing).status_code == 400
        assert client.patch("/project-types/nope", json={"name": "X"}).status_code == 404
