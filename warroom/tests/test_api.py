"""
════════════════════════════════════════════════════════════════════════════════════════════════════
TESTS - War Room HTTP API
════════════════════════════════════════════════════════════════════════════════════════════════════
"""

import pytest

AS_OF = "2024-06-15T12:00:00"


@pytest.fixture
def project(test_client, project_payload):
    response = test_client.post("/projects", json=project_payload)
    assert response.status_code == 201
    return response.json()


class TestServiceEndpoints:

    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_config(self, test_client):
        data = test_client.get("/config").json()
        assert data["policies"]["item_status"] == "approval-gated"

    def test_switch_policy(self, test_client):
        response = test_client.put("/config/item-status-policy", params={"policy": "boq-strict"})
        assert response.status_code == 200
        assert response.json()["policies"]["item_status"] == "boq-strict"

    def test_switch_policy_invalid(self, test_client):
        response = test_client.put("/config/item-status-policy", params={"policy": "lenient"})
        assert response.status_code == 400


class TestProjectEndpoints:

    def test_create_project(self, project):
        assert project["id"] == "proj-test"
        assert project["num_items"] == 2
        assert len(project["items"]) == 2

    def test_create_project_missing_name(self, test_client):
        response = test_client.post("/projects", json={"code": "X-1"})
        assert response.status_code == 422

    def test_create_duplicate(self, test_client, project, project_payload):
        response = test_client.post("/projects", json=project_payload)
        assert response.status_code == 400

    def test_list_projects(self, test_client, project):
        data = test_client.get("/projects", params={"as_of": AS_OF}).json()

        assert data["total"] == 1
        listed = data["projects"][0]
        assert listed["code"] == "TS-001"
        assert listed["kpis"]["delivery_risk_indicator"] == 50
        assert listed["overall"] == {"status": "at-risk", "label": "At Risk", "color": "yellow"}

    def test_get_project(self, test_client, project):
        response = test_client.get("/projects/proj-test")
        assert response.status_code == 200
        assert response.json()["name"] == "Test Villa"

    def test_get_unknown_project(self, test_client):
        response = test_client.get("/projects/nope")
        assert response.status_code == 404

    def test_patch_project(self, test_client, project):
        response = test_client.patch("/projects/proj-test", json={
            "name": "Villa Renamed",
            "client": None,
            "coverage_overrides": {"finishes": "to-confirm"},
        })
        data = response.json()

        assert response.status_code == 200
        assert data["name"] == "Villa Renamed"
        assert data["client"] == "Test Client"
        assert data["coverage_overrides"] == {"finishes": "to-confirm"}
        assert data["num_items"] == 2

    @pytest.mark.parametrize("body", [{"name": ""}, {"code": ""}])
    def test_patch_project_cannot_blank_required(self, test_client, project, body):
        response = test_client.patch("/projects/proj-test", json=body)

        assert response.status_code == 422
        data = test_client.get("/projects/proj-test").json()
        assert data["name"] == "Test Villa"
        assert data["code"] == "TS-001"

    def test_patch_project_bad_coverage(self, test_client, project):
        response = test_client.patch("/projects/proj-test", json={"coverage_overrides": {"finishes": "maybe"}})
        assert response.status_code == 422

    def test_delete_project(self, test_client, project):
        assert test_client.delete("/projects/proj-test").status_code == 200
        assert test_client.get("/projects/proj-test").status_code == 404
        assert test_client.delete("/projects/proj-test").status_code == 404


class TestItemEndpoints:

    def test_list_items(self, test_client, project):
        data = test_client.get("/projects/proj-test/items").json()

        assert data["total"] == 2
        assert data["status_counts"] == {"safe": 1, "at-risk": 1, "unsafe": 0}
        assert data["areas"] == ["Kitchen", "Living Room"]
        by_id = {item["id"]: item for item in data["items"]}
        assert by_id["it-1"]["status"] == "safe"
        assert by_id["it-2"]["status_label"] == "At Risk"
        assert by_id["it-2"]["category_label"] == "Lighting"

    def test_filter_items(self, test_client, project):
        data = test_client.get(
            "/projects/proj-test/items",
            params={"category": "lighting", "status": "at-risk", "area": "Living Room"},
        ).json()

        assert data["filtered"] == 1
        assert data["items"][0]["id"] == "it-2"
        assert data["filters"]["category"] == "lighting"

    def test_filter_invalid_category(self, test_client, project):
        response = test_client.get("/projects/proj-test/items", params={"category": "plumbing"})
        assert response.status_code == 422

    def test_items_of_unknown_project(self, test_client):
        assert test_client.get("/projects/nope/items").status_code == 404

    def test_create_item(self, test_client, project):
        response = test_client.post("/projects/proj-test/items", json={
            "category": "appliances",
            "description": "Wine Cooler",
            "approval_status": "rejected",
            "delivery_date": "2024-07-01",
        })
        data = response.json()

        assert response.status_code == 201
        assert data["project_id"] == "proj-test"
        assert data["status"] == "unsafe"
        assert data["delivery_date"] == "2024-07-01"

    def test_create_item_duplicate_id(self, test_client, project):
        response = test_client.post("/projects/proj-test/items", json={
            "id": "it-1",
            "category": "joinery",
            "description": "Second cabinets",
        })
        assert response.status_code == 400

        data = test_client.get("/projects/proj-test/items").json()
        assert sorted(item["id"] for item in data["items"]) == ["it-1", "it-2"]

        test_client.delete("/projects/proj-test/items/it-1")
        assert test_client.get("/projects/proj-test/items").json()["total"] == 1

    def test_bulk_create_duplicate_ids(self, test_client, project):
        rows = [{"id": "dup", "category": "finishes", "description": f"Tile {n}"} for n in range(2)]
        response = test_client.post("/projects/proj-test/items/bulk", json={"items": rows})

        assert response.status_code == 400
        assert test_client.get("/projects/proj-test").json()["num_items"] == 2

    @pytest.mark.parametrize("body", [
        {"category": "plumbing", "description": "Pipe"},
        {"category": "lighting", "description": ""},
        {"category": "lighting", "description": "Lamp", "approval_status": "maybe"},
        {"category": "lighting", "description": "Lamp", "delivery_date": "31/12/2024"},
        {"category": "lighting", "description": "Lamp", "quantity": -1},
    ])
    def test_create_item_invalid(self, test_client, project, body):
        response = test_client.post("/projects/proj-test/items", json=body)
        assert response.status_code == 422

    def test_bulk_create(self, test_client, project):
        rows = [{"category": "finishes", "description": f"Tile {n}", "area": "Bathroom"} for n in range(3)]
        response = test_client.post("/projects/proj-test/items/bulk", json={"items": rows})

        assert response.status_code == 201
        assert response.json()["created"] == 3
        assert test_client.get("/projects/proj-test").json()["num_items"] == 5

    def test_bulk_create_empty(self, test_client, project):
        response = test_client.post("/projects/proj-test/items/bulk", json={"items": []})
        assert response.status_code == 422

    def test_get_item(self, test_client, project):
        assert test_client.get("/projects/proj-test/items/it-1").json()["status"] == "safe"
        assert test_client.get("/projects/proj-test/items/nope").status_code == 404

    def test_patch_item(self, test_client, project):
        response = test_client.patch("/projects/proj-test/items/it-2", json={
            "approval_status": "approved",
            "purchased": True,
            "received": True,
            "installed": True,
            "description": None,
        })
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "safe"
        assert data["description"] == "Pendant Light"

    def test_patch_item_cannot_blank_description(self, test_client, project):
        response = test_client.patch("/projects/proj-test/items/it-2", json={"description": ""})

        assert response.status_code == 422
        assert test_client.get("/projects/proj-test/items/it-2").json()["description"] == "Pendant Light"

    def test_patch_clears_date(self, test_client, project):
        data = test_client.patch("/projects/proj-test/items/it-2", json={"delivery_date": None}).json()
        assert data["delivery_date"] is None

    def test_patch_unknown_item(self, test_client, project):
        response = test_client.patch("/projects/proj-test/items/nope", json={"installed": True})
        assert response.status_code == 404

    def test_delete_item(self, test_client, project):
        assert test_client.delete("/projects/proj-test/items/it-1").status_code == 200
        assert test_client.get("/projects/proj-test/items/it-1").status_code == 404

    def test_boq_strict_policy(self, test_client, project):
        test_client.post("/projects/proj-test/items", json={
            "category": "accessories",
            "description": "Vase",
            "boq_included": False,
        })
        before = test_client.get("/projects/proj-test/items").json()["status_counts"]
        test_client.put("/config/item-status-policy", params={"policy": "boq-strict"})
        after = test_client.get("/projects/proj-test/items").json()["status_counts"]

        assert before["unsafe"] == 0
        assert after["unsafe"] == 1


class TestStatusEndpoints:

    def test_kpis(self, test_client, project):
        data = test_client.get("/projects/proj-test/kpis", params={"as_of": AS_OF}).json()

        assert data["total_items"] == 2
        assert data["kpis"] == {
            "boq_completeness": 100,
            "item_approval_coverage": 50,
            "procurement_readiness": 50,
            "delivery_risk_indicator": 50,
            "installation_readiness": 50,
        }
        assert data["kpi_status"]["boq_completeness"] == "safe"
        assert data["kpi_status"]["delivery_risk_indicator"] == "at-risk"
        assert data["average_score"] == 60.0
        assert data["overall"]["status"] == "at-risk"

    def test_kpis_before_delivery_date(self, test_client, project):
        data = test_client.get("/projects/proj-test/kpis", params={"as_of": "2024-05-15T00:00:00"}).json()

        assert data["kpis"]["delivery_risk_indicator"] == 0
        assert data["average_score"] == 70.0

    def test_kpis_empty_project(self, test_client):
        test_client.post("/projects", json={"id": "empty", "code": "E-1", "name": "Empty"})
        data = test_client.get("/projects/empty/kpis").json()

        assert set(data["kpis"].values()) == {0}
        assert data["overall"]["status"] == "unsafe"

    def test_kpis_unknown_project(self, test_client):
        assert test_client.get("/projects/nope/kpis").status_code == 404

    def test_coverage(self, test_client, project):
        data = test_client.get("/projects/proj-test/coverage").json()
        coverage = {row["category"]: row["coverage"] for row in data["categories"]}

        assert len(data["categories"]) == 7
        assert coverage["joinery"] == "present"
        assert coverage["lighting"] == "present"
        assert coverage["finishes"] == "missing"

    def test_timeline(self, test_client, project):
        response = test_client.get(
            "/projects/proj-test/timeline",
            params={"zoom": "week", "today": "2024-06-01"},
        )
        data = response.json()

        assert response.status_code == 200
        assert data["project_id"] == "proj-test"
        assert data["zoom"] == "week"
        assert data["timeline_start"] == "2024-04-24"
        assert len(data["rows"]) == 2
        assert data["milestones"][0]["date"] == "2024-09-30"
        assert data["today_pct"] is not None

    def test_timeline_invalid_zoom(self, test_client, project):
        response = test_client.get("/projects/proj-test/timeline", params={"zoom": "decade"})
        assert response.status_code == 400


class TestPortfolioEndpoint:

    @pytest.fixture
    def portfolio(self, test_client, project):
        test_client.post("/projects", json={"id": "empty", "code": "E-1", "name": "Empty"})

    def test_summary(self, test_client, portfolio):
        data = test_client.get("/portfolio/summary", params={"as_of": AS_OF}).json()

        assert data["total_projects"] == 2
        assert data["status_counts"] == {"safe": 0, "at-risk": 1, "unsafe": 1}
        assert data["needs_attention"] == ["empty", "proj-test"]
        assert data["filter"] is None
        assert data["as_of"] == AS_OF
        assert len(data["projects"]) == 2

    def test_status_filter(self, test_client, portfolio):
        data = test_client.get("/portfolio/summary", params={"status": "unsafe", "as_of": AS_OF}).json()

        assert data["total_projects"] == 2
        assert [p["project_id"] for p in data["projects"]] == ["empty"]
        assert data["filter"] == "unsafe"

    def test_invalid_status_filter(self, test_client):
        assert test_client.get("/portfolio/summary", params={"status": "green"}).status_code == 422
