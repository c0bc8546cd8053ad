import pytest

from employee_portal.db.models.user import Role

EMPLOYEE = {
    "name": "John Smith",
    "email": "john@example.com",
    "position": "Analyst",
    "salary": 4200,
    "joiningDate": "2024-02-01",
}


class TestRoleGating:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("post", "/departments"),
            ("put", "/departments/1"),
            ("delete", "/departments/1"),
            ("post", "/employees"),
            ("put", "/employees/1"),
            ("delete", "/employees/1"),
            ("get", "/attendance"),
            ("get", "/attendance/1"),
            ("post", "/attendance/check-in"),
            ("post", "/attendance/check-out"),
            ("put", "/leaves/1"),
            ("delete", "/leaves/1"),
        ],
    )
    @pytest.mark.parametrize("payload", [None, {}, {"name": "Valid Name"}])
    def test_employee_forbidden_on_admin_routes(self, client, employee_headers, method, path, payload):
        kwargs = {"headers": employee_headers}
        if method in ("post", "put"):
            kwargs["json"] = payload
        resp = getattr(client, method)(path, **kwargs)
        assert resp.status_code == 403
        assert resp.json() == {"error": "Access denied. Insufficient permissions."}

    @pytest.mark.parametrize("path", ["/departments", "/employees", "/leaves", "/attendance"])
    def test_token_required(self, client, path):
        assert client.get(path).status_code == 401

    def test_preflight_needs_no_token(self, client):
        resp = client.options(
            "/departments",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_plain_options_is_not_authenticated(self, client):
        resp = client.options("/current-user")
        assert resp.status_code == 405
        assert resp.json() == {"error": "Method Not Allowed"}

    def test_unsupported_method(self, client, admin_headers):
        resp = client.patch("/departments/1", headers=admin_headers, json={"name": "Ops"})
        assert resp.status_code == 405
        assert resp.json() == {"error": "Method Not Allowed"}

    def test_invalid_token_before_role_check(self, client):
        resp = client.post("/departments", headers={"Authorization": "Bearer forged"}, json={"name": "Ops"})
        assert resp.status_code == 400


class TestDepartments:
    def test_crud(self, client, admin_headers):
        resp = client.post("/departments", headers=admin_headers, json={"name": "Finance", "description": "Money"})
        assert resp.status_code == 200
        dept = resp.json()
        assert dept["name"] == "Finance"

        resp = client.put(f"/departments/{dept['id']}", headers=admin_headers, json={"name": "Accounting"})
        assert resp.json()["name"] == "Accounting"
        assert resp.json()["description"] is None

        assert client.get(f"/departments/{dept['id']}", headers=admin_headers).json()["name"] == "Accounting"
        assert [d["name"] for d in client.get("/departments", headers=admin_headers).json()] == ["Accounting"]

        resp = client.delete(f"/departments/{dept['id']}", headers=admin_headers)
        assert resp.json() == {"message": "Department deleted successfully"}
        assert client.get(f"/departments/{dept['id']}", headers=admin_headers).status_code == 404

    def test_employee_can_read(self, client, employee_headers):
        resp = client.get("/departments", headers=employee_headers)
        assert resp.status_code == 200
        assert len(resp.json()) == 1

    def test_validation(self, client, admin_headers):
        resp = client.post("/departments", headers=admin_headers, json={"name": "X"})
        assert resp.status_code == 400
        assert resp.json()["details"] == [
            {"field": "name", "message": "Department name must be at least 2 characters"}
        ]

    def test_cannot_delete_department_in_use(self, client, admin_headers, make_department, make_employee):
        dept_id = make_department(name="Support")
        make_employee(department_id=dept_id)
        assert client.delete(f"/departments/{dept_id}", headers=admin_headers).status_code == 409


class TestEmployees:
    def test_create_and_list(self, client, admin_headers, make_department):
        dept_id = make_department(name="Research")
        resp = client.post("/employees", headers=admin_headers, json={**EMPLOYEE, "departmentId": dept_id})
        assert resp.status_code == 200
        created = resp.json()
        assert created["joiningDate"] == "2024-02-01"
        assert created["departmentId"] == dept_id

        listed = client.get("/employees", headers=admin_headers).json()
        assert listed[0]["department"] == {"name": "Research"}

        assert client.get(f"/employees/{created['id']}", headers=admin_headers).json()["email"] == "john@example.com"

    def test_unknown_department(self, client, admin_headers):
        resp = client.post("/employees", headers=admin_headers, json={**EMPLOYEE, "departmentId": 42})
        assert resp.status_code == 404

    def test_duplicate_email(self, client, admin_headers, make_employee, make_department):
        dept_id = make_department()
        make_employee(email="john@example.com", department_id=dept_id)
        resp = client.post("/employees", headers=admin_headers, json={**EMPLOYEE, "departmentId": dept_id})
        assert resp.status_code == 409

    def test_update_and_delete(self, client, admin_headers, make_employee, make_department):
        dept_id = make_department()
        employee_id = make_employee(email="john@example.com", department_id=dept_id)
        resp = client.put(
            f"/employees/{employee_id}",
            headers=admin_headers,
            json={**EMPLOYEE, "departmentId": dept_id, "position": "Lead"},
        )
        assert resp.status_code == 200
        assert resp.json()["position"] == "Lead"

        assert client.delete(f"/employees/{employee_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/employees/{employee_id}", headers=admin_headers).status_code == 404

    def test_missing(self, client, admin_headers):
        assert client.get("/employees/999", headers=admin_headers).json() == {"error": "Employee not found"}


class TestAttendance:
    def test_check_in_and_out(self, client, admin_headers, make_employee):
        employee_id = make_employee()
        resp = client.post(
            "/attendance/check-in",
            headers=admin_headers,
            json={"employeeId": employee_id, "checkIn": "2024-03-01T09:00:00.000Z"},
        )
        assert resp.status_code == 200
        assert resp.json()["checkOut"] is None

        resp = client.post(
            "/attendance/check-out",
            headers=admin_headers,
            json={"employeeId": employee_id, "checkOut": "2024-03-01T17:30:00.000Z"},
        )
        assert resp.json() == {"count": 1}

        records = client.get(f"/attendance/{employee_id}", headers=admin_headers).json()
        assert len(records) == 1
        assert records[0]["checkOut"] is not None

        listed = client.get("/attendance", headers=admin_headers).json()
        assert listed[0]["employee"] == {"name": "Jane Doe"}

    def test_bad_timestamp(self, client, admin_headers):
        resp = client.post(
            "/attendance/check-in",
            headers=admin_headers,
            json={"employeeId": 1, "checkIn": "2024-03-01 09:00"},
        )
        assert resp.status_code == 400
        assert resp.json()["details"] == [{"field": "checkIn", "message": "Invalid date format"}]

    def test_unknown_employee(self, client, admin_headers):
        resp = client.post(
            "/attendance/check-in",
            headers=admin_headers,
            json={"employeeId": 77, "checkIn": "2024-03-01T09:00:00.000Z"},
        )
        assert resp.status_code == 404


class TestLeaves:
    def leave(self, employee_id, **overrides):
        return {
            "employeeId": employee_id,
            "startDate": "2024-06-10",
            "endDate": "2024-06-12",
            "type": "sick",
            "reason": "Flu symptoms",
            **overrides,
        }

    def test_employee_files_own_leave(self, client, make_user, make_employee, auth_headers):
        employee_id = make_employee()
        headers = auth_headers(make_user(employee_id=employee_id), Role.employee, employee_id)
        resp = client.post("/leaves", headers=headers, json=self.leave(employee_id))
        assert resp.status_code == 201
        assert resp.json()["status"] == "pending"
        assert resp.json()["type"] == "sick"

    def test_employee_cannot_file_for_others(self, client, employee_headers, make_employee):
        other = make_employee(email="other@example.com")
        resp = client.post("/leaves", headers=employee_headers, json=self.leave(other))
        assert resp.status_code == 403

    def test_end_before_start(self, client, admin_headers, make_employee):
        employee_id = make_employee()
        resp = client.post(
            "/leaves", headers=admin_headers, json=self.leave(employee_id, startDate="2024-06-12", endDate="2024-06-10")
        )
        assert resp.status_code == 400
        assert resp.json()["details"][0]["field"] == "endDate"

    def test_listing_is_scoped(self, client, admin_headers, make_user, make_employee, auth_headers):
        mine = make_employee(email="mine@example.com")
        theirs = make_employee(email="theirs@example.com")
        assert client.post("/leaves", headers=admin_headers, json=self.leave(mine)).status_code == 201
        assert client.post("/leaves", headers=admin_headers, json=self.leave(theirs)).status_code == 201

        headers = auth_headers(make_user(employee_id=mine), Role.employee, mine)
        own = client.get("/leaves", headers=headers).json()
        assert [item["employeeId"] for item in own] == [mine]
        assert own[0]["employee"]["department"]["name"] == "Engineering"

        assert len(client.get("/leaves", headers=admin_headers).json()) == 2

    def test_employee_without_record(self, client, make_user, auth_headers):
        headers = auth_headers(make_user(username="loner"), Role.employee)
        assert client.get("/leaves", headers=headers).status_code == 404

    def test_admin_reviews_and_deletes(self, client, admin_headers, make_employee):
        employee_id = make_employee()
        leave_id = client.post("/leaves", headers=admin_headers, json=self.leave(employee_id)).json()["id"]

        resp = client.put(f"/leaves/{leave_id}", headers=admin_headers, json={"status": "approved", "adminNote": "ok"})
        assert resp.json()["status"] == "approved"
        assert resp.json()["adminNote"] == "ok"

        resp = client.put(f"/leaves/{leave_id}", headers=admin_headers, json={"status": "maybe"})
        assert resp.status_code == 400

        assert client.delete(f"/leaves/{leave_id}", headers=admin_headers).status_code == 200
        assert client.delete(f"/leaves/{leave_id}", headers=admin_headers).status_code == 404
