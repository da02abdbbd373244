"""HTTP surface: envelopes, status codes and the end-to-end leasing flow."""

PASSWORD = "Sup3rSecret!"


async def _login(client, email, password=PASSWORD):
    return await client.post(
        "/api/auth/login", json={"email": email, "password": password}
    )


async def _unit_bearing_property(client, headers) -> tuple[int, list[int]]:
    response = await client.post(
        "/api/properties",
        headers=headers,
        json={
            "title": "Kileleshwa Court",
            "address": "Othaya Rd",
            "city": "Nairobi",
            "propertyType": "apartment",
            "hasUnits": True,
        },
    )
    assert response.status_code == 201
    property_id = response.json()["data"]["id"]

    response = await client.post(
        f"/api/properties/{property_id}/units",
        headers=headers,
        json={
            "units": [
                {"unitNumber": "1A", "area": 52.5, "rent": 15000, "deposit": 15000},
                {"unitNumber": "1B", "area": 48, "rent": 14000, "deposit": 14000},
            ]
        },
    )
    assert response.status_code == 201
    return property_id, [u["id"] for u in response.json()["data"]]


def _tenant_body(property_id, unit_id, email="njeri@rentwise.co.ke"):
    return {
        "property": property_id,
        "unit": unit_id,
        "userData": {"email": email, "firstName": "Njeri", "lastName": "Mwangi"},
        "leaseStartDate": "2026-11-01",
        "leaseDurationMonths": 12,
        "rentAmount": 15000,
        "depositAmount": 15000,
        "emergencyContact": {
            "name": "James Mwangi",
            "phone": "+254733000222",
            "relationship": "spouse",
        },
    }


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAuth:
    async def test_login_and_profile(self, client, users):
        response = await _login(client, "clerk@rentwise.co.ke")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        token = body["data"]["access_token"]

        response = await client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        profile = response.json()["data"]
        assert profile["role"] == "employee"
        assert profile["capabilities"] == ["canCreateTenants", "canManageProperties"]

    async def test_wrong_password_then_lockout(self, client, users):
        for _ in range(2):
            response = await _login(client, "agent@rentwise.co.ke", "wrong-password")
            assert response.status_code == 401
            assert response.json()["error"]["type"] == "AuthenticationError"

        response = await _login(client, "agent@rentwise.co.ke", "wrong-password")
        assert "locked" in response.json()["message"]

        response = await _login(client, "agent@rentwise.co.ke")
        assert response.status_code == 401

    async def test_missing_token(self, client):
        response = await client.get("/api/properties")
        assert response.status_code == 401
        assert response.json()["success"] is False

    async def test_bad_token(self, client):
        response = await client.get(
            "/api/properties", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401


class TestEmployees:
    async def test_agent_creates_employee_and_grants_permission(
        self, client, users, auth_headers
    ):
        response = await client.post(
            "/api/users/employees",
            headers=auth_headers("agent"),
            json={
                "email": "mercy@rentwise.co.ke",
                "firstName": "Mercy",
                "jobTitle": "Caretaker",
                "permissions": {"canManageProperties": True},
            },
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["temporary_password"]
        employee = data["employee"]
        assert employee["parent_user_id"] == users.agent.id
        assert employee["can_manage_properties"] is True
        assert employee["can_create_tenants"] is False

        response = await client.patch(
            f"/api/users/employees/{employee['id']}/permissions",
            headers=auth_headers("agent"),
            json={"canManageProperties": True, "canCreateTenants": True},
        )
        assert response.status_code == 200
        assert response.json()["data"]["can_create_tenants"] is True

        response = await client.get(
            "/api/users/employees", headers=auth_headers("agent")
        )
        emails = {e["email"] for e in response.json()["data"]}
        assert emails == {
            "clerk@rentwise.co.ke",
            "intern@rentwise.co.ke",
            "mercy@rentwise.co.ke",
        }

    async def test_employee_cannot_grant_permissions(
        self, client, users, auth_headers
    ):
        response = await client.patch(
            f"/api/users/employees/{users.intern.id}/permissions",
            headers=auth_headers("clerk"),
            json={"canCreateTenants": True},
        )
        assert response.status_code == 403

    async def test_rival_agent_cannot_grant_permissions(
        self, client, users, auth_headers
    ):
        response = await client.patch(
            f"/api/users/employees/{users.intern.id}/permissions",
            headers=auth_headers("other_agent"),
            json={"canCreateTenants": True},
        )
        assert response.status_code == 403


class TestLeasingFlow:
    async def test_provision_occupy_and_move_out(self, client, users, auth_headers):
        headers = auth_headers("agent")
        property_id, (unit_1a, unit_1b) = await _unit_bearing_property(client, headers)

        response = await client.post(
            "/api/tenants", headers=headers, json=_tenant_body(property_id, unit_1a)
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Tenant created successfully"
        result = body["data"]
        assert result["warnings"] == []
        assert result["temporary_password"]
        tenant = result["tenant"]
        assert tenant["status"] == "active"
        assert tenant["lease_end_date"] == "2027-11-01"
        assert tenant["rent_amount"] == 15000
        assert tenant["user"]["must_change_password"] is True

        response = await client.get(
            f"/api/properties/{property_id}/units/stats", headers=headers
        )
        stats = response.json()["data"]
        assert stats["occupied_units"] == 1
        assert stats["occupancy_rate"] == 50.0

        response = await client.get(
            f"/api/properties/{property_id}/available-units", headers=headers
        )
        assert [u["id"] for u in response.json()["data"]] == [unit_1b]

        # Occupying the taken unit again is a state conflict
        response = await client.patch(
            f"/api/properties/{property_id}/units/{unit_1a}/occupy",
            headers=headers,
            json={
                "tenantId": tenant["id"],
                "leaseStart": "2026-11-01",
                "leaseEnd": "2027-11-01",
            },
        )
        assert response.status_code == 409
        assert response.json()["error"]["type"] == "InvalidStateTransitionError"

        response = await client.post(
            f"/api/tenants/{tenant['id']}/move-out",
            headers=headers,
            json={"moveOutDate": "2027-03-31", "depositStatus": "returned"},
        )
        assert response.status_code == 200
        moved = response.json()["data"]
        assert moved["status"] == "terminated"
        assert moved["deposit_status"] == "returned"

        response = await client.get(
            f"/api/properties/{property_id}/units", headers=headers
        )
        availability = {u["id"]: u["availability"] for u in response.json()["data"]}
        assert availability == {unit_1a: "available", unit_1b: "available"}

    async def test_second_tenant_for_taken_unit_conflicts(
        self, client, users, auth_headers
    ):
        headers = auth_headers("agent")
        property_id, (unit_1a, _) = await _unit_bearing_property(client, headers)
        await client.post(
            "/api/tenants", headers=headers, json=_tenant_body(property_id, unit_1a)
        )

        response = await client.post(
            "/api/tenants",
            headers=headers,
            json=_tenant_body(property_id, unit_1a, email="baraka@rentwise.co.ke"),
        )

        assert response.status_code == 409
        assert response.json()["error"]["type"] == "TargetUnavailableError"

    async def test_provisioned_occupant_sets_own_password(
        self, client, users, auth_headers
    ):
        headers = auth_headers("agent")
        property_id, (unit_1a, _) = await _unit_bearing_property(client, headers)
        response = await client.post(
            "/api/tenants", headers=headers, json=_tenant_body(property_id, unit_1a)
        )
        temporary_password = response.json()["data"]["temporary_password"]

        response = await _login(client, "njeri@rentwise.co.ke", temporary_password)
        token = response.json()["data"]
        assert token["must_change_password"] is True

        response = await client.post(
            "/api/auth/first-login-password",
            headers={"Authorization": f"Bearer {token['access_token']}"},
            json={"newPassword": "NjeriHome2026"},
        )
        assert response.status_code == 200

        response = await _login(client, "njeri@rentwise.co.ke", "NjeriHome2026")
        assert response.json()["data"]["must_change_password"] is False


class TestErrorEnvelopes:
    async def test_intern_cannot_provision(self, client, users, auth_headers):
        property_id, (unit_1a, _) = await _unit_bearing_property(
            client, auth_headers("agent")
        )

        response = await client.post(
            "/api/tenants",
            headers=auth_headers("intern"),
            json=_tenant_body(property_id, unit_1a),
        )

        assert response.status_code == 403
        body = response.json()
        assert body["success"] is False
        assert body["data"] is None
        assert body["error"]["type"] == "UnauthorizedError"

        response = await client.get("/api/tenants", headers=auth_headers("agent"))
        assert response.json()["data"]["total"] == 0

    async def test_unknown_property(self, client, users, auth_headers):
        response = await client.get("/api/properties/999", headers=auth_headers("agent"))
        assert response.status_code == 404
        assert response.json()["error"]["type"] == "NotFoundError"

    async def test_duplicate_unit_number(self, client, users, auth_headers):
        headers = auth_headers("agent")
        property_id, _ = await _unit_bearing_property(client, headers)

        response = await client.post(
            f"/api/properties/{property_id}/units",
            headers=headers,
            json={"units": [{"unitNumber": "1a", "area": 40, "rent": 12000}]},
        )

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "ValidationError"

    async def test_unit_rent_below_minimum(self, client, users, auth_headers):
        headers = auth_headers("agent")
        property_id, _ = await _unit_bearing_property(client, headers)

        response = await client.post(
            f"/api/properties/{property_id}/units",
            headers=headers,
            json={"units": [{"unitNumber": "2A", "area": 40, "rent": 0}]},
        )

        assert response.status_code == 422

    async def test_availability_cannot_be_patched(self, client, users, auth_headers):
        headers = auth_headers("agent")
        property_id, _ = await _unit_bearing_property(client, headers)

        response = await client.patch(
            f"/api/properties/{property_id}",
            headers=headers,
            json={"availability": "occupied"},
        )

        assert response.status_code == 422

    async def test_enable_units_over_http_is_idempotent(
        self, client, users, auth_headers
    ):
        headers = auth_headers("agent")
        response = await client.post(
            "/api/properties",
            headers=headers,
            json={
                "title": "Lavington Bungalow",
                "address": "James Gichuru Rd",
                "city": "Nairobi",
                "rent": 85000,
                "deposit": 170000,
            },
        )
        property_id = response.json()["data"]["id"]

        for _ in range(2):
            response = await client.patch(
                f"/api/properties/{property_id}",
                headers=headers,
                json={"hasUnits": True},
            )
            assert response.status_code == 200
            assert response.json()["data"]["has_units"] is True
