"""
Tests for the /users endpoints.
"""

import uuid

from task_manager_api.app.schemas.common import MAX_PAGE


def test_create_user(client):
    response = client.post("/users", json={"name": "John Doe", "email": "john@example.com"})
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User created successfully"
    assert body["data"]["name"] == "John Doe"
    assert body["data"]["email"] == "john@example.com"
    assert {"id", "createdAt", "updatedAt"} <= set(body["data"])
    assert "timestamp" in body["meta"]
    assert response.headers["X-Request-ID"]


def test_create_user_validation_error(client):
    response = client.post("/users", json={"name": "", "email": "nope"})
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["error"] == "Validation failed"
    assert {detail["field"] for detail in body["details"]} == {"name", "email"}


def test_create_user_invalid_json(client):
    response = client.post(
        "/users", content="{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_create_user_duplicate_email(client, create_user):
    create_user(email="dup@example.com")
    response = client.post("/users", json={"name": "Other", "email": "dup@example.com"})
    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "CONFLICT"
    assert body["error"] == "Email already exists"


def test_get_user(client, create_user):
    user = create_user()
    response = client.get(f"/users/{user['id']}")
    assert response.status_code == 200
    assert response.json()["data"] == user


def test_get_user_not_found(client):
    response = client.get(f"/users/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"
    assert response.json()["error"] == "User not found"


def test_get_user_invalid_id(client):
    response = client.get("/users/not-a-uuid")
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "id"


def test_update_user(client, create_user):
    user = create_user()
    response = client.put(f"/users/{user['id']}", json={"name": "Johnny"})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "User updated successfully"
    assert body["data"]["name"] == "Johnny"
    assert body["data"]["email"] == user["email"]


def test_update_user_empty_payload(client, create_user):
    user = create_user()
    response = client.put(f"/users/{user['id']}", json={})
    assert response.status_code == 400
    assert response.json()["details"][0]["message"] == "At least one field must be provided"


def test_update_user_email_conflict(client, create_user):
    create_user(email="taken@example.com")
    user = create_user(email="free@example.com")
    response = client.put(f"/users/{user['id']}", json={"email": "taken@example.com"})
    assert response.status_code == 409


def test_delete_user(client, create_user, create_task):
    user = create_user()
    create_task(user["id"])
    response = client.delete(f"/users/{user['id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "User deleted successfully"
    assert body["data"]["id"] == user["id"]
    assert len(body["data"]["tasks"]) == 1

    assert client.get(f"/users/{user['id']}").status_code == 404
    assert client.get("/tasks").json()["pagination"]["total"] == 0


def test_delete_user_not_found(client):
    response = client.delete(f"/users/{uuid.uuid4()}")
    assert response.status_code == 404


def test_list_users_pagination(client, create_user):
    for index in range(12):
        create_user(name=f"User {index:02d}", email=f"user{index}@example.com")
    response = client.get("/users", params={"page": 2, "limit": 5, "sortBy": "name", "sortOrder": "asc"})
    assert response.status_code == 200
    body = response.json()
    assert [user["name"] for user in body["data"]] == [f"User {index:02d}" for index in range(5, 10)]
    assert body["pagination"] == {
        "page": 2,
        "limit": 5,
        "total": 12,
        "totalPages": 3,
        "hasNext": True,
        "hasPrev": True,
    }


def test_list_users_default_sort_is_newest_first(client, create_user):
    create_user(name="Old", email="old@example.com")
    create_user(name="New", email="new@example.com")
    names = [user["name"] for user in client.get("/users").json()["data"]]
    assert names == ["New", "Old"]


def test_list_users_search(client, create_user, create_task):
    alice = create_user(name="Alice Smith", email="alice@example.com")
    create_user(name="Bob", email="bob@corp.example.com")
    create_task(alice["id"], title="Alice's task")

    by_name = client.get("/users", params={"search": "smith"}).json()
    assert [user["name"] for user in by_name["data"]] == ["Alice Smith"]
    assert by_name["data"][0]["tasks"][0]["title"] == "Alice's task"

    by_email = client.get("/users", params={"search": "CORP"}).json()
    assert [user["name"] for user in by_email["data"]] == ["Bob"]


def test_list_users_rejects_bad_query(client):
    assert client.get("/users", params={"limit": 101}).status_code == 400
    assert client.get("/users", params={"page": 0}).status_code == 400
    assert client.get("/users", params={"sortBy": "id"}).status_code == 400


def test_list_users_page_beyond_storage_range(client, create_user):
    create_user()
    response = client.get("/users", params={"page": 10**18})
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "page"

    last = client.get("/users", params={"page": MAX_PAGE})
    assert last.status_code == 200
    assert last.json()["data"] == []
    assert last.json()["pagination"]["total"] == 1


def test_list_users_search_folds_non_ascii_case(client, create_user):
    create_user(name="Émile Zola", email="zola@example.com")
    create_user(name="Emil Nolde", email="nolde@example.com")
    names = [user["name"] for user in client.get("/users", params={"search": "émile"}).json()["data"]]
    assert names == ["Émile Zola"]


def test_email_domain_case_is_not_normalised(client, create_user):
    create_user(email="a@example.com")
    response = client.post("/users", json={"name": "Other", "email": "a@EXAMPLE.com"})
    assert response.status_code == 201
    assert response.json()["data"]["email"] == "a@EXAMPLE.com"


def test_email_display_name_form_rejected(client):
    response = client.post("/users", json={"name": "Jo", "email": "Jo Bloggs <jo@example.com>"})
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "email"
    assert client.get("/users").json()["pagination"]["total"] == 0


def test_list_users_sorted_pages_do_not_overlap(client, create_user):
    ids = {create_user(name="Same", email=f"same{index}@example.com")["id"] for index in range(7)}
    seen = []
    for page in (1, 2, 3):
        data = client.get(
            "/users", params={"page": page, "limit": 3, "sortBy": "name", "sortOrder": "asc"}
        ).json()["data"]
        seen.extend(user["id"] for user in data)
    assert len(seen) == 7
    assert set(seen) == ids
