from __future__ import annotations

from typing import Callable
from uuid import uuid4

from httpx import AsyncClient

from taskboard.models import TaskPriority, TaskStatus, UserRole
from taskboard.schemas import MAX_PAGE, MAX_PAGE_SIZE


async def test_task_crud_flow(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()
    headers = owner.headers

    created = await client.post(
        "/api/v1/tasks",
        json={
            "title": "Write onboarding checklist",
            "description": "Prepare the initial onboarding tasks.",
            "dueDate": "2030-01-15T09:00:00Z",
        },
        headers=headers,
    )
    assert created.status_code == 201, created.text
    task = created.json()
    assert task["ownerId"] == owner.id
    assert task["status"] == TaskStatus.TODO.value
    assert task["priority"] == TaskPriority.MEDIUM.value
    assert task["dueDate"].startswith("2030-01-15T09:00:00")

    detail = await client.get(f"/api/v1/tasks/{task['id']}", headers=headers)
    assert detail.status_code == 200
    assert detail.json()["title"] == "Write onboarding checklist"

    patched = await client.patch(
        f"/api/v1/tasks/{task['id']}",
        json={"status": TaskStatus.IN_PROGRESS.value},
        headers=headers,
    )
    assert patched.status_code == 200
    assert patched.json()["status"] == TaskStatus.IN_PROGRESS.value
    assert patched.json()["title"] == "Write onboarding checklist"
    assert patched.json()["description"] == "Prepare the initial onboarding tasks."

    put = await client.put(
        f"/api/v1/tasks/{task['id']}",
        json={"priority": TaskPriority.HIGH.value, "dueDate": None},
        headers=headers,
    )
    assert put.status_code == 200
    assert put.json()["priority"] == TaskPriority.HIGH.value
    assert put.json()["dueDate"] is None
    assert put.json()["status"] == TaskStatus.IN_PROGRESS.value

    deleted = await client.delete(f"/api/v1/tasks/{task['id']}", headers=headers)
    assert deleted.status_code == 204

    missing = await client.get(f"/api/v1/tasks/{task['id']}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error"] == "not_found"


async def test_update_requires_at_least_one_field(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()
    created = await client.post("/api/v1/tasks", json={"title": "Some task"}, headers=owner.headers)
    task_id = created.json()["id"]

    empty = await client.patch(f"/api/v1/tasks/{task_id}", json={}, headers=owner.headers)
    assert empty.status_code == 400

    null_title = await client.patch(
        f"/api/v1/tasks/{task_id}",
        json={"title": None},
        headers=owner.headers,
    )
    assert null_title.status_code == 400


async def test_create_validates_body(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()

    short_title = await client.post("/api/v1/tasks", json={"title": "ab"}, headers=owner.headers)
    bad_status = await client.post(
        "/api/v1/tasks",
        json={"title": "Valid title", "status": "archived"},
        headers=owner.headers,
    )
    bad_date = await client.post(
        "/api/v1/tasks",
        json={"title": "Valid title", "dueDate": "next tuesday"},
        headers=owner.headers,
    )
    unknown_field = await client.post(
        "/api/v1/tasks",
        json={"title": "Valid title", "ownerId": str(uuid4())},
        headers=owner.headers,
    )

    for response in (short_title, bad_status, bad_date, unknown_field):
        assert response.status_code == 400, response.text
        assert response.json()["statusCode"] == 400


async def test_malformed_task_id_is_rejected(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()

    response = await client.get("/api/v1/tasks/not-a-uuid", headers=owner.headers)

    assert response.status_code == 400
    assert response.json()["path"] == "/api/v1/tasks/not-a-uuid"


async def test_cross_owner_access_is_forbidden_but_admin_succeeds(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()
    intruder = await authenticated_user()
    admin = await authenticated_user(role=UserRole.ADMIN)

    created = await client.post("/api/v1/tasks", json={"title": "Private task"}, headers=owner.headers)
    task_id = created.json()["id"]

    forbidden = await client.get(f"/api/v1/tasks/{task_id}", headers=intruder.headers)
    assert forbidden.status_code == 403
    assert forbidden.json()["method"] == "GET"

    forbidden_update = await client.patch(
        f"/api/v1/tasks/{task_id}",
        json={"title": "Hijacked"},
        headers=intruder.headers,
    )
    assert forbidden_update.status_code == 403

    forbidden_delete = await client.delete(f"/api/v1/tasks/{task_id}", headers=intruder.headers)
    assert forbidden_delete.status_code == 403

    as_admin = await client.get(f"/api/v1/tasks/{task_id}", headers=admin.headers)
    assert as_admin.status_code == 200
    assert as_admin.json()["ownerId"] == owner.id


async def test_listing_only_contains_callers_tasks(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    alice = await authenticated_user()
    bob = await authenticated_user()

    await client.post("/api/v1/tasks", json={"title": "Alice task"}, headers=alice.headers)
    await client.post("/api/v1/tasks", json={"title": "Bob task"}, headers=bob.headers)

    response = await client.get("/api/v1/tasks", headers=alice.headers)

    assert response.status_code == 200
    titles = [task["title"] for task in response.json()["data"]]
    assert titles == ["Alice task"]


async def test_pagination_metadata(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()
    for index in range(25):
        response = await client.post(
            "/api/v1/tasks",
            json={"title": f"Task number {index}"},
            headers=owner.headers,
        )
        assert response.status_code == 201

    page = await client.get("/api/v1/tasks", params={"page": 3, "limit": 10}, headers=owner.headers)

    assert page.status_code == 200
    payload = page.json()
    assert len(payload["data"]) == 5
    assert payload["meta"] == {
        "total": 25,
        "page": 3,
        "limit": 10,
        "totalPages": 3,
        "hasNextPage": False,
        "hasPreviousPage": True,
    }


async def test_pages_do_not_overlap(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()
    for index in range(7):
        await client.post("/api/v1/tasks", json={"title": f"Paged task {index}"}, headers=owner.headers)

    seen: list[str] = []
    for page in (1, 2, 3):
        response = await client.get(
            "/api/v1/tasks",
            params={"page": page, "limit": 3, "sortBy": "priority", "sortOrder": "ASC"},
            headers=owner.headers,
        )
        seen.extend(task["id"] for task in response.json()["data"])

    assert len(seen) == 7
    assert len(set(seen)) == 7


async def test_limit_out_of_range_is_rejected(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()

    too_large = await client.get("/api/v1/tasks", params={"limit": 101}, headers=owner.headers)
    zero_page = await client.get("/api/v1/tasks", params={"page": 0}, headers=owner.headers)

    assert too_large.status_code == 400
    assert zero_page.status_code == 400


async def test_status_and_search_filters_combine(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()
    fixtures = [
        {"title": "Quarterly REPORT", "status": TaskStatus.DONE.value},
        {"title": "Plan offsite", "description": "Book venue, send report", "status": TaskStatus.DONE.value},
        {"title": "Draft report outline", "status": TaskStatus.TODO.value},
        {"title": "Clean desk", "status": TaskStatus.DONE.value},
    ]
    for body in fixtures:
        response = await client.post("/api/v1/tasks", json=body, headers=owner.headers)
        assert response.status_code == 201

    response = await client.get(
        "/api/v1/tasks",
        params={"status": TaskStatus.DONE.value, "search": "report"},
        headers=owner.headers,
    )

    assert response.status_code == 200
    titles = sorted(task["title"] for task in response.json()["data"])
    assert titles == ["Plan offsite", "Quarterly REPORT"]
    assert response.json()["meta"]["total"] == 2


async def test_search_treats_wildcards_literally(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()
    await client.post("/api/v1/tasks", json={"title": "Reach 100% coverage"}, headers=owner.headers)
    await client.post("/api/v1/tasks", json={"title": "Ship release"}, headers=owner.headers)

    response = await client.get("/api/v1/tasks", params={"search": "%"}, headers=owner.headers)

    assert [task["title"] for task in response.json()["data"]] == ["Reach 100% coverage"]


async def test_sort_by_priority(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()
    for priority in (TaskPriority.MEDIUM, TaskPriority.HIGH, TaskPriority.LOW):
        await client.post(
            "/api/v1/tasks",
            json={"title": f"{priority.value} task", "priority": priority.value},
            headers=owner.headers,
        )

    ascending = await client.get(
        "/api/v1/tasks",
        params={"sortBy": "priority", "sortOrder": "ASC"},
        headers=owner.headers,
    )
    descending = await client.get(
        "/api/v1/tasks",
        params={"sortBy": "priority", "sortOrder": "DESC"},
        headers=owner.headers,
    )

    assert [task["priority"] for task in ascending.json()["data"]] == ["low", "medium", "high"]
    assert [task["priority"] for task in descending.json()["data"]] == ["high", "medium", "low"]


async def test_statistics_are_zero_filled(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()
    await client.post(
        "/api/v1/tasks",
        json={"title": "Done already", "status": TaskStatus.DONE.value},
        headers=owner.headers,
    )
    await client.post("/api/v1/tasks", json={"title": "Still to do"}, headers=owner.headers)

    response = await client.get("/api/v1/tasks/statistics", headers=owner.headers)

    assert response.status_code == 200
    assert response.json() == {
        "total": 2,
        "byStatus": {"todo": 1, "in_progress": 0, "done": 1},
    }


async def test_listing_rejects_page_beyond_the_supported_range(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()

    response = await client.get(
        "/api/v1/tasks",
        params={"page": 10**18, "limit": 100},
        headers=owner.headers,
    )

    assert response.status_code == 400
    assert response.json()["error"] == "bad_request"
    assert any(message.startswith("page") for message in response.json()["message"])


async def test_largest_page_returns_an_empty_listing(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()
    await client.post("/api/v1/tasks", json={"title": "Only task"}, headers=owner.headers)

    response = await client.get(
        "/api/v1/tasks",
        params={"page": MAX_PAGE, "limit": MAX_PAGE_SIZE},
        headers=owner.headers,
    )

    assert response.status_code == 200
    assert response.json()["data"] == []
    assert response.json()["meta"]["total"] == 1
    assert response.json()["meta"]["hasPreviousPage"] is True


async def test_listing_rejects_unknown_query_parameters(
    client: AsyncClient,
    authenticated_user: Callable[..., "AuthenticatedUser"],
) -> None:
    owner = await authenticated_user()

    response = await client.get("/api/v1/tasks", params={"bogus": "1"}, headers=owner.headers)

    assert response.status_code == 400
    assert any(message.startswith("bogus") for message in response.json()["message"])
