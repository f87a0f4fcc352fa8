"""Tests for admin task management and the worker task lifecycle."""

import uuid
from datetime import datetime, timedelta

from kvb_crm.models.task import Task
from kvb_crm.services.email_service import get_email_service
from kvb_crm.services.upload_service import MockUploadProvider, set_upload_provider


async def _create_task(client, admin_headers, customer, workers, **overrides):
    payload = {
        "title": "Install inverter",
        "description": "Replace the old inverter",
        "location": "12 Solar Street",
        "due_date": (datetime.utcnow() + timedelta(days=3)).isoformat(),
        "assigned_to": [str(w.id) for w in workers],
        "customer_id": str(customer.id),
        **overrides,
    }
    response = await client.post("/api/admin/tasks", json=payload, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()


async def test_admin_creates_task_and_workers_are_notified(client, admin, worker, customer, auth_headers):
    get_email_service().sent_emails.clear()
    task = await _create_task(client, auth_headers(admin), customer, [worker])

    assert task["assigned_to"] == [str(worker.id)]
    assert task["assigned_by"] == {"kind": "Admin", "id": str(admin.id)}
    assert task["status"] == "pending"
    assert [email["to"] for email in get_email_service().sent_emails] == [worker.email]


async def test_unknown_worker_is_rejected(client, admin, customer, auth_headers):
    response = await client.post(
        "/api/admin/tasks",
        json={
            "title": "Survey",
            "due_date": datetime.utcnow().isoformat(),
            "assigned_to": [str(uuid.uuid4())],
            "customer_id": str(customer.id),
        },
        headers=auth_headers(admin),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "One or more assigned workers do not exist"


async def test_worker_sees_only_assigned_tasks_soonest_first(
    client, admin, worker, make_principal, customer, auth_headers
):
    other = await make_principal("worker")
    headers = auth_headers(admin)
    later = await _create_task(
        client, headers, customer, [worker], title="Later",
        due_date=(datetime.utcnow() + timedelta(days=9)).isoformat(),
    )
    sooner = await _create_task(
        client, headers, customer, [worker, other], title="Sooner",
        due_date=(datetime.utcnow() + timedelta(days=1)).isoformat(),
    )
    await _create_task(client, headers, customer, [other], title="Not mine")

    response = await client.get("/api/tasks/worker/assigned", headers=auth_headers(worker))
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [sooner["id"], later["id"]]


async def test_worker_completes_task_and_customer_is_emailed_once(
    client, admin, worker, customer, auth_headers
):
    task = await _create_task(client, auth_headers(admin), customer, [worker])
    get_email_service().sent_emails.clear()
    headers = auth_headers(worker)

    response = await client.put(f"/api/tasks/worker/complete/{task['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "completed"

    await client.put(f"/api/tasks/worker/complete/{task['id']}", headers=headers)
    completion = [e for e in get_email_service().sent_emails if e["to"] == customer.email]
    assert len(completion) == 1


async def test_unassigned_worker_gets_404_not_403(client, admin, worker, make_principal, customer, auth_headers):
    task = await _create_task(client, auth_headers(admin), customer, [worker])
    outsider = await make_principal("worker")
    headers = auth_headers(outsider)

    complete = await client.put(f"/api/tasks/worker/complete/{task['id']}", headers=headers)
    assert complete.status_code == 404
    assert complete.json()["detail"] == "Task not found or not assigned to you"

    comment = await client.post(f"/api/tasks/{task['id']}/comments", json={"comment": "hi"}, headers=headers)
    assert comment.status_code == 404


async def test_invalid_status_value(client, admin, worker, customer, auth_headers):
    task = await _create_task(client, auth_headers(admin), customer, [worker])
    response = await client.put(
        f"/api/tasks/worker/update-status/{task['id']}",
        json={"status": "done-ish"},
        headers=auth_headers(worker),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid status value"


async def test_status_update_with_comment(client, admin, worker, customer, auth_headers):
    task = await _create_task(client, auth_headers(admin), customer, [worker])
    response = await client.put(
        f"/api/tasks/worker/update-status/{task['id']}",
        json={"status": "in-progress", "comment": "On site"},
        headers=auth_headers(worker),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "in-progress"
    assert body["comments"][-1]["comment"] == "On site"
    assert body["comments"][-1]["user_type"] == "Worker"
    assert body["comments"][-1]["user"] == str(worker.id)


async def test_comment_only_update_keeps_status(client, admin, worker, customer, auth_headers):
    task = await _create_task(client, auth_headers(admin), customer, [worker])
    response = await client.put(
        f"/api/tasks/worker/update-status/{task['id']}",
        json={"comment": "Arrived on site"},
        headers=auth_headers(worker),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "pending"
    assert body["comments"][-1]["comment"] == "Arrived on site"


async def test_unassigned_worker_with_bad_status_gets_404(
    client, admin, worker, make_principal, customer, auth_headers
):
    task = await _create_task(client, auth_headers(admin), customer, [worker])
    outsider = await make_principal("worker")
    response = await client.put(
        f"/api/tasks/worker/update-status/{task['id']}",
        json={"status": "done-ish"},
        headers=auth_headers(outsider),
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Task not found or not assigned to you"


async def test_comments(client, admin, worker, customer, auth_headers):
    task = await _create_task(client, auth_headers(admin), customer, [worker])
    headers = auth_headers(worker)

    empty = await client.post(f"/api/tasks/{task['id']}/comments", json={"comment": " "}, headers=headers)
    assert empty.status_code == 400

    response = await client.post(
        f"/api/tasks/{task['id']}/comments", json={"comment": "Panels mounted"}, headers=headers
    )
    assert response.status_code == 201
    assert response.json()["comment"]["comment"] == "Panels mounted"


async def test_upload_attachments(client, session, admin, worker, customer, auth_headers, uploads):
    task = await _create_task(client, auth_headers(admin), customer, [worker])
    files = [
        ("files", ("before.jpg", b"jpeg-bytes", "image/jpeg")),
        ("files", ("after.jpg", b"more-bytes", "image/jpeg")),
    ]
    response = await client.post(f"/api/tasks/{task['id']}/upload", files=files, headers=auth_headers(worker))
    assert response.status_code == 200
    attachments = response.json()["attachments"]
    assert [a["filename"] for a in attachments] == ["before.jpg", "after.jpg"]
    assert all(a["public_id"].startswith("task-attachments/") for a in attachments)

    stored = await session.get(Task, uuid.UUID(task["id"]))
    assert len(stored.attachments) == 2
    assert len(uploads.files) == 2


async def test_upload_without_files(client, session, admin, worker, customer, auth_headers, uploads):
    task = await _create_task(client, auth_headers(admin), customer, [worker])
    response = await client.post(f"/api/tasks/{task['id']}/upload", headers=auth_headers(worker))
    assert response.status_code == 200
    assert response.json()["attachments"] == []

    stored = await session.get(Task, uuid.UUID(task["id"]))
    assert stored.attachments == []
    assert uploads.files == {}


async def test_failed_upload_leaves_task_unchanged(client, session, admin, worker, customer, auth_headers):
    task = await _create_task(client, auth_headers(admin), customer, [worker])
    provider = MockUploadProvider(fail_on=2)
    set_upload_provider(provider)

    files = [
        ("files", ("one.jpg", b"1", "image/jpeg")),
        ("files", ("two.jpg", b"2", "image/jpeg")),
    ]
    response = await client.post(f"/api/tasks/{task['id']}/upload", files=files, headers=auth_headers(worker))
    assert response.status_code == 502

    stored = await session.get(Task, uuid.UUID(task["id"]))
    assert stored.attachments == []
    assert provider.files == {}
    assert len(provider.deleted) == 1


async def test_reassignment_notifies_only_new_workers(
    client, admin, worker, make_principal, customer, auth_headers
):
    newcomer = await make_principal("worker")
    headers = auth_headers(admin)
    task = await _create_task(client, headers, customer, [worker])
    get_email_service().sent_emails.clear()

    response = await client.put(
        f"/api/admin/tasks/{task['id']}",
        json={"assigned_to": [str(worker.id), str(newcomer.id)]},
        headers=headers,
    )
    assert response.status_code == 200
    assert set(response.json()["assigned_to"]) == {str(worker.id), str(newcomer.id)}
    assert [email["to"] for email in get_email_service().sent_emails] == [newcomer.email]


async def test_admin_completion_emails_customer(client, admin, worker, customer, auth_headers):
    headers = auth_headers(admin)
    task = await _create_task(client, headers, customer, [worker])
    get_email_service().sent_emails.clear()

    await client.put(f"/api/admin/tasks/{task['id']}", json={"status": "completed"}, headers=headers)
    assert [email["to"] for email in get_email_service().sent_emails] == [customer.email]


async def test_admin_lists_and_deletes_tasks(client, admin, worker, customer, auth_headers):
    headers = auth_headers(admin)
    task = await _create_task(client, headers, customer, [worker])

    listing = await client.get("/api/admin/tasks?status=pending", headers=headers)
    assert listing.json()["total"] == 1

    deleted = await client.delete(f"/api/admin/tasks/{task['id']}", headers=headers)
    assert deleted.status_code == 200

    missing = await client.get(f"/api/admin/tasks/{task['id']}", headers=headers)
    assert missing.status_code == 404
