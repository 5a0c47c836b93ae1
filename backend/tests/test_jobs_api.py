"""
Tests for the /api/jobs routes.

Tests cover:
- Job creation and boundary validation
- Public listing (anonymous and authenticated) and detail visibility
- Interest, assignment, filled and delete endpoints with their error codes
- The JSON error envelope
"""

from unittest.mock import patch

import pytest

from hirely.errors import InternalError

from conftest import job_payload, register


def assign_body(worker_id, **overrides):
    body = {
        "assigned_user_id": worker_id,
        "assigned_location": "221B Baker St",
        "assigned_details": "Ring the bell twice",
    }
    body.update(overrides)
    return body


class TestCreateJob:
    def test_create_job_returns_201(self, client, employer):
        response = client.post("/api/jobs", json=job_payload(), headers=employer["headers"])

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Job posted successfully!"
        assert body["job"]["status"] == "open"
        assert body["job"]["posted_by_user_id"] == employer["id"]
        assert "private_details" not in body["job"]

    def test_create_job_requires_token(self, client):
        response = client.post("/api/jobs", json=job_payload())

        assert response.status_code == 401
        assert response.json() == {
            "status": "fail",
            "message": "Authentication required to access this resource.",
        }

    def test_create_job_with_forged_token_is_401(self, client):
        response = client.post(
            "/api/jobs",
            json=job_payload(),
            headers={"Authorization": "Bearer not.a.jwt"},
        )
        assert response.status_code == 401

    @pytest.mark.parametrize(
        "overrides",
        [
            {"pay": 0},
            {"total_hours": -1},
            {"title": ""},
            {"end_time": "2030-05-01T09:00:00"},
        ],
    )
    def test_create_job_rejects_invalid_fields(self, client, employer, overrides):
        response = client.post("/api/jobs", json=job_payload(**overrides), headers=employer["headers"])

        assert response.status_code == 400
        assert response.json()["status"] == "fail"

    def test_create_job_missing_field_is_400(self, client, employer):
        payload = job_payload()
        del payload["category"]

        response = client.post("/api/jobs", json=payload, headers=employer["headers"])
        assert response.status_code == 400
        assert "category" in response.json()["message"]


class TestListAndDetail:
    def test_anonymous_listing(self, client, posted_job):
        response = client.get("/api/jobs")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        job = body["jobs"][0]
        assert job["id"] == posted_job["id"]
        assert job["posted_by_name"] == "Erin Employer"
        assert job["interested_count"] == 0
        assert job["is_interested_by_current_user"] is False
        assert job["has_any_assignment"] is False

    def test_listing_reflects_caller_interest(self, client, posted_job, seeker):
        client.post(f"/api/jobs/{posted_job['id']}/interest", headers=seeker["headers"])

        mine = client.get("/api/jobs", headers=seeker["headers"]).json()["jobs"][0]
        anonymous = client.get("/api/jobs").json()["jobs"][0]

        assert mine["interested_count"] == 1
        assert mine["is_interested_by_current_user"] is True
        assert anonymous["is_interested_by_current_user"] is False

    def test_listing_filters(self, client, employer):
        client.post("/api/jobs", json=job_payload(), headers=employer["headers"])
        client.post(
            "/api/jobs",
            json=job_payload(title="Walk the dog", category="Pets", pay=15),
            headers=employer["headers"],
        )

        by_category = client.get("/api/jobs", params={"category": "pet"}).json()
        assert [job["title"] for job in by_category["jobs"]] == ["Walk the dog"]

        by_pay = client.get("/api/jobs", params={"minPay": 20}).json()
        assert [job["title"] for job in by_pay["jobs"]] == ["Move a sofa"]

        by_max_pay = client.get("/api/jobs", params={"maxPay": 20}).json()
        assert [job["title"] for job in by_max_pay["jobs"]] == ["Walk the dog"]

        by_keyword = client.get("/api/jobs", params={"keywords": "stairs"}).json()
        assert by_keyword["total"] == 1

    def test_listing_newest_first_and_paginated(self, client, employer):
        for title in ("First", "Second", "Third"):
            client.post("/api/jobs", json=job_payload(title=title), headers=employer["headers"])

        page = client.get("/api/jobs", params={"per_page": 2}).json()
        assert page["total"] == 3
        assert [job["title"] for job in page["jobs"]] == ["Third", "Second"]

        second = client.get("/api/jobs", params={"per_page": 2, "page": 2}).json()
        assert [job["title"] for job in second["jobs"]] == ["First"]

    def test_private_fields_hidden_from_unassigned_users(self, client, posted_job, employer, seeker):
        url = f"/api/jobs/{posted_job['id']}"

        as_poster = client.get(url, headers=employer["headers"]).json()
        as_seeker = client.get(url, headers=seeker["headers"]).json()
        anonymous = client.get(url).json()

        assert as_poster["private_details"] == "Apartment 4B, buzz twice"
        assert as_poster["private_image_urls"] == ["https://img.example.com/sofa.jpg"]
        assert as_seeker["private_details"] is None
        assert anonymous["private_details"] is None

    def test_assigned_worker_sees_assignment_details(self, client, posted_job, employer, seeker):
        client.post(
            f"/api/jobs/{posted_job['id']}/assign",
            json=assign_body(seeker["id"]),
            headers=employer["headers"],
        )

        detail = client.get(f"/api/jobs/{posted_job['id']}", headers=seeker["headers"]).json()

        assert detail["assigned_location_for_user"] == "221B Baker St"
        assert detail["assigned_details_for_user"] == "Ring the bell twice"
        assert detail["private_details"] == "Apartment 4B, buzz twice"
        assert detail["has_any_assignment"] is True

    def test_missing_job_is_404(self, client):
        response = client.get("/api/jobs/424242")

        assert response.status_code == 404
        assert response.json()["message"] == "Job not found or deleted."

    def test_non_numeric_job_id_is_400(self, client):
        assert client.get("/api/jobs/abc").status_code == 400


class TestInterestRoutes:
    def test_express_and_withdraw(self, client, posted_job, seeker):
        url = f"/api/jobs/{posted_job['id']}/interest"

        first = client.post(url, headers=seeker["headers"])
        assert first.status_code == 200
        assert first.json()["interestedCount"] == 1
        assert first.json()["isInterested"] is True
        assert first.json()["jobId"] == posted_job["id"]

        duplicate = client.post(url, headers=seeker["headers"])
        assert duplicate.status_code == 409

        withdrawn = client.delete(url, headers=seeker["headers"])
        assert withdrawn.status_code == 200
        assert withdrawn.json()["interestedCount"] == 0
        assert withdrawn.json()["isInterested"] is False

        again = client.delete(url, headers=seeker["headers"])
        assert again.status_code == 404

    def test_interest_requires_token(self, client, posted_job):
        response = client.post(f"/api/jobs/{posted_job['id']}/interest")
        assert response.status_code == 401

    def test_interested_users_for_poster(self, client, posted_job, employer, seeker):
        client.post(f"/api/jobs/{posted_job['id']}/interest", headers=seeker["headers"])
        client.post(
            f"/api/jobs/{posted_job['id']}/assign",
            json=assign_body(seeker["id"]),
            headers=employer["headers"],
        )

        response = client.get(
            f"/api/jobs/{posted_job['id']}/interested-users",
            headers=employer["headers"],
        )

        assert response.status_code == 200
        users = response.json()
        assert len(users) == 1
        assert users[0]["id"] == seeker["id"]
        assert users[0]["application_status"] == "assigned"
        assert users[0]["total_ratings_count"] == 0

    def test_interested_users_forbidden_for_others(self, client, posted_job, seeker):
        response = client.get(
            f"/api/jobs/{posted_job['id']}/interested-users",
            headers=seeker["headers"],
        )
        assert response.status_code == 403


class TestAssignmentRoutes:
    def test_assign_and_unassign(self, client, posted_job, employer, seeker):
        job_id = posted_job["id"]

        assigned = client.post(
            f"/api/jobs/{job_id}/assign",
            json=assign_body(seeker["id"]),
            headers=employer["headers"],
        )
        assert assigned.status_code == 200
        body = assigned.json()
        assert body["assignment"]["status"] == "assigned"
        assert body["assignment"]["applicant_user_id"] == seeker["id"]
        assert body["jobStatus"] == "assigned"

        unassigned = client.delete(f"/api/jobs/{job_id}/assign/{seeker['id']}", headers=employer["headers"])
        assert unassigned.status_code == 200
        assert unassigned.json()["jobId"] == job_id
        assert unassigned.json()["unassignedUserId"] == seeker["id"]
        assert unassigned.json()["jobStatus"] == "open"

    def test_assign_missing_details_is_400(self, client, posted_job, employer, seeker):
        response = client.post(
            f"/api/jobs/{posted_job['id']}/assign",
            json={"assigned_user_id": seeker["id"], "assigned_location": "Somewhere"},
            headers=employer["headers"],
        )
        assert response.status_code == 400

    def test_assign_by_non_poster_is_403(self, client, posted_job, seeker):
        response = client.post(
            f"/api/jobs/{posted_job['id']}/assign",
            json=assign_body(seeker["id"]),
            headers=seeker["headers"],
        )
        assert response.status_code == 403

    def test_worker_can_cancel_own_assignment(self, client, posted_job, employer, seeker):
        job_id = posted_job["id"]
        client.post(f"/api/jobs/{job_id}/assign", json=assign_body(seeker["id"]), headers=employer["headers"])

        response = client.delete(f"/api/jobs/{job_id}/assign/{seeker['id']}", headers=seeker["headers"])
        assert response.status_code == 200

    def test_stranger_cannot_unassign(self, client, posted_job, employer, seeker):
        stranger = register(client, "Stan Stranger", "stan@example.com")
        job_id = posted_job["id"]
        client.post(f"/api/jobs/{job_id}/assign", json=assign_body(seeker["id"]), headers=employer["headers"])

        response = client.delete(f"/api/jobs/{job_id}/assign/{seeker['id']}", headers=stranger["headers"])
        assert response.status_code == 403

    def test_unassign_without_assignment_is_404(self, client, posted_job, employer, seeker):
        response = client.delete(
            f"/api/jobs/{posted_job['id']}/assign/{seeker['id']}",
            headers=employer["headers"],
        )
        assert response.status_code == 404


class TestFilledAndDeleteRoutes:
    def test_mark_filled_undo_cycle(self, client, posted_job, employer, seeker):
        job_id = posted_job["id"]
        client.post(f"/api/jobs/{job_id}/assign", json=assign_body(seeker["id"]), headers=employer["headers"])

        filled = client.put(f"/api/jobs/{job_id}/mark-filled", headers=employer["headers"])
        assert filled.status_code == 200
        assert filled.json()["job"] == {"id": job_id, "status": "filled"}

        blocked_assign = client.post(
            f"/api/jobs/{job_id}/assign",
            json=assign_body(seeker["id"]),
            headers=employer["headers"],
        )
        assert blocked_assign.status_code == 400
        assert "already filled" in blocked_assign.json()["message"]

        blocked_delete = client.delete(f"/api/jobs/{job_id}", headers=employer["headers"])
        assert blocked_delete.status_code == 400

        undone = client.put(f"/api/jobs/{job_id}/undo-filled", headers=employer["headers"])
        assert undone.status_code == 200
        assert undone.json()["job"]["status"] == "assigned"

    def test_undo_when_not_filled_is_400(self, client, posted_job, employer):
        response = client.put(f"/api/jobs/{posted_job['id']}/undo-filled", headers=employer["headers"])
        assert response.status_code == 400

    def test_mark_filled_by_non_poster_is_403(self, client, posted_job, seeker):
        response = client.put(f"/api/jobs/{posted_job['id']}/mark-filled", headers=seeker["headers"])
        assert response.status_code == 403

    def test_mark_filled_missing_job_is_404(self, client, employer):
        response = client.put("/api/jobs/999/mark-filled", headers=employer["headers"])
        assert response.status_code == 404

    def test_soft_delete_hides_job(self, client, posted_job, employer):
        job_id = posted_job["id"]

        deleted = client.delete(f"/api/jobs/{job_id}", headers=employer["headers"])
        assert deleted.status_code == 200
        assert deleted.json()["job"]["id"] == job_id
        assert deleted.json()["job"]["deleted_at"] is not None

        assert client.get("/api/jobs").json()["total"] == 0
        assert client.get(f"/api/jobs/{job_id}").status_code == 404
        assert client.delete(f"/api/jobs/{job_id}", headers=employer["headers"]).status_code == 404

    def test_soft_delete_by_non_poster_is_403(self, client, posted_job, seeker):
        response = client.delete(f"/api/jobs/{posted_job['id']}", headers=seeker["headers"])
        assert response.status_code == 403


class TestErrorEnvelope:
    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json()["status"] == "fail"
        assert "/api/nowhere" in response.json()["message"]

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_internal_error_hides_details(self, client, posted_job, employer, seeker):
        with patch(
            "hirely.services.lifecycle.assign",
            side_effect=InternalError("UNIQUE constraint failed: job_applications"),
        ):
            response = client.post(
                f"/api/jobs/{posted_job['id']}/assign",
                json=assign_body(seeker["id"]),
                headers=employer["headers"],
            )

        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "Something went wrong on the server!"}
