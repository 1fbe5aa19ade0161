"""
HTTP API tests for tags, votes, feedback and health.
"""


def _create_tag(client, name="noisy", session_id="S1"):
    response = client.post("/api/tags", json={"name": name, "sessionId": session_id})
    assert response.status_code == 201
    return response.json()


def test_health_reports_state(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "db_initialized": True, "connections": 0, "sessions": 0}


def test_create_tag_returns_zero_votes(client):
    tag = _create_tag(client)

    assert tag["name"] == "noisy"
    assert tag["sessionId"] == "S1"
    assert tag["votes"] == 0
    assert tag["_id"]
    assert tag["createdAt"]


def test_duplicate_tag_is_rejected(client):
    _create_tag(client)

    response = client.post("/api/tags", json={"name": "noisy", "sessionId": "S1"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Tag already exists"


def test_blank_tag_name_is_rejected(client):
    response = client.post("/api/tags", json={"name": "  ", "sessionId": "S1"})

    assert response.status_code == 400


def test_vote_and_list_by_coordinates(client):
    tag = _create_tag(client)
    body = {"tagId": tag["_id"], "sessionId": "S1", "lat": "10.0", "lng": "-20.0", "dir": "90", "action": "add"}

    first = client.put("/api/tags", json=body)
    second = client.put("/api/tags", json=body)

    assert first.status_code == 200
    assert first.json() == {
        "tagId": tag["_id"],
        "sessionId": "S1",
        "viewpointId": "10.0--20.0-90",
        "votes": 1,
        "action": "add",
    }
    assert second.json()["votes"] == 2

    listed = client.get("/api/tags", params={"sessionId": "S1", "lat": "10.0", "lng": "-20.0", "dir": "90"})
    assert [t["votes"] for t in listed.json()] == [2]

    other_view = client.get("/api/tags", params={"sessionId": "S1", "viewpointId": "1-2-3"})
    assert [t["votes"] for t in other_view.json()] == [0]


def test_remove_vote_never_goes_negative(client):
    tag = _create_tag(client)
    body = {"tagId": tag["_id"], "sessionId": "S1", "viewpointId": "v1", "action": "remove"}

    response = client.put("/api/tags", json=body)

    assert response.status_code == 200
    assert response.json()["votes"] == 0


def test_vote_on_unknown_tag_is_404(client):
    response = client.put(
        "/api/tags", json={"tagId": "missing", "sessionId": "S1", "viewpointId": "v1", "action": "add"}
    )

    assert response.status_code == 404


def test_vote_without_viewpoint_is_400(client):
    tag = _create_tag(client)

    response = client.put("/api/tags", json={"tagId": tag["_id"], "sessionId": "S1", "action": "add"})

    assert response.status_code == 400


def test_list_tags_with_partial_coordinates_is_400(client):
    response = client.get("/api/tags", params={"sessionId": "S1", "lat": "10.0"})

    assert response.status_code == 400


def test_submit_and_list_feedback(client):
    body = {"viewpointId": "10.0--20.0-90", "sessionId": "S1", "text": "nice", "tags": ["quiet"]}

    first = client.post("/api/feedback", json=body)
    second = client.post("/api/feedback", json={**body, "text": "again"})

    assert first.status_code == 200
    assert first.json()["success"] is True
    listed = client.get("/api/feedback", params={"viewpointId": "10.0--20.0-90", "sessionId": "S1"})
    assert [item["_id"] for item in listed.json()] == [second.json()["feedbackId"], first.json()["feedbackId"]]
    assert listed.json()[1]["tags"] == ["quiet"]

    other_session = client.get("/api/feedback", params={"viewpointId": "10.0--20.0-90", "sessionId": "S2"})
    assert other_session.json() == []


def test_feedback_requires_session(client):
    response = client.post("/api/feedback", json={"viewpointId": "v", "sessionId": " ", "text": "nice"})

    assert response.status_code == 400


def test_session_description_for_unknown_session(client):
    response = client.get("/api/sessions/S1")

    assert response.json() == {"sessionId": "S1", "clientCount": 0}
