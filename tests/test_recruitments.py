import pytest

from conftest import auth_headers, login


@pytest.fixture()
def chess(client, make_user):
    """alice administers Chess and has an open recruitment."""
    alice, headers = make_user("alice@school.edu", role="club_admin", clubName="Chess")
    resp = client.post(
        "/api/recruitments",
        json={"title": "Recruiter", "description": "We need players", "positions": 2},
        headers=headers,
    )
    assert resp.status_code == 200, resp.json()
    return {
        "alice": alice,
        "headers": headers,
        "club_id": alice["clubs"][0]["id"],
        "recruitment": resp.json()["recruitment"],
    }


def _apply(client, recruitment_id, headers=None, **fields):
    body = {"name": "Bob", "email": "bob@school.edu", "statement": "I love chess"}
    body.update(fields)
    return client.post(f"/api/recruitments/{recruitment_id}/apply", json=body, headers=headers or {})


def _review(client, chess, applicant_id, status, headers=None):
    rid = chess["recruitment"]["id"]
    return client.post(
        f"/api/recruitments/{rid}/applicants/{applicant_id}/review",
        json={"status": status},
        headers=headers or chess["headers"],
    )


def test_create_recruitment_defaults(chess):
    rec = chess["recruitment"]
    assert rec["open"] is True
    assert rec["positions"] == 2
    assert rec["club"]["name"] == "Chess"
    assert rec["applicantCount"] == 0
    assert rec["createdBy"] == chess["alice"]["id"]


def test_create_recruitment_requires_club_admin(client, make_user):
    club = client.post("/api/clubs", json={"name": "Drama"}).json()["club"]
    _, headers = make_user("bob@school.edu", joinClubId=club["id"])

    resp = client.post("/api/recruitments", json={"title": "x"}, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Only club admins can create recruitments"


def test_create_recruitment_requires_membership(client, chess):
    other = client.post("/api/clubs", json={"name": "Go"}).json()["club"]
    resp = client.post(
        "/api/recruitments",
        json={"title": "x", "club": other["id"]},
        headers=chess["headers"],
    )
    assert resp.status_code == 403
    assert resp.json()["message"] == "You are not a member of this club"


def test_create_recruitment_without_any_club(client, make_user):
    _, headers = make_user("bob@school.edu")
    resp = client.post("/api/recruitments", json={"title": "x"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Club required"


def test_create_recruitment_requires_title(client, chess):
    resp = client.post("/api/recruitments", json={"positions": 3}, headers=chess["headers"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Title required"


def test_create_recruitment_requires_auth(client):
    assert client.post("/api/recruitments", json={"title": "x"}).status_code == 401


def test_list_recruitments_newest_first_and_open_filter(client, chess):
    client.post("/api/recruitments", json={"title": "Closed one", "open": False}, headers=chess["headers"])
    client.post("/api/recruitments", json={"title": "Newest"}, headers=chess["headers"])

    all_recs = client.get("/api/recruitments").json()
    assert [r["title"] for r in all_recs] == ["Newest", "Closed one", "Recruiter"]
    assert all_recs == client.get("/api/recruitments").json()

    open_recs = client.get("/api/recruitments", params={"open": "true"}).json()
    assert [r["title"] for r in open_recs] == ["Newest", "Recruiter"]


def test_anonymous_application_and_acceptance_has_no_membership_effect(client, chess):
    resp = _apply(client, chess["recruitment"]["id"])
    assert resp.status_code == 200
    applicant_id = resp.json()["applicantId"]

    applicants = client.get(
        f"/api/recruitments/{chess['recruitment']['id']}/applicants", headers=chess["headers"]
    ).json()
    assert len(applicants) == 1
    assert applicants[0]["status"] == "pending"
    assert applicants[0]["userId"] is None

    reviewed = _review(client, chess, applicant_id, "accepted")
    assert reviewed.status_code == 200
    assert reviewed.json()["applicant"]["status"] == "accepted"
    assert reviewed.json()["applicant"]["userId"] is None


def test_identified_acceptance_adds_membership(client, chess, make_user):
    bob, bob_headers = make_user("bob@school.edu")
    resp = _apply(client, chess["recruitment"]["id"], headers=bob_headers)
    applicant_id = resp.json()["applicantId"]

    reviewed = _review(client, chess, applicant_id, "accepted")
    assert reviewed.json()["applicant"]["userId"] == bob["id"]

    me = client.get("/api/me", headers=bob_headers).json()
    assert [c["id"] for c in me["clubs"]] == [chess["club_id"]]


def test_acceptance_of_existing_member_does_not_duplicate(client, chess, make_user):
    _, bob_headers = make_user("bob@school.edu", joinClubId=chess["club_id"])
    applicant_id = _apply(client, chess["recruitment"]["id"], headers=bob_headers).json()["applicantId"]

    assert _review(client, chess, applicant_id, "accepted").status_code == 200
    assert len(client.get("/api/me", headers=bob_headers).json()["clubs"]) == 1


def test_rejection_leaves_membership_alone(client, chess, make_user):
    _, bob_headers = make_user("bob@school.edu")
    applicant_id = _apply(client, chess["recruitment"]["id"], headers=bob_headers).json()["applicantId"]

    reviewed = _review(client, chess, applicant_id, "rejected")
    assert reviewed.json()["applicant"]["status"] == "rejected"
    assert client.get("/api/me", headers=bob_headers).json()["clubs"] == []


def test_reviewed_applicant_is_terminal(client, chess):
    applicant_id = _apply(client, chess["recruitment"]["id"]).json()["applicantId"]
    _review(client, chess, applicant_id, "rejected")

    resp = _review(client, chess, applicant_id, "accepted")
    assert resp.status_code == 409
    assert resp.json()["message"] == "Applicant already reviewed"


def test_invalid_token_on_apply_is_treated_as_anonymous(client, chess):
    resp = _apply(client, chess["recruitment"]["id"], headers=auth_headers("garbage"))
    assert resp.status_code == 200

    applicants = client.get(
        f"/api/recruitments/{chess['recruitment']['id']}/applicants", headers=chess["headers"]
    ).json()
    assert applicants[0]["userId"] is None


def test_apply_validation(client, chess):
    rid = chess["recruitment"]["id"]
    missing = _apply(client, rid, name="")
    assert missing.status_code == 400
    assert missing.json()["message"] == "Name and email required"

    assert _apply(client, "nope").status_code == 404


def test_apply_to_closed_recruitment(client, chess):
    closed = client.post(
        "/api/recruitments", json={"title": "Closed", "open": False}, headers=chess["headers"]
    ).json()["recruitment"]
    resp = _apply(client, closed["id"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Recruitment is closed"


def test_applicants_visible_to_members_only(client, chess, make_user):
    rid = chess["recruitment"]["id"]
    _apply(client, rid)

    _, outsider = make_user("out@school.edu")
    resp = client.get(f"/api/recruitments/{rid}/applicants", headers=outsider)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Not authorized to view applicants"

    # plain members can look but not review
    _, member = make_user("member@school.edu", joinClubId=chess["club_id"])
    assert client.get(f"/api/recruitments/{rid}/applicants", headers=member).status_code == 200

    assert client.get(f"/api/recruitments/{rid}/applicants").status_code == 401


def test_review_requires_admin_of_the_club(client, chess, make_user):
    applicant_id = _apply(client, chess["recruitment"]["id"]).json()["applicantId"]

    _, member = make_user("member@school.edu", joinClubId=chess["club_id"])
    resp = _review(client, chess, applicant_id, "accepted", headers=member)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Only club admins can review applicants"

    _, other_admin = make_user("gina@school.edu", role="club_admin", clubName="Go")
    resp = _review(client, chess, applicant_id, "accepted", headers=other_admin)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Not authorized to review applicants"


def test_review_rejects_bad_status_and_unknown_applicant(client, chess):
    applicant_id = _apply(client, chess["recruitment"]["id"]).json()["applicantId"]

    resp = _review(client, chess, applicant_id, "maybe")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Bad status"

    resp = _review(client, chess, "unknown", "accepted")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid applicant"


def test_review_cannot_reach_applicant_of_another_recruitment(client, chess):
    other = client.post(
        "/api/recruitments", json={"title": "Other"}, headers=chess["headers"]
    ).json()["recruitment"]
    foreign_id = _apply(client, other["id"]).json()["applicantId"]

    resp = _review(client, chess, foreign_id, "accepted")
    assert resp.status_code == 400


def test_applicant_count_in_listing(client, chess):
    for i in range(3):
        _apply(client, chess["recruitment"]["id"], email=f"a{i}@school.edu")
    listed = client.get("/api/recruitments").json()[0]
    assert listed["applicantCount"] == 3
    assert "applicants" not in listed


def test_full_scenario_login_then_recruit(client):
    client.post(
        "/api/register",
        json={"name": "alice", "email": "alice@school.edu", "password": "pw", "role": "club_admin", "clubName": "Chess"},
    )
    token = login(client, "alice@school.edu", password="pw")["token"]
    resp = client.post(
        "/api/recruitments",
        json={"title": "Recruiter", "positions": 2},
        headers=auth_headers(token),
    )
    assert resp.status_code == 200
    assert resp.json()["recruitment"]["open"] is True


def test_bodyless_apply_reports_missing_recruitment_first(client, chess):
    assert client.post("/api/recruitments/nope/apply").status_code == 404

    resp = client.post(f"/api/recruitments/{chess['recruitment']['id']}/apply")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Name and email required"


def test_bodyless_review_is_bad_status(client, chess):
    applicant_id = _apply(client, chess["recruitment"]["id"]).json()["applicantId"]
    resp = client.post(f"/api/recruitments/{chess['recruitment']['id']}/applicants/{applicant_id}/review",
                       headers=chess["headers"])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Bad status"
