import pytest

PICK = {
    "category": "movie",
    "title": "Paterson",
    "creator": "Jim Jarmusch",
    "period_label": "2025 Spring",
    "external_link": "https://example.com/paterson",
}


@pytest.fixture()
def pick(client, auth_headers, teacher):
    return client.post("/api/v1/culture-picks", json=PICK, headers=auth_headers(teacher)).json()["data"]


@pytest.fixture()
def classroom(make_class, teacher, student):
    return make_class("Directing A", teachers=[teacher], students=[student])


# ==================== CULTURE PICKS ====================


def test_create_pick_validation(client, auth_headers, teacher, student):
    bad_link = dict(PICK, external_link="ftp://example.com")
    assert client.post("/api/v1/culture-picks", json=bad_link, headers=auth_headers(teacher)).status_code == 422

    blank_title = dict(PICK, title="   ")
    assert client.post("/api/v1/culture-picks", json=blank_title, headers=auth_headers(teacher)).status_code == 422

    assert client.post("/api/v1/culture-picks", json=PICK, headers=auth_headers(student)).status_code == 403


def test_reviews_are_one_per_user(client, auth_headers, student, manager, pick):
    url = f"/api/v1/culture-picks/{pick['id']}/reviews"
    first = client.put(url, json={"rating": 4, "comment": "Quiet and lovely"}, headers=auth_headers(student)).json()
    second = client.put(url, json={"rating": 5}, headers=auth_headers(student)).json()
    assert first["data"]["id"] == second["data"]["id"]
    assert second["data"]["comment"] is None

    client.put(url, json={"rating": 2}, headers=auth_headers(manager))

    listing = client.get("/api/v1/culture-picks?category=movie", headers=auth_headers(student)).json()
    assert listing["data"][0]["review_count"] == 2
    assert listing["data"][0]["average_rating"] == 3.5

    assert client.put(url, json={"rating": 6}, headers=auth_headers(student)).status_code == 422

    deleted = client.delete(url, headers=auth_headers(student)).json()
    assert deleted["success"] is True
    assert client.delete(url, headers=auth_headers(student)).json()["success"] is False


def test_pick_listing_filters(client, auth_headers, teacher, pick):
    headers = auth_headers(teacher)
    client.post("/api/v1/culture-picks", json=dict(PICK, category="book", title="Stoner"), headers=headers)

    books = client.get("/api/v1/culture-picks?category=book", headers=headers).json()
    assert [item["pick"]["title"] for item in books["data"]] == ["Stoner"]
    assert books["data"][0]["average_rating"] is None

    autumn = client.get("/api/v1/culture-picks?period_label=2025 Autumn", headers=headers).json()
    assert autumn["data"] == []


def test_review_likes_and_threaded_comments(client, auth_headers, teacher, student, pick):
    review = client.put(
        f"/api/v1/culture-picks/{pick['id']}/reviews", json={"rating": 5}, headers=auth_headers(student)
    ).json()["data"]

    liked = client.post(f"/api/v1/culture-picks/reviews/{review['id']}/like", headers=auth_headers(teacher)).json()
    assert liked["data"] == {"liked": True, "like_count": 1}
    unliked = client.post(f"/api/v1/culture-picks/reviews/{review['id']}/like", headers=auth_headers(teacher)).json()
    assert unliked["data"] == {"liked": False, "like_count": 0}

    comments_url = f"/api/v1/culture-picks/reviews/{review['id']}/comments"
    parent = client.post(comments_url, json={"body": "Agreed!"}, headers=auth_headers(teacher)).json()["data"]
    reply = client.post(
        comments_url, json={"body": "Thanks", "parent_id": parent["id"]}, headers=auth_headers(student)
    ).json()
    assert reply["data"]["parent_id"] == parent["id"]

    detail = client.get(f"/api/v1/culture-picks/{pick['id']}", headers=auth_headers(student)).json()
    assert len(detail["data"]["reviews"][0]["comments"]) == 2
    assert detail["data"]["reviews"][0]["liked_by_me"] is False


def test_reply_parent_must_belong_to_review(client, auth_headers, teacher, student, manager, pick):
    url = f"/api/v1/culture-picks/{pick['id']}/reviews"
    first = client.put(url, json={"rating": 5}, headers=auth_headers(student)).json()["data"]
    second = client.put(url, json={"rating": 3}, headers=auth_headers(manager)).json()["data"]

    parent = client.post(
        f"/api/v1/culture-picks/reviews/{first['id']}/comments", json={"body": "Nice"}, headers=auth_headers(teacher)
    ).json()["data"]
    misplaced = client.post(
        f"/api/v1/culture-picks/reviews/{second['id']}/comments",
        json={"body": "Reply", "parent_id": parent["id"]},
        headers=auth_headers(teacher),
    ).json()
    assert misplaced["message"] == "Parent comment not found"


def test_review_comment_edit_and_delete(client, auth_headers, teacher, student, manager, pick):
    review = client.put(
        f"/api/v1/culture-picks/{pick['id']}/reviews", json={"rating": 4}, headers=auth_headers(student)
    ).json()["data"]
    comment = client.post(
        f"/api/v1/culture-picks/reviews/{review['id']}/comments", json={"body": "Typo"}, headers=auth_headers(student)
    ).json()["data"]
    url = f"/api/v1/culture-picks/comments/{comment['id']}"

    assert client.patch(url, json={"body": "Hijack"}, headers=auth_headers(teacher)).json()["success"] is False
    edited = client.patch(url, json={"body": "Fixed"}, headers=auth_headers(student)).json()
    assert edited["data"]["body"] == "Fixed"

    assert client.delete(url, headers=auth_headers(teacher)).json()["success"] is False
    assert client.delete(url, headers=auth_headers(manager)).json()["success"] is True


def test_pick_ownership(client, auth_headers, make_profile, manager, pick):
    colleague = make_profile("teacher", name="Teacher Jung")
    url = f"/api/v1/culture-picks/{pick['id']}"

    assert client.patch(url, json={"title": "Mine"}, headers=auth_headers(colleague)).json()["success"] is False
    assert client.patch(url, json={"creator": "  "}, headers=auth_headers(manager)).json()["success"] is False
    assert client.patch(url, json={}, headers=auth_headers(manager)).json()["success"] is False

    updated = client.patch(url, json={"description": " A bus driver writes poems "}, headers=auth_headers(manager)).json()
    assert updated["data"]["description"] == "A bus driver writes poems"

    assert client.delete(url, headers=auth_headers(colleague)).json()["success"] is False
    assert client.delete(url, headers=auth_headers(manager)).json()["success"] is True


# ==================== PHOTO DIARY ====================


def _post_photos(client, headers, classroom, paths=("diary/shoot-1.jpg",)):
    return client.post(
        "/api/v1/photo-diary",
        json={"class_id": str(classroom.id), "caption": "First shoot", "image_paths": list(paths)},
        headers=headers,
    ).json()


def test_photo_diary_post_rules(client, auth_headers, teacher, make_profile, classroom):
    posted = _post_photos(client, auth_headers(teacher), classroom)
    assert posted["success"] is True
    assert posted["data"]["image_paths"] == ["diary/shoot-1.jpg"]

    not_images = _post_photos(client, auth_headers(teacher), classroom, paths=("diary/notes.pdf",))
    assert not_images["message"] == "Only image files can be posted"

    blanks = _post_photos(client, auth_headers(teacher), classroom, paths=("  ",))
    assert blanks["message"] == "Add at least one photo"

    outsider = make_profile("teacher", name="Teacher Jung")
    assert _post_photos(client, auth_headers(outsider), classroom)["success"] is False


def test_photo_diary_class_members_interact(client, auth_headers, teacher, student, make_profile, classroom):
    entry = _post_photos(client, auth_headers(teacher), classroom)["data"]

    listing = client.get(f"/api/v1/photo-diary?class_id={classroom.id}", headers=auth_headers(student)).json()
    assert listing["data"][0]["like_count"] == 0

    liked = client.post(f"/api/v1/photo-diary/{entry['id']}/like", headers=auth_headers(student)).json()
    assert liked["data"] == {"liked": True, "like_count": 1}

    listing = client.get(f"/api/v1/photo-diary?class_id={classroom.id}", headers=auth_headers(student)).json()
    assert listing["data"][0]["liked_by_me"] is True

    comment = client.post(
        f"/api/v1/photo-diary/{entry['id']}/comments", json={"body": "Great shots"}, headers=auth_headers(student)
    ).json()
    assert comment["success"] is True

    outsider = make_profile("student", name="Student Han")
    assert client.get(
        f"/api/v1/photo-diary?class_id={classroom.id}", headers=auth_headers(outsider)
    ).json()["success"] is False
    assert client.post(
        f"/api/v1/photo-diary/{entry['id']}/like", headers=auth_headers(outsider)
    ).json()["success"] is False

    assert client.delete(
        f"/api/v1/photo-diary/comments/{comment['data']['id']}", headers=auth_headers(teacher)
    ).json()["success"] is False
    assert client.delete(
        f"/api/v1/photo-diary/comments/{comment['data']['id']}", headers=auth_headers(student)
    ).json()["success"] is True


def test_photo_diary_delete(client, auth_headers, teacher, manager, make_profile, classroom, db):
    from academy.models import ClassTeacher

    entry = _post_photos(client, auth_headers(teacher), classroom)["data"]
    colleague = make_profile("teacher", name="Teacher Jung")
    db.add(ClassTeacher(class_id=classroom.id, teacher_id=colleague.id))
    db.commit()

    assert client.delete(f"/api/v1/photo-diary/{entry['id']}", headers=auth_headers(colleague)).json()["success"] is False
    assert client.delete(f"/api/v1/photo-diary/{entry['id']}", headers=auth_headers(manager)).json()["success"] is True


# ==================== ATELIER ====================


def test_atelier_posting(client, auth_headers, teacher, student, make_class, classroom):
    created = client.post(
        "/api/v1/atelier",
        json={"title": "Storyboard", "media_path": "atelier/board.png", "class_id": str(classroom.id)},
        headers=auth_headers(student),
    ).json()
    assert created["success"] is True
    assert created["data"]["is_hidden"] is False

    foreign = make_class("Screenwriting B")
    rejected = client.post(
        "/api/v1/atelier",
        json={"title": "Elsewhere", "class_id": str(foreign.id)},
        headers=auth_headers(student),
    ).json()
    assert rejected["success"] is False

    assert client.post("/api/v1/atelier", json={"title": "Staff post"}, headers=auth_headers(teacher)).status_code == 403


def test_atelier_hide_and_feature(client, auth_headers, teacher, student, make_profile):
    post = client.post("/api/v1/atelier", json={"title": "Poster"}, headers=auth_headers(student)).json()["data"]
    other = make_profile("student", name="Student Han")

    hidden = client.post(f"/api/v1/atelier/{post['id']}/hide", headers=auth_headers(teacher)).json()
    assert hidden["data"]["is_hidden"] is True

    assert client.get("/api/v1/atelier", headers=auth_headers(other)).json()["data"] == []
    assert len(client.get("/api/v1/atelier", headers=auth_headers(student)).json()["data"]) == 1
    assert len(client.get("/api/v1/atelier", headers=auth_headers(teacher)).json()["data"]) == 1

    client.post(f"/api/v1/atelier/{post['id']}/hide", headers=auth_headers(teacher))
    featured = client.post(f"/api/v1/atelier/{post['id']}/feature", headers=auth_headers(teacher)).json()
    assert featured["data"]["is_featured"] is True

    listing = client.get("/api/v1/atelier?featured=true", headers=auth_headers(other)).json()
    assert [p["title"] for p in listing["data"]] == ["Poster"]

    assert client.post(f"/api/v1/atelier/{post['id']}/hide", headers=auth_headers(student)).status_code == 403


def test_atelier_delete(client, auth_headers, teacher, student, make_profile):
    post = client.post("/api/v1/atelier", json={"title": "Poster"}, headers=auth_headers(student)).json()["data"]
    other = make_profile("student", name="Student Han")

    assert client.delete(f"/api/v1/atelier/{post['id']}", headers=auth_headers(other)).json()["success"] is False
    assert client.delete(f"/api/v1/atelier/{post['id']}", headers=auth_headers(teacher)).json()["success"] is True
