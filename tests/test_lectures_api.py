import pytest

from academy.schemas.lectures import youtube_video_id


@pytest.fixture()
def lecture(client, auth_headers, teacher):
    response = client.post(
        "/api/v1/lectures",
        json={
            "title": " Blocking basics ",
            "description": "Staging two actors in one frame",
            "youtube_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42",
        },
        headers=auth_headers(teacher),
    ).json()
    assert response["success"] is True
    return response["data"]


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/embed/dQw4w9WgXcQ?rel=0", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/watch?v=short", None),
        ("https://vimeo.com/12345", None),
    ],
)
def test_youtube_video_id(url, expected):
    assert youtube_video_id(url) == expected


def test_new_lecture_starts_unpublished(lecture):
    assert lecture["title"] == "Blocking basics"
    assert lecture["is_published"] is False
    assert lecture["video_id"] == "dQw4w9WgXcQ"


def test_invalid_link_is_rejected(client, auth_headers, teacher):
    response = client.post(
        "/api/v1/lectures",
        json={"title": "Broken", "youtube_url": "https://example.com/video"},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 422


def test_students_only_see_published(client, auth_headers, teacher, student, lecture):
    hidden = client.get("/api/v1/lectures", headers=auth_headers(student)).json()
    assert hidden["data"] == []
    detail = client.get(f"/api/v1/lectures/{lecture['id']}", headers=auth_headers(student)).json()
    assert detail["success"] is False

    published = client.patch(
        f"/api/v1/lectures/{lecture['id']}", json={"is_published": True}, headers=auth_headers(teacher)
    ).json()
    assert published["data"]["is_published"] is True

    visible = client.get("/api/v1/lectures", headers=auth_headers(student)).json()
    assert [item["title"] for item in visible["data"]] == ["Blocking basics"]


def test_students_cannot_create_lectures(client, auth_headers, student):
    response = client.post(
        "/api/v1/lectures",
        json={"title": "Mine", "youtube_url": "https://youtu.be/dQw4w9WgXcQ"},
        headers=auth_headers(student),
    )
    assert response.status_code == 403


def test_any_staff_can_edit_and_delete(client, auth_headers, manager, lecture):
    headers = auth_headers(manager)
    updated = client.patch(
        f"/api/v1/lectures/{lecture['id']}",
        json={"youtube_url": "https://youtu.be/9bZkp7q19f0"},
        headers=headers,
    ).json()
    assert updated["data"]["video_id"] == "9bZkp7q19f0"

    deleted = client.delete(f"/api/v1/lectures/{lecture['id']}", headers=headers).json()
    assert deleted["success"] is True
    listing = client.get("/api/v1/lectures", headers=headers).json()
    assert listing["data"] == []
