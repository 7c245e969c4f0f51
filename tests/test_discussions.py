"""Tests for discussion threads and who may read or change them."""

from __future__ import annotations

import pytest


@pytest.fixture
def setting(client, make_user, make_book, make_group):
    """A group owned by ``owner`` with ``member`` joined and ``outsider`` not."""

    owner = make_user("owner")
    member = make_user("member")
    other = make_user("other")
    outsider = make_user("outsider")
    book = make_book()
    group = make_group(owner)
    for account in (member, other):
        client.post(f"/api/groups/{group['id']}/join", headers=account.headers)
    return {
        "owner": owner,
        "member": member,
        "other": other,
        "outsider": outsider,
        "book": book,
        "group": group,
    }


def test_member_creates_and_reads_discussion(client, setting, make_discussion):
    member = setting["member"]
    group_id = setting["group"]["id"]

    created = make_discussion(member, group_id, setting["book"]["id"], title="Riddles")
    listed = client.get(f"/api/discussions/{group_id}", headers=member.headers)
    fetched = client.get(
        f"/api/discussions/detail/{created['id']}", headers=member.headers
    )

    assert created["user_id"] == member.id
    assert created["created_by"] == "member"
    assert created["book"]["title"] == "The Hobbit"
    assert created["book"]["authors"] == ["J.R.R. Tolkien"]
    assert [item["id"] for item in listed.json()] == [created["id"]]
    assert fetched.json() == created


def test_discussions_are_listed_newest_first(client, setting, make_discussion):
    member = setting["member"]
    group_id = setting["group"]["id"]
    first = make_discussion(member, group_id, setting["book"]["id"], title="One")
    second = make_discussion(member, group_id, setting["book"]["id"], title="Two")

    listed = client.get(f"/api/discussions/{group_id}", headers=member.headers).json()

    assert [item["id"] for item in listed] == [second["id"], first["id"]]


def test_group_creator_can_post_without_joining(setting, make_discussion):
    created = make_discussion(
        setting["owner"], setting["group"]["id"], setting["book"]["id"]
    )

    assert created["user_id"] == setting["owner"].id


def test_outsider_cannot_read_or_create(client, setting, make_discussion):
    outsider = setting["outsider"]
    group_id = setting["group"]["id"]
    discussion = make_discussion(setting["member"], group_id, setting["book"]["id"])

    listed = client.get(f"/api/discussions/{group_id}", headers=outsider.headers)
    fetched = client.get(
        f"/api/discussions/detail/{discussion['id']}", headers=outsider.headers
    )
    created = client.post(
        f"/api/discussions/{group_id}",
        json={"bookId": setting["book"]["id"], "title": "Hi", "content": "Let me in"},
        headers=outsider.headers,
    )

    assert listed.status_code == 401
    assert fetched.status_code == 401
    assert created.status_code == 401
    assert created.json()["error"]["message"] == (
        "You must be a group member to create discussions."
    )


def test_admin_reads_but_cannot_start_discussions(client, setting, admin, make_discussion):
    group_id = setting["group"]["id"]
    make_discussion(setting["member"], group_id, setting["book"]["id"])

    listed = client.get(f"/api/discussions/{group_id}", headers=admin.headers)
    created = client.post(
        f"/api/discussions/{group_id}",
        json={"bookId": setting["book"]["id"], "title": "Mod", "content": "Note"},
        headers=admin.headers,
    )

    assert listed.status_code == 200
    assert len(listed.json()) == 1
    assert created.status_code == 401


def test_missing_group_or_book_is_not_found(client, setting):
    member = setting["member"]
    group_id = setting["group"]["id"]

    no_group = client.get("/api/discussions/9999", headers=member.headers)
    no_book = client.post(
        f"/api/discussions/{group_id}",
        json={"bookId": 9999, "title": "Ghost", "content": "Boo"},
        headers=member.headers,
    )
    no_discussion = client.get("/api/discussions/detail/9999", headers=member.headers)

    assert no_group.status_code == 404
    assert no_group.json()["error"]["message"] == "Discussion group not found."
    assert no_book.status_code == 404
    assert no_discussion.status_code == 404


def test_author_and_group_creator_may_edit_but_other_members_may_not(
    client, setting, make_discussion
):
    discussion = make_discussion(
        setting["member"], setting["group"]["id"], setting["book"]["id"]
    )
    url = f"/api/discussions/{discussion['id']}"

    by_other = client.patch(url, json={"title": "Nope"}, headers=setting["other"].headers)
    by_author = client.patch(
        url, json={"title": "Edited"}, headers=setting["member"].headers
    )
    by_owner = client.patch(
        url, json={"content": "Moderated"}, headers=setting["owner"].headers
    )

    assert by_other.status_code == 401
    assert by_author.json()["title"] == "Edited"
    assert by_owner.json()["content"] == "Moderated"
    assert by_owner.json()["title"] == "Edited"


def test_update_discussion_needs_a_field(client, setting, make_discussion):
    discussion = make_discussion(
        setting["member"], setting["group"]["id"], setting["book"]["id"]
    )

    response = client.patch(
        f"/api/discussions/{discussion['id']}",
        json={},
        headers=setting["member"].headers,
    )

    assert response.status_code == 400


def test_delete_discussion_permissions(client, setting, admin, make_discussion):
    group_id = setting["group"]["id"]
    book_id = setting["book"]["id"]
    by_author = make_discussion(setting["member"], group_id, book_id, title="A")
    by_owner = make_discussion(setting["member"], group_id, book_id, title="B")
    by_admin = make_discussion(setting["member"], group_id, book_id, title="C")

    denied = client.delete(
        f"/api/discussions/{by_author['id']}", headers=setting["other"].headers
    )
    responses = [
        client.delete(f"/api/discussions/{by_author['id']}", headers=setting["member"].headers),
        client.delete(f"/api/discussions/{by_owner['id']}", headers=setting["owner"].headers),
        client.delete(f"/api/discussions/{by_admin['id']}", headers=admin.headers),
    ]

    assert denied.status_code == 401
    assert [response.json() for response in responses] == [
        {"message": "Discussion deleted."}
    ] * 3
    remaining = client.get(f"/api/discussions/{group_id}", headers=admin.headers)
    assert remaining.json() == []


def test_outsider_can_start_a_discussion_after_joining(client, setting):
    outsider = setting["outsider"]
    group_id = setting["group"]["id"]
    payload = {"bookId": setting["book"]["id"], "title": "New here", "content": "Hello"}

    before = client.post(
        f"/api/discussions/{group_id}", json=payload, headers=outsider.headers
    )
    client.post(f"/api/groups/{group_id}/join", headers=outsider.headers)
    after = client.post(
        f"/api/discussions/{group_id}", json=payload, headers=outsider.headers
    )

    assert before.status_code == 401
    assert after.status_code == 201
    assert after.json()["group_id"] == group_id
    assert after.json()["user_id"] == outsider.id
    assert after.json()["created_by"] == "outsider"


def test_group_creator_reads_discussions_without_joining(client, setting, make_discussion):
    owner = setting["owner"]
    group_id = setting["group"]["id"]
    discussion = make_discussion(setting["member"], group_id, setting["book"]["id"])

    status = client.get(f"/api/groups/{group_id}/is-member", headers=owner.headers)
    listed = client.get(f"/api/discussions/{group_id}", headers=owner.headers)
    fetched = client.get(
        f"/api/discussions/detail/{discussion['id']}", headers=owner.headers
    )

    assert status.json() == {"isMember": False}
    assert listed.status_code == 200
    assert [item["id"] for item in listed.json()] == [discussion["id"]]
    assert fetched.status_code == 200
    assert fetched.json()["group_id"] == group_id
