"""Tests for review creation, editing and deletion rules."""

from __future__ import annotations

import pytest


@pytest.fixture
def book(make_book):
    return make_book()


def _post_review(client, account, book_id, rating=4, text="Loved it"):
    return client.post(
        "/api/reviews",
        json={"bookId": book_id, "rating": rating, "reviewText": text},
        headers=account.headers,
    )


def test_create_review_returns_joined_fields(client, make_user, book):
    alice = make_user("alice")

    response = _post_review(client, alice, book["id"])

    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == alice.id
    assert body["user_name"] == "alice"
    assert body["book_title"] == "The Hobbit"
    assert body["rating"] == 4
    assert body["review_text"] == "Loved it"


@pytest.mark.parametrize("rating", [0, 6])
def test_out_of_range_rating_is_rejected_without_a_row(client, make_user, book, rating):
    alice = make_user("alice")

    response = _post_review(client, alice, book["id"], rating=rating)

    assert response.status_code == 400
    assert client.get("/api/reviews", headers=alice.headers).json() == []


def test_review_for_unknown_book_is_not_found(client, make_user):
    alice = make_user("alice")

    response = _post_review(client, alice, 9999)

    assert response.status_code == 404


def test_second_review_of_same_book_conflicts(client, make_user, book):
    alice = make_user("alice")
    _post_review(client, alice, book["id"])

    response = _post_review(client, alice, book["id"], rating=2)

    assert response.status_code == 409
    assert response.json()["error"]["message"] == "You have already reviewed this book."


def test_reviews_are_listed_by_book_and_by_user(client, make_user, make_book):
    alice = make_user("alice")
    bob = make_user("bob")
    hobbit = make_book("The Hobbit")
    dune = make_book("Dune", authors=["Frank Herbert"], topics=["Science Fiction"])
    _post_review(client, alice, hobbit["id"])
    _post_review(client, bob, hobbit["id"], rating=5)
    _post_review(client, alice, dune["id"], rating=3)

    for_hobbit = client.get(f"/api/reviews/book/{hobbit['id']}", headers=bob.headers)
    by_alice = client.get(f"/api/reviews/user/{alice.id}", headers=bob.headers)
    everything = client.get("/api/reviews", headers=bob.headers)

    assert {review["user_name"] for review in for_hobbit.json()} == {"alice", "bob"}
    assert {review["book_title"] for review in by_alice.json()} == {"The Hobbit", "Dune"}
    assert len(everything.json()) == 3


def test_owner_updates_review(client, make_user, book):
    alice = make_user("alice")
    review = _post_review(client, alice, book["id"]).json()

    response = client.patch(
        f"/api/reviews/{review['id']}",
        json={"rating": 2, "reviewText": "Changed my mind"},
        headers=alice.headers,
    )

    assert response.status_code == 200
    assert response.json()["rating"] == 2
    assert response.json()["review_text"] == "Changed my mind"


def test_update_needs_a_field(client, make_user, book):
    alice = make_user("alice")
    review = _post_review(client, alice, book["id"]).json()

    response = client.patch(f"/api/reviews/{review['id']}", json={}, headers=alice.headers)

    assert response.status_code == 400


def test_admin_and_strangers_cannot_update_review(client, make_user, admin, book):
    alice = make_user("alice")
    bob = make_user("bob")
    review = _post_review(client, alice, book["id"]).json()

    by_admin = client.patch(
        f"/api/reviews/{review['id']}", json={"rating": 1}, headers=admin.headers
    )
    by_bob = client.patch(
        f"/api/reviews/{review['id']}", json={"rating": 1}, headers=bob.headers
    )

    assert by_admin.status_code == 401
    assert by_bob.status_code == 401


def test_update_missing_review_is_not_found(client, make_user):
    alice = make_user("alice")

    response = client.patch("/api/reviews/9999", json={"rating": 3}, headers=alice.headers)

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Review with ID 9999 not found."


def test_admin_deletes_someone_elses_review(client, make_user, admin, book):
    alice = make_user("alice")
    bob = make_user("bob")
    review = _post_review(client, alice, book["id"]).json()

    by_bob = client.delete(f"/api/reviews/{review['id']}", headers=bob.headers)
    by_admin = client.delete(f"/api/reviews/{review['id']}", headers=admin.headers)
    again = client.delete(f"/api/reviews/{review['id']}", headers=admin.headers)

    assert by_bob.status_code == 401
    assert by_admin.status_code == 200
    assert by_admin.json() == {"message": "Review deleted."}
    assert again.status_code == 404


def test_owner_deletes_own_review(client, make_user, book):
    alice = make_user("alice")
    review = _post_review(client, alice, book["id"]).json()

    response = client.delete(f"/api/reviews/{review['id']}", headers=alice.headers)

    assert response.status_code == 200


def test_boolean_rating_is_rejected(client, make_user, book):
    alice = make_user("alice")

    response = client.post(
        "/api/reviews",
        json={"bookId": book["id"], "rating": True},
        headers=alice.headers,
    )

    assert response.status_code == 400
    assert client.get("/api/reviews", headers=alice.headers).json() == []


def test_boolean_rating_update_is_rejected(client, make_user, book):
    alice = make_user("alice")
    review = _post_review(client, alice, book["id"], rating=4).json()

    response = client.patch(
        f"/api/reviews/{review['id']}", json={"rating": True}, headers=alice.headers
    )

    assert response.status_code == 400
    reviews = client.get(f"/api/reviews/user/{alice.id}", headers=alice.headers).json()
    assert reviews[0]["rating"] == 4
