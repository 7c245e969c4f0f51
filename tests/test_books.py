"""Tests for the book catalog, authors and topics endpoints."""

from __future__ import annotations


def test_anonymous_catalog_access_is_unauthorized(client):
    response = client.get("/api/books")

    assert response.status_code == 401
    assert response.json() == {
        "error": {"message": "You must be logged in.", "status": 401}
    }


def test_admin_creates_book_with_sorted_authors_and_topics(make_book):
    book = make_book(
        "The Silmarillion",
        authors=["J.R.R. Tolkien", "Christopher Tolkien"],
        topics=["Mythology", "Fantasy"],
        yearPublished=1977,
    )

    assert book["title"] == "The Silmarillion"
    assert book["year_published"] == 1977
    assert book["authors"] == ["Christopher Tolkien", "J.R.R. Tolkien"]
    assert book["topics"] == ["Fantasy", "Mythology"]
    assert book["average_rating"] == "No reviews"
    assert book["groups"] == []


def test_non_admin_cannot_create_book(client, make_user):
    reader = make_user("reader")

    response = client.post(
        "/api/books",
        json={"title": "Bootleg", "authors": [], "topics": []},
        headers=reader.headers,
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Admins only."


def test_authors_are_reused_case_insensitively(client, make_book, admin):
    make_book("The Hobbit", authors=["J.R.R. Tolkien"])
    make_book("The Two Towers", authors=["j.r.r. tolkien"])

    authors = client.get("/api/authors", headers=admin.headers).json()

    assert [author["name"] for author in authors] == ["J.R.R. Tolkien"]


def test_list_books_paginates_by_title(client, make_book, make_user):
    reader = make_user("reader")
    for title in ("Mistborn", "Dune", "Eragon"):
        make_book(title, authors=["Somebody"], topics=["Fantasy"])

    first = client.get("/api/books?page=1&limit=2", headers=reader.headers).json()
    second = client.get("/api/books?page=2&limit=2", headers=reader.headers).json()

    assert first["totalBooks"] == 3
    assert [book["title"] for book in first["books"]] == ["Dune", "Eragon"]
    assert [book["title"] for book in second["books"]] == ["Mistborn"]


def test_list_books_rejects_invalid_page(client, make_user):
    reader = make_user("reader")

    response = client.get("/api/books?page=0", headers=reader.headers)

    assert response.status_code == 400


def test_search_books_by_author_and_topic(client, make_book, make_user):
    reader = make_user("reader")
    make_book("The Hobbit", authors=["J.R.R. Tolkien"], topics=["Fantasy"])
    make_book("Dune", authors=["Frank Herbert"], topics=["Science Fiction"])

    by_author = client.get(
        "/api/books/search?author=herb", headers=reader.headers
    ).json()
    by_topic = client.get(
        "/api/books/search?topic=fant", headers=reader.headers
    ).json()

    assert [book["title"] for book in by_author["books"]] == ["Dune"]
    assert by_author["totalBooks"] == 1
    assert [book["title"] for book in by_topic["books"]] == ["The Hobbit"]


def test_dynamic_search_needs_three_characters(client, make_book, make_user):
    reader = make_user("reader")
    make_book("The Hobbit")

    short = client.get("/api/books/search/dynamic?query=ho", headers=reader.headers)
    matched = client.get("/api/books/search/dynamic?query=hob", headers=reader.headers)
    by_author = client.get(
        "/api/books/search/dynamic?query=tolk", headers=reader.headers
    )

    assert short.json() == []
    assert [book["title"] for book in matched.json()] == ["The Hobbit"]
    assert by_author.json()[0]["authors"] == ["J.R.R. Tolkien"]


def test_book_detail_and_missing_book(client, make_book, make_user):
    reader = make_user("reader")
    book = make_book()

    found = client.get(f"/api/books/{book['id']}", headers=reader.headers)
    missing = client.get("/api/books/9999", headers=reader.headers)

    assert found.status_code == 200
    assert found.json()["title"] == "The Hobbit"
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Book not found."


def test_book_listing_reports_rating_and_group_count(
    client, make_book, make_user, make_group, make_discussion
):
    alice = make_user("alice")
    bob = make_user("bob")
    book = make_book()
    group = make_group(alice)
    make_discussion(alice, group["id"], book["id"])
    make_discussion(alice, group["id"], book["id"], title="Second thread")
    for account, rating in ((alice, 4), (bob, 5)):
        client.post(
            "/api/reviews",
            json={"bookId": book["id"], "rating": rating},
            headers=account.headers,
        )

    listing = client.get("/api/books", headers=alice.headers).json()
    detail = client.get(f"/api/books/{book['id']}", headers=alice.headers).json()

    (summary,) = listing["books"]
    assert summary["group_count"] == 1
    assert summary["average_rating"] == "4.5 of 2 reviews"
    assert detail["groups"] == [
        {"id": group["id"], "group_name": "Middle-earth Readers"}
    ]


def test_admin_deletes_book(client, make_book, make_user, admin):
    reader = make_user("reader")
    book = make_book()

    denied = client.delete(f"/api/books/{book['id']}", headers=reader.headers)
    deleted = client.delete(f"/api/books/{book['id']}", headers=admin.headers)
    missing = client.delete(f"/api/books/{book['id']}", headers=admin.headers)

    assert denied.status_code == 401
    assert deleted.json() == {"message": "Book deleted."}
    assert missing.status_code == 404
    assert client.get(f"/api/books/{book['id']}", headers=admin.headers).status_code == 404


def test_authors_details_and_search(client, make_book, admin):
    make_book("The Hobbit", authors=["J.R.R. Tolkien"], topics=["Fantasy"])
    make_book("Dune", authors=["Frank Herbert"], topics=["Science Fiction"])

    details = client.get("/api/authors/details", headers=admin.headers).json()
    search = client.get("/api/authors/search?name=tolk", headers=admin.headers)

    assert [entry["author_name"] for entry in details] == [
        "Frank Herbert",
        "J.R.R. Tolkien",
    ]
    assert search.status_code == 200
    (match,) = search.json()
    assert match["books"] == [
        {"id": match["books"][0]["id"], "title": "The Hobbit", "topics": ["Fantasy"]}
    ]


def test_author_search_requires_name_and_reports_no_match(client, make_book, admin):
    make_book()

    missing_name = client.get("/api/authors/search", headers=admin.headers)
    no_match = client.get("/api/authors/search?name=zzz", headers=admin.headers)

    assert missing_name.status_code == 400
    assert missing_name.json()["error"]["message"] == "Query parameter 'name' is required."
    assert no_match.status_code == 404


def test_empty_catalog_has_no_authors_or_topics(client, admin):
    assert client.get("/api/authors", headers=admin.headers).status_code == 404
    assert client.get("/api/topics", headers=admin.headers).status_code == 404


def test_topics_list_and_search(client, make_book, admin):
    make_book("The Hobbit", topics=["Fantasy", "Adventure"])

    topics = client.get("/api/topics", headers=admin.headers).json()
    search = client.get("/api/topics/search?name=advent", headers=admin.headers).json()

    assert [topic["name"] for topic in topics] == ["Adventure", "Fantasy"]
    assert search[0]["topic_name"] == "Adventure"
    assert search[0]["books"][0]["authors"] == ["J.R.R. Tolkien"]


def test_dynamic_search_wildcards_do_not_match_everything(client, make_book, make_user):
    reader = make_user("reader")
    make_book("The Hobbit")
    make_book("Dune", authors=["Frank Herbert"], topics=["Science Fiction"])

    percent = client.get(
        "/api/books/search/dynamic", params={"query": "%%%"}, headers=reader.headers
    )
    underscore = client.get(
        "/api/books/search/dynamic", params={"query": "___"}, headers=reader.headers
    )

    assert percent.json() == []
    assert underscore.json() == []


def test_search_filters_escape_like_wildcards(client, make_book, make_user):
    reader = make_user("reader")
    make_book("The Hobbit")
    make_book("100% Wolf", authors=["Jayne Lyons"], topics=["Humour"])

    by_title = client.get(
        "/api/books/search", params={"title": "%"}, headers=reader.headers
    ).json()
    by_author = client.get(
        "/api/authors/search", params={"name": "_"}, headers=reader.headers
    )
    by_topic = client.get(
        "/api/topics/search", params={"name": "%"}, headers=reader.headers
    )

    assert [book["title"] for book in by_title["books"]] == ["100% Wolf"]
    assert by_title["totalBooks"] == 1
    assert by_author.status_code == 404
    assert by_topic.status_code == 404
