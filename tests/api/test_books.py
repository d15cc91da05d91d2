"""
Tests for the books endpoints.
"""

import pytest


@pytest.fixture
def created_book(client, user_headers, book_payload):
    response = client.post("/api/books", json=book_payload, headers=user_headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestReadBooks:
    """Anonymous read access."""

    def test_list_empty(self, client):
        response = client.get("/api/books")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_returns_created_books_in_order(self, client, user_headers, book_payload):
        for title in ("Dune", "Dune Messiah", "Children of Dune"):
            payload = {**book_payload, "title": title}
            assert client.post("/api/books", json=payload, headers=user_headers).status_code == 201

        response = client.get("/api/books")
        assert response.status_code == 200
        assert [book["title"] for book in response.json()] == ["Dune", "Dune Messiah", "Children of Dune"]

    def test_get_by_id_includes_author(self, client, created_book, created_author):
        response = client.get(f"/api/books/{created_book['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["author"]["id"] == created_author["id"]
        assert data["author"]["lastname"] == "Herbert"

    def test_get_missing_book_is_404_with_empty_body(self, client):
        response = client.get("/api/books/999")
        assert response.status_code == 404
        assert response.content == b""


class TestCreateBook:
    """POST /api/books."""

    def test_create_requires_token(self, client, book_payload):
        response = client.post("/api/books", json=book_payload)
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_create_rejects_garbage_token(self, client, book_payload):
        response = client.post("/api/books", json=book_payload,
                               headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_created_book_round_trips(self, client, user_headers, book_payload):
        response = client.post("/api/books", json=book_payload, headers=user_headers)
        assert response.status_code == 201
        created = response.json()
        assert created["id"] > 0
        assert response.headers["Location"] == f"/api/books/{created['id']}"

        fetched = client.get(f"/api/books/{created['id']}").json()
        for field, value in book_payload.items():
            assert fetched[field] == value

    def test_missing_body_is_400(self, client, user_headers):
        response = client.post("/api/books", headers=user_headers)
        assert response.status_code == 400

    def test_missing_required_fields_is_400(self, client, user_headers, book_payload):
        payload = {key: value for key, value in book_payload.items() if key != "isbn"}
        response = client.post("/api/books", json=payload, headers=user_headers)
        assert response.status_code == 400
        data = response.json()
        assert data["status_code"] == 400
        assert any(error["loc"][-1] == "isbn" for error in data["detail"])

    def test_title_too_long_is_400(self, client, user_headers, book_payload):
        payload = {**book_payload, "title": "x" * 51}
        response = client.post("/api/books", json=payload, headers=user_headers)
        assert response.status_code == 400

    def test_unknown_author_is_500(self, client, user_headers, book_payload):
        payload = {**book_payload, "author_id": 4242}
        response = client.post("/api/books", json=payload, headers=user_headers)
        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Books - Create: Book create failed"
        assert "IntegrityError" not in response.text


class TestUpdateBook:
    """PATCH /api/books/{id}."""

    def test_update_replaces_fields(self, client, user_headers, created_book, book_payload):
        payload = {**book_payload, "id": created_book["id"], "title": "Dune (Deluxe)", "price": 25.0}
        response = client.patch(f"/api/books/{created_book['id']}", json=payload, headers=user_headers)
        assert response.status_code == 204
        assert response.content == b""

        fetched = client.get(f"/api/books/{created_book['id']}").json()
        assert fetched["title"] == "Dune (Deluxe)"
        assert fetched["price"] == 25.0

    def test_update_with_mismatched_id_does_not_mutate(self, client, user_headers, created_book, book_payload):
        payload = {**book_payload, "id": created_book["id"] + 1, "title": "Changed"}
        response = client.patch(f"/api/books/{created_book['id']}", json=payload, headers=user_headers)
        assert response.status_code == 400

        fetched = client.get(f"/api/books/{created_book['id']}").json()
        assert fetched["title"] == "Dune"

    def test_update_with_zero_id_is_400(self, client, user_headers, book_payload):
        payload = {**book_payload, "id": 0}
        response = client.patch("/api/books/0", json=payload, headers=user_headers)
        assert response.status_code == 400

    def test_update_missing_book_is_400(self, client, user_headers, book_payload):
        payload = {**book_payload, "id": 77}
        response = client.patch("/api/books/77", json=payload, headers=user_headers)
        assert response.status_code == 400

    def test_update_invalid_body_is_400(self, client, user_headers, created_book):
        response = client.patch(f"/api/books/{created_book['id']}",
                                json={"id": created_book["id"]}, headers=user_headers)
        assert response.status_code == 400

    def test_update_requires_token(self, client, created_book, book_payload):
        payload = {**book_payload, "id": created_book["id"]}
        response = client.patch(f"/api/books/{created_book['id']}", json=payload)
        assert response.status_code == 401


class TestDeleteBook:
    """DELETE /api/books/{id}."""

    def test_delete_removes_book(self, client, user_headers, created_book):
        response = client.delete(f"/api/books/{created_book['id']}", headers=user_headers)
        assert response.status_code == 204
        assert client.get(f"/api/books/{created_book['id']}").status_code == 404

    def test_delete_missing_book_is_404(self, client, user_headers, created_book):
        response = client.delete("/api/books/999", headers=user_headers)
        assert response.status_code == 404
        assert len(client.get("/api/books").json()) == 1

    @pytest.mark.parametrize("book_id", [0, -3])
    def test_delete_non_positive_id_is_400(self, client, user_headers, created_book, book_id):
        response = client.delete(f"/api/books/{book_id}", headers=user_headers)
        assert response.status_code == 400
        assert len(client.get("/api/books").json()) == 1

    def test_delete_requires_token(self, client, created_book):
        response = client.delete(f"/api/books/{created_book['id']}")
        assert response.status_code == 401


def test_dune_lifecycle(client, user_headers, book_payload):
    """Create, read, reject a bad update, delete, then confirm the book is gone."""
    response = client.post("/api/books", json=book_payload, headers=user_headers)
    assert response.status_code == 201
    new_id = response.json()["id"]

    response = client.get(f"/api/books/{new_id}")
    assert response.status_code == 200
    assert response.json()["title"] == "Dune"

    response = client.patch("/api/books/0", json={**book_payload, "id": 0}, headers=user_headers)
    assert response.status_code == 400

    response = client.delete(f"/api/books/{new_id}", headers=user_headers)
    assert response.status_code == 204

    response = client.get(f"/api/books/{new_id}")
    assert response.status_code == 404
