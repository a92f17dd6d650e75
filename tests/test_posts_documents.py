def test_posts_and_comments(client, resident, coach):
    post = client.post(
        "/posts",
        json={"title": "Garden day", "content": "Who joins?", "authorId": resident["id"], "authorName": "Rita"},
    )
    assert post.status_code == 201
    post_id = post.json()["id"]
    assert post.json()["comments"] == []

    comment = client.post(
        f"/posts/{post_id}/comments",
        json={"content": "Count me in", "authorId": coach["id"], "authorName": "Chris"},
    )
    assert comment.status_code == 201
    assert comment.json()["postId"] == post_id

    listed = client.get("/posts").json()
    assert [c["content"] for c in listed[0]["comments"]] == ["Count me in"]


def test_comment_on_missing_post_is_404(client):
    response = client.post("/posts/missing/comments", json={"content": "?", "authorId": "a", "authorName": "A"})

    assert response.status_code == 404


def test_posts_fill_legacy_fields(client, store):
    store.write("posts", [{"id": "p", "title": "Old", "content": "-"}])

    post = client.get("/posts").json()[0]

    assert post["authorName"] == "System"
    assert post["comments"] == []


def test_documents(client):
    created = client.post(
        "/documents", json={"name": "House rules", "type": "pdf", "filePath": "/files/house-rules.pdf"}
    )
    assert created.status_code == 201
    document = created.json()
    assert document["description"] == ""

    assert client.get(f"/documents/{document['id']}").json()["name"] == "House rules"
    assert [d["id"] for d in client.get("/documents").json()] == [document["id"]]
    assert client.get("/documents/missing").status_code == 404
    assert client.post("/documents", json={"name": "No path", "type": "pdf"}).status_code == 422
