import pytest

from sitecms.config import settings
from sitecms.posts.models import Post
from sitecms.posts.service import slugify
from sitecms.topics.models import Topic


@pytest.fixture()
async def topic(db, make_user):
    user, _ = await make_user("alice")
    topic = Topic(name="Python", description="All things Python", image="https://media.test/t.png", user_id=user.id)
    db.add(topic)
    await db.commit()
    return topic


async def seed_posts(db, topic, titles, content="body"):
    posts = [
        Post(title=t, slug=slugify(t), content=content, image="https://media.test/p.png", topic_id=topic.id)
        for t in titles
    ]
    db.add_all(posts)
    await db.commit()
    return posts


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Hello World!", "hello-world"),
        ("  Async   IO in  Python 3.12 ", "async-io-in-python-312"),
        ("C'est déjà l'été", "cest-dj-lt"),
        ("already-a-slug", "already-a-slug"),
    ],
)
def test_slugify(title, expected):
    assert slugify(title) == expected


def test_slugify_is_deterministic():
    assert slugify("Hello World!") == slugify("Hello World!")


async def test_create_post_derives_slug(client, make_user, topic, uploader, image_file):
    _, headers = await make_user("bob")

    resp = await client.post(
        "/api/v1/posts",
        data={"title": "Hello World!", "content": "first post", "topicId": str(topic.id), "slug": "ignored"},
        files=image_file(),
        headers=headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["slug"] == "hello-world"
    assert body["topicId"] == topic.id
    assert body["topicName"] == "Python"
    assert len(uploader.uploads) == 1


async def test_create_post_missing_fields(client, make_user, topic, uploader, image_file):
    _, headers = await make_user("bob")
    resp = await client.post(
        "/api/v1/posts",
        data={"title": "Hello", "topicId": str(topic.id)},
        files=image_file(),
        headers=headers,
    )
    assert resp.status_code == 400
    assert uploader.uploads == []


async def test_title_without_slug_characters_is_rejected(client, make_user, topic, uploader, image_file):
    _, headers = await make_user("bob")
    resp = await client.post(
        "/api/v1/posts",
        data={"title": "!!!", "content": "x", "topicId": str(topic.id)},
        files=image_file(),
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "All fields are required"
    assert uploader.uploads == []


async def test_create_post_for_unknown_topic(client, make_user, uploader, image_file):
    _, headers = await make_user("alice")
    resp = await client.post(
        "/api/v1/posts",
        data={"title": "Hello", "content": "x", "topicId": "999"},
        files=image_file(),
        headers=headers,
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Topic not found"
    assert uploader.uploads == []


async def test_create_post_non_numeric_topic(client, make_user, uploader, image_file):
    _, headers = await make_user("alice")
    resp = await client.post(
        "/api/v1/posts",
        data={"title": "Hello", "content": "x", "topicId": "abc"},
        files=image_file(),
        headers=headers,
    )
    assert resp.status_code == 400
    assert uploader.uploads == []


async def test_oversized_post_image_rejected_before_upload(client, make_user, topic, uploader, image_file):
    _, headers = await make_user("bob")
    resp = await client.post(
        "/api/v1/posts",
        data={"title": "Hello", "content": "x", "topicId": str(topic.id)},
        files=image_file(size=settings.MAX_IMAGE_BYTES + 1),
        headers=headers,
    )
    assert resp.status_code == 400
    assert uploader.uploads == []


async def test_list_posts_page_two(client, db, topic):
    await seed_posts(db, topic, [f"Post {i}" for i in range(13)])

    body = (await client.get("/api/v1/posts", params={"page": "2"})).json()
    assert len(body["data"]) == 6
    assert body["totalPages"] == 3
    assert body["totalItems"] == 13
    assert body["data"][0]["topicName"] == "Python"


async def test_search_posts_title_or_content(client, db, topic):
    await seed_posts(db, topic, ["Learning ABC"])
    await seed_posts(db, topic, ["Unrelated"], content="mentions aBc somewhere")
    await seed_posts(db, topic, ["Nothing here"])

    body = (await client.get("/api/v1/posts", params={"search": "abc"})).json()
    assert body["totalItems"] == 2


async def test_topic_embeds_its_posts(client, db, topic):
    await seed_posts(db, topic, ["One", "Two"])

    body = (await client.get(f"/api/v1/topics/{topic.id}")).json()
    assert {p["slug"] for p in body["posts"]} == {"one", "two"}


async def test_get_post(client, db, topic):
    [post] = await seed_posts(db, topic, ["Hello World!"])
    resp = await client.get(f"/api/v1/posts/{post.id}")
    assert resp.status_code == 200
    assert resp.json()["slug"] == "hello-world"


async def test_get_missing_post(client):
    resp = await client.get("/api/v1/posts/12345")
    assert resp.status_code == 404


async def test_update_post_rederives_slug(client, db, make_user, topic, uploader):
    [post] = await seed_posts(db, topic, ["Old Title"])
    _, headers = await make_user("bob")

    resp = await client.put(
        f"/api/v1/posts/{post.id}",
        data={"title": "Brand New Title", "content": "updated", "topicId": str(topic.id)},
        headers=headers,
    )
    # any signed-in user may edit a post
    assert resp.status_code == 200
    body = resp.json()
    assert body["slug"] == "brand-new-title"
    assert body["content"] == "updated"
    assert uploader.uploads == []


async def test_update_post_to_title_without_slug_characters(client, db, make_user, topic):
    [post] = await seed_posts(db, topic, ["Keep Me"])
    _, headers = await make_user("bob")

    resp = await client.put(
        f"/api/v1/posts/{post.id}",
        data={"title": "?!", "content": "y", "topicId": str(topic.id)},
        headers=headers,
    )
    assert resp.status_code == 400
    assert (await client.get(f"/api/v1/posts/{post.id}")).json()["slug"] == "keep-me"


async def test_update_post_with_new_image_destroys_old(client, make_user, topic, uploader, image_file):
    _, headers = await make_user("bob")
    created = (await client.post(
        "/api/v1/posts",
        data={"title": "Hello", "content": "x", "topicId": str(topic.id)},
        files=image_file(),
        headers=headers,
    )).json()

    resp = await client.put(
        f"/api/v1/posts/{created['id']}",
        data={"title": "Hello", "content": "y", "topicId": str(topic.id)},
        files=image_file(),
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["image"].endswith("img2.png")
    assert uploader.destroyed == ["siteassets/img1"]


async def test_update_post_strict_ownership(client, db, make_user, topic, monkeypatch):
    monkeypatch.setattr(settings, "STRICT_OWNERSHIP", True)
    [post] = await seed_posts(db, topic, ["Mine"])
    _, bob_headers = await make_user("bob")

    resp = await client.put(
        f"/api/v1/posts/{post.id}",
        data={"title": "Theirs", "content": "x", "topicId": str(topic.id)},
        headers=bob_headers,
    )
    assert resp.status_code == 404


async def test_delete_post(client, db, make_user, topic):
    [post] = await seed_posts(db, topic, ["Bye"])
    _, headers = await make_user("bob")

    resp = await client.delete(f"/api/v1/posts/{post.id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Post deleted successfully"}


async def test_delete_missing_post_is_404(client, make_user):
    _, headers = await make_user("alice")
    resp = await client.delete("/api/v1/posts/999", headers=headers)
    assert resp.status_code == 404
