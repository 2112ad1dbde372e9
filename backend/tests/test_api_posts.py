"""Tests for posts API endpoints."""

import pytest
from datetime import timedelta
from app.core.timeutils import utcnow
from app.models.category import Category
from app.models.post import Post, PostStatus
from app.models.subcategory import Subcategory


def _future(hours=2):
    return (utcnow() + timedelta(hours=hours)).isoformat() + "Z"


@pytest.mark.unit
class TestCreatePost:
    """Test POST /api/posts/."""

    def test_create_published_post(self, authenticated_client, test_category, test_user):
        response = authenticated_client.post(
            "/api/posts/",
            json={
                "title": "  Evening Rain  ",
                "content": "A short poem about rain.",
                "language": "en",
                "categoryId": test_category.id,
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Post created successfully"
        post = data["post"]
        assert post["title"] == "Evening Rain"
        assert post["status"] == "published"
        assert post["isLead"] is False
        assert post["publishedAt"] is not None
        assert post["author"]["id"] == test_user.id
        assert post["category"]["name"] == "Creative"

    def test_create_requires_authentication(self, client, test_category):
        response = client.post(
            "/api/posts/",
            json={"title": "T", "content": "C", "categoryId": test_category.id},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_ERROR"

    def test_create_with_bearer_header(self, client, auth_headers, test_category):
        response = client.post(
            "/api/posts/",
            json={"title": "T", "content": "C", "categoryId": test_category.id},
            headers=auth_headers,
        )

        assert response.status_code == 201

    def test_create_missing_title(self, authenticated_client, test_category):
        response = authenticated_client.post(
            "/api/posts/",
            json={"title": "   ", "content": "C", "categoryId": test_category.id},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert "Title is required" in body["message"]

    def test_create_unknown_category(self, authenticated_client):
        response = authenticated_client.post(
            "/api/posts/",
            json={"title": "T", "content": "C", "categoryId": "missing"},
        )

        assert response.status_code == 404

    def test_create_language_must_match_category(
        self, authenticated_client, test_category
    ):
        response = authenticated_client.post(
            "/api/posts/",
            json={
                "title": "T",
                "content": "C",
                "language": "bn",
                "categoryId": test_category.id,
            },
        )

        assert response.status_code == 400
        assert "belongs to language 'en'" in response.json()["message"]

    def test_create_unsupported_language(self, authenticated_client, test_category):
        response = authenticated_client.post(
            "/api/posts/",
            json={
                "title": "T",
                "content": "C",
                "language": "fr",
                "categoryId": test_category.id,
            },
        )

        assert response.status_code == 400

    def test_create_with_subcategory_of_other_category(
        self, authenticated_client, db_session, test_category
    ):
        other = Category(name="Research", language="en")
        db_session.add(other)
        db_session.commit()
        foreign_sub = Subcategory(name="Papers", category_id=other.id)
        db_session.add(foreign_sub)
        db_session.commit()

        response = authenticated_client.post(
            "/api/posts/",
            json={
                "title": "T",
                "content": "C",
                "categoryId": test_category.id,
                "subcategoryId": foreign_sub.id,
            },
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert db_session.query(Post).count() == 0

    def test_create_with_own_subcategory(
        self, authenticated_client, test_category, test_subcategory
    ):
        response = authenticated_client.post(
            "/api/posts/",
            json={
                "title": "T",
                "content": "C",
                "categoryId": test_category.id,
                "subcategoryId": test_subcategory.id,
            },
        )

        assert response.status_code == 201
        assert response.json()["post"]["subcategory"]["name"] == "Poetry"

    def test_create_scheduled_post(self, authenticated_client, test_category):
        response = authenticated_client.post(
            "/api/posts/",
            json={
                "title": "Later",
                "content": "C",
                "categoryId": test_category.id,
                "status": "scheduled",
                "scheduledDate": _future(),
            },
        )

        assert response.status_code == 201
        post = response.json()["post"]
        assert post["status"] == "scheduled"
        assert post["scheduledDate"] is not None
        assert post["publishedAt"] is None

    def test_create_scheduled_in_past_rejected(self, authenticated_client, test_category):
        response = authenticated_client.post(
            "/api/posts/",
            json={
                "title": "Too late",
                "content": "C",
                "categoryId": test_category.id,
                "status": "scheduled",
                "scheduledDate": "2020-01-01T00:00:00Z",
            },
        )

        assert response.status_code == 400
        assert "future" in response.json()["message"]

    def test_create_second_lead_replaces_first(
        self, authenticated_client, db_session, test_category
    ):
        payload = {"content": "C", "categoryId": test_category.id, "isLead": True}
        first = authenticated_client.post("/api/posts/", json={**payload, "title": "P1"})
        second = authenticated_client.post("/api/posts/", json={**payload, "title": "P2"})

        assert first.status_code == 201
        assert second.status_code == 201
        p1 = db_session.get(Post, first.json()["post"]["id"])
        db_session.refresh(p1)
        assert p1.is_lead is False
        assert second.json()["post"]["isLead"] is True


@pytest.mark.unit
class TestReadPosts:
    """Test listing, lookup and search."""

    def test_list_only_published_newest_first(self, client, make_post):
        now = utcnow()
        make_post(title="Old", created_at=now - timedelta(days=2))
        make_post(title="New", created_at=now - timedelta(hours=1))
        make_post(title="Hidden draft", status=PostStatus.DRAFT)

        response = client.get("/api/posts/")

        assert response.status_code == 200
        data = response.json()
        assert [p["title"] for p in data["posts"]] == ["New", "Old"]
        assert data["pagination"]["totalPosts"] == 2

    def test_pagination_block(self, client, make_post):
        for i in range(5):
            make_post(title=f"Post {i}")

        response = client.get("/api/posts/?page=2&limit=2")

        pagination = response.json()["pagination"]
        assert pagination == {
            "page": 2,
            "limit": 2,
            "totalPages": 3,
            "totalPosts": 5,
            "hasNextPage": True,
            "hasPrevPage": True,
        }

    def test_limit_is_capped(self, client):
        response = client.get("/api/posts/?limit=500")

        assert response.status_code == 400

    def test_filter_by_language(self, client, make_post, bengali_category):
        make_post(title="English")
        make_post(title="Bengali", language="bn", category_id=bengali_category.id)

        response = client.get("/api/posts/by-language?language=bn")

        assert response.status_code == 200
        assert [p["title"] for p in response.json()["posts"]] == ["Bengali"]

    def test_filter_by_subcategory(self, client, make_post, test_subcategory):
        make_post(title="In poetry", subcategory_id=test_subcategory.id)
        make_post(title="Elsewhere")

        response = client.get(f"/api/posts/?subcategoryId={test_subcategory.id}")

        assert [p["title"] for p in response.json()["posts"]] == ["In poetry"]

    def test_get_published_post_is_public(self, client, make_post):
        post = make_post(title="Public")

        response = client.get(f"/api/posts/{post.id}")

        assert response.status_code == 200
        assert response.json()["post"]["title"] == "Public"

    def test_draft_visible_only_to_owner(self, client, authenticated_client, make_post):
        draft = make_post(title="Secret", status=PostStatus.DRAFT)

        assert authenticated_client.get(f"/api/posts/{draft.id}").status_code == 200
        authenticated_client.cookies.clear()
        assert client.get(f"/api/posts/{draft.id}").status_code == 404

    def test_get_missing_post(self, client):
        response = client.get("/api/posts/nope")

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND_ERROR"

    def test_my_posts_include_every_status(self, authenticated_client, make_post):
        make_post(title="Draft", status=PostStatus.DRAFT)
        make_post(
            title="Scheduled",
            status=PostStatus.SCHEDULED,
            scheduled_date=utcnow() + timedelta(days=1),
        )
        make_post(title="Published")

        response = authenticated_client.get("/api/posts/mine")
        assert response.json()["pagination"]["totalPosts"] == 3

        drafts = authenticated_client.get("/api/posts/mine?status=draft")
        assert [p["title"] for p in drafts.json()["posts"]] == ["Draft"]

    def test_search_is_case_insensitive(self, client, make_post):
        make_post(title="The River Song", content="water")
        make_post(title="Mountains", content="A long RIVER walk")
        make_post(title="Deserts", content="sand")
        make_post(title="River draft", status=PostStatus.DRAFT)

        response = client.get("/api/posts/search?q=river")

        data = response.json()
        assert data["query"] == "river"
        assert {p["title"] for p in data["posts"]} == {"The River Song", "Mountains"}

    def test_search_matches_wildcard_characters_literally(self, client, make_post):
        make_post(title="Monsoon", content="Clouds over the river")
        make_post(title="Harvest", content="Half the field is gold")

        for term in ("_", "%", "50%"):
            response = client.get("/api/posts/search", params={"q": term})

            assert response.status_code == 200
            assert response.json()["pagination"]["totalPosts"] == 0

    def test_search_finds_literal_percent_and_underscore(self, client, make_post):
        make_post(title="Sale", content="Everything is 50% off")
        make_post(title="Code", content="call snake_case helpers")
        make_post(title="Plain", content="500 apples")

        percent = client.get("/api/posts/search", params={"q": "50%"}).json()
        underscore = client.get("/api/posts/search", params={"q": "e_c"}).json()

        assert [p["title"] for p in percent["posts"]] == ["Sale"]
        assert [p["title"] for p in underscore["posts"]] == ["Code"]

    def test_empty_search_returns_nothing(self, client, make_post):
        make_post()

        response = client.get("/api/posts/search?q=")

        assert response.status_code == 200
        assert response.json()["posts"] == []
        assert response.json()["pagination"]["totalPosts"] == 0

    def test_lead_lookup(self, client, make_post):
        make_post(title="Regular")
        lead = make_post(title="Lead", is_lead=True)

        response = client.get("/api/posts/lead?language=en")

        assert response.status_code == 200
        assert response.json()["leadPost"]["id"] == lead.id

    def test_lead_lookup_none(self, client):
        response = client.get("/api/posts/lead?language=bn")

        assert response.status_code == 200
        assert response.json()["leadPost"] is None

    def test_unpublished_lead_is_not_public(self, client, make_post):
        make_post(title="Secret draft", status=PostStatus.DRAFT, is_lead=True)

        lead = client.get("/api/posts/lead?language=en")
        home = client.get("/api/posts/home?language=en")

        assert lead.status_code == 200
        assert lead.json()["leadPost"] is None
        assert home.json()["leadPost"] is None

    def test_scheduled_lead_is_not_public(self, client, make_post):
        make_post(
            title="Coming soon",
            status=PostStatus.SCHEDULED,
            scheduled_date=utcnow() + timedelta(days=1),
            is_lead=True,
        )

        response = client.get("/api/posts/lead")

        assert response.json()["leadPost"] is None

    def test_home_feed_counts_published_posts_only(self, client, make_post):
        make_post(title="Out now")
        make_post(title="Out too")
        make_post(title="Draft", status=PostStatus.DRAFT)
        make_post(
            title="Later",
            status=PostStatus.SCHEDULED,
            scheduled_date=utcnow() + timedelta(days=1),
        )

        response = client.get("/api/posts/home?language=en")

        section = response.json()["categories"][0]
        assert section["name"] == "Creative"
        assert section["postCount"] == 2
        assert len(section["posts"]) == 2

    def test_home_feed(self, client, db_session, make_post, test_category):
        podcast = Category(name="Podcast", language="en")
        db_session.add(podcast)
        db_session.commit()
        lead = make_post(title="Lead", is_lead=True)
        for i in range(6):
            make_post(title=f"Creative {i}")
        for i in range(3):
            make_post(title=f"Episode {i}", category_id=podcast.id)

        response = client.get("/api/posts/home?language=en")

        assert response.status_code == 200
        data = response.json()
        assert data["language"] == "en"
        assert data["leadPost"]["id"] == lead.id
        sections = {section["name"]: section for section in data["categories"]}
        assert len(sections["Creative"]["posts"]) == 4
        assert all(not p["isLead"] for p in sections["Creative"]["posts"])
        assert len(sections["Podcast"]["posts"]) == 1


@pytest.mark.unit
class TestUpdateDeletePost:
    """Test PUT/DELETE /api/posts/{id}."""

    def test_update_own_post(self, authenticated_client, make_post):
        post = make_post(title="Before")

        response = authenticated_client.put(
            f"/api/posts/{post.id}", json={"title": "After"}
        )

        assert response.status_code == 200
        assert response.json()["post"]["title"] == "After"

    def test_update_foreign_post_forbidden(self, other_client, make_post):
        post = make_post(title="Mine")

        response = other_client.put(f"/api/posts/{post.id}", json={"title": "Theirs"})

        assert response.status_code == 403
        assert response.json()["error"] == "AUTHORIZATION_ERROR"

    def test_update_subcategory_from_other_category_persists_nothing(
        self, authenticated_client, db_session, make_post, test_subcategory
    ):
        other = Category(name="Research", language="en")
        db_session.add(other)
        db_session.commit()
        foreign_sub = Subcategory(name="Papers", category_id=other.id)
        db_session.add(foreign_sub)
        db_session.commit()
        post = make_post(title="Original", subcategory_id=test_subcategory.id)

        response = authenticated_client.put(
            f"/api/posts/{post.id}",
            json={"title": "Changed", "subcategoryId": foreign_sub.id},
        )

        assert response.status_code == 400
        db_session.expire_all()
        stored = db_session.get(Post, post.id)
        assert stored.title == "Original"
        assert stored.subcategory_id == test_subcategory.id

    def test_changing_category_clears_stale_subcategory(
        self, authenticated_client, db_session, make_post, test_subcategory
    ):
        other = Category(name="Research", language="en")
        db_session.add(other)
        db_session.commit()
        post = make_post(subcategory_id=test_subcategory.id)

        response = authenticated_client.put(
            f"/api/posts/{post.id}", json={"categoryId": other.id}
        )

        assert response.status_code == 200
        assert response.json()["post"]["categoryId"] == other.id
        assert response.json()["post"]["subcategoryId"] is None

    def test_publish_a_draft(self, authenticated_client, make_post):
        draft = make_post(status=PostStatus.DRAFT)

        response = authenticated_client.put(
            f"/api/posts/{draft.id}", json={"status": "published"}
        )

        assert response.status_code == 200
        assert response.json()["post"]["status"] == "published"
        assert response.json()["post"]["publishedAt"] is not None

    def test_unpublish_rejected(self, authenticated_client, make_post):
        post = make_post()

        response = authenticated_client.put(
            f"/api/posts/{post.id}", json={"status": "draft"}
        )

        assert response.status_code == 400

    def test_delete_own_post(self, authenticated_client, db_session, make_post):
        post_id = make_post().id

        response = authenticated_client.delete(f"/api/posts/{post_id}")

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(Post, post_id) is None

    def test_delete_foreign_post_forbidden(self, other_client, db_session, make_post):
        post = make_post()

        response = other_client.delete(f"/api/posts/{post.id}")

        assert response.status_code == 403
        assert db_session.get(Post, post.id) is not None


@pytest.mark.unit
class TestLeadEndpoints:
    """Test /api/posts/{id}/set-lead."""

    def test_set_lead(self, authenticated_client, db_session, make_post):
        old = make_post(title="Old lead", is_lead=True)
        new = make_post(title="New lead")

        response = authenticated_client.post(f"/api/posts/{new.id}/set-lead")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Post set as lead successfully"
        assert data["post"]["isLead"] is True
        db_session.refresh(old)
        assert old.is_lead is False

    def test_remove_lead(self, authenticated_client, make_post):
        lead = make_post(is_lead=True)

        response = authenticated_client.delete(f"/api/posts/{lead.id}/set-lead")

        assert response.status_code == 200
        assert response.json()["message"] == "Lead status removed successfully"
        assert response.json()["post"]["isLead"] is False

    def test_set_lead_requires_authentication(self, client, make_post):
        post = make_post()

        assert client.post(f"/api/posts/{post.id}/set-lead").status_code == 401

    def test_set_lead_on_foreign_post_forbidden(self, other_client, make_post):
        post = make_post()

        response = other_client.post(f"/api/posts/{post.id}/set-lead")

        assert response.status_code == 403

    def test_set_lead_missing_post(self, authenticated_client):
        response = authenticated_client.post("/api/posts/missing/set-lead")

        assert response.status_code == 404


@pytest.mark.unit
class TestPublishScheduledEndpoint:
    """Test /api/posts/publish-scheduled."""

    def test_publish_due_posts(self, authenticated_client, scheduled_posts):
        due, future = scheduled_posts

        response = authenticated_client.post("/api/posts/publish-scheduled")

        assert response.status_code == 200
        data = response.json()
        assert data["publishedCount"] == 1
        assert data["publishedPosts"][0]["id"] == due.id
        assert data["publishedPosts"][0]["title"] == "Due Post"
        assert "scheduledDate" in data["publishedPosts"][0]

        again = authenticated_client.post("/api/posts/publish-scheduled")
        assert again.json()["publishedCount"] == 0

    def test_publish_requires_authentication(self, client):
        assert client.post("/api/posts/publish-scheduled").status_code == 401

    def test_scheduled_overview(self, client, scheduled_posts):
        response = client.get("/api/posts/publish-scheduled")

        assert response.status_code == 200
        data = response.json()
        assert data["totalScheduled"] == 2
        assert data["duePosts"] == 1
        assert data["futurePosts"] == 1
        assert {p["isDue"] for p in data["scheduledPosts"]} == {True, False}


@pytest.mark.unit
class TestHomeFeedOrdering:
    """Home sections follow the editorial order in both languages."""

    def test_bengali_sections(self, client, db_session, make_post, test_user):
        names = ["পডকাস্ট", "কালচার", "ক্রিয়েটিভ"]
        categories = {}
        for name in names:
            category = Category(name=name, language="bn")
            db_session.add(category)
            db_session.commit()
            categories[name] = category
        for name, category in categories.items():
            for i in range(3):
                make_post(
                    title=f"{name} {i}", language="bn", category_id=category.id
                )

        response = client.get("/api/posts/home?language=bn&postsPerCategory=2")

        sections = response.json()["categories"]
        assert [s["name"] for s in sections] == ["ক্রিয়েটিভ", "কালচার", "পডকাস্ট"]
        assert [len(s["posts"]) for s in sections] == [2, 2, 1]
