import pytest

pytestmark = pytest.mark.asyncio


async def _create(client, **body):
    response = await client.post("/api/admin/projects", json=body)
    assert response.status_code == 201, response.text
    return response.json()["project"]


async def test_admin_routes_require_session(client):
    response = await client.get("/api/admin/projects")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


async def test_slug_is_derived_from_title_and_made_unique(admin_client, revalidation):
    first = await _create(admin_client, title="Дом у озера")
    second = await _create(admin_client, title="Дом у озера")

    assert first["slug"] == "dom-u-ozera"
    assert second["slug"] == "dom-u-ozera-2"
    assert {"/", "/dom-u-ozera", "/dom-u-ozera-2"} <= revalidation.paths


async def test_explicit_duplicate_slug_is_rejected(admin_client):
    await _create(admin_client, title="Баня", slug="banja")

    response = await admin_client.post("/api/admin/projects", json={"title": "Другая баня", "slug": "banja"})

    assert response.status_code == 409
    assert response.json() == {"error": "Project with this slug already exists"}


async def test_title_is_required(admin_client):
    response = await admin_client.post("/api/admin/projects", json={"slug": "no-title"})

    assert response.status_code == 400


async def test_new_projects_are_appended_or_inserted_at_order(admin_client):
    await _create(admin_client, title="A", slug="a")
    await _create(admin_client, title="B", slug="b")
    await _create(admin_client, title="C", slug="c", order=0)

    projects = (await admin_client.get("/api/admin/projects")).json()["projects"]

    assert [(p["slug"], p["order"]) for p in projects] == [("c", 0), ("a", 1), ("b", 2)]


async def test_non_finite_order_is_treated_as_missing(admin_client):
    await _create(admin_client, title="A", slug="a")
    created = await _create(admin_client, title="B", slug="b", order="1e999")
    assert created["order"] == 1

    response = await admin_client.patch(
        "/api/admin/projects/b",
        content=b'{"order": Infinity}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 200, response.text
    projects = (await admin_client.get("/api/admin/projects")).json()["projects"]
    assert [(p["slug"], p["order"]) for p in projects] == [("b", 0), ("a", 1)]


async def test_reorder_assigns_list_positions(admin_client, revalidation):
    for slug in ("a", "b", "c"):
        await _create(admin_client, title=slug.upper(), slug=slug)

    response = await admin_client.post("/api/admin/projects/reorder", json={"order": ["b", "a", "c"]})
    assert response.json() == {"success": True}

    listing = (await admin_client.get("/api/admin/projects")).json()
    assert [(p["slug"], p["order"]) for p in listing["projects"]] == [("b", 0), ("a", 1), ("c", 2)]
    assert listing["mediaLibrary"] == []


async def test_patch_keeps_content_sections_not_sent(admin_client):
    await _create(
        admin_client,
        title="Дом",
        slug="dom",
        descriptionBody=["Первый абзац"],
        facts=[{"label": "Год", "value": "2020"}],
        seoTitle="Дом — RINART",
        seoKeywords="дом, лес",
    )

    response = await admin_client.patch("/api/admin/projects/dom", json={"tagline": "У леса"})
    project = response.json()["project"]
    assert project["tagline"] == "У леса"
    assert project["content"] == {
        "body": ["Первый абзац"],
        "facts": [{"label": "Год", "value": "2020"}],
        "seo": {"title": "Дом — RINART", "keywords": ["дом", "лес"]},
    }

    response = await admin_client.patch("/api/admin/projects/dom", json={"seoTitle": "", "facts": []})
    assert response.json()["project"]["content"] == {
        "body": ["Первый абзац"],
        "seo": {"keywords": ["дом", "лес"]},
    }


async def test_patch_slug_conflict_and_rename(admin_client, revalidation):
    await _create(admin_client, title="A", slug="a")
    await _create(admin_client, title="B", slug="b")

    conflict = await admin_client.patch("/api/admin/projects/a", json={"slug": "b"})
    assert conflict.status_code == 409
    assert conflict.json() == {"error": "Slug already in use"}

    renamed = await admin_client.patch("/api/admin/projects/a", json={"slug": "a-new", "title": ""})
    assert renamed.status_code == 200
    assert renamed.json()["project"]["slug"] == "a-new"
    assert renamed.json()["project"]["title"] == "A"
    assert {"/a", "/a-new"} <= revalidation.paths
    assert (await admin_client.get("/api/admin/projects/a")).status_code == 404


async def test_delete_resequences_remaining_projects(admin_client):
    for slug in ("a", "b", "c"):
        await _create(admin_client, title=slug.upper(), slug=slug)

    response = await admin_client.delete("/api/admin/projects/b")
    assert response.json() == {"success": True}

    projects = (await admin_client.get("/api/admin/projects")).json()["projects"]
    assert [(p["slug"], p["order"]) for p in projects] == [("a", 0), ("c", 1)]


async def test_media_replace_orders_feature_gallery_and_schemes(admin_client):
    await _create(admin_client, title="Дом", slug="dom")

    response = await admin_client.post(
        "/api/admin/projects/dom/media",
        json={
            "featureImageUrl": "/uploads/hero.webp",
            "gallery": [{"url": "/uploads/1.webp", "caption": "Фасад"}, {"url": ""}, {"caption": "no url"}],
            "schemes": [{"url": "/uploads/plan.webp"}, {"url": "/uploads/cut.webp", "title": "Разрез"}],
        },
    )
    assert response.json() == {"success": True}

    project = (await admin_client.get("/api/admin/projects/dom")).json()["project"]
    assert project["heroImageUrl"] == "/uploads/hero.webp"
    assert [(m["kind"], m["url"], m["order"]) for m in project["media"]] == [
        ("FEATURE", "/uploads/hero.webp", 0),
        ("GALLERY", "/uploads/1.webp", 1),
    ]
    assert [(s["title"], s["order"]) for s in project["schemes"]] == [("Схема 1", 0), ("Разрез", 1)]


async def test_media_replace_without_feature_keeps_hero(admin_client):
    await _create(admin_client, title="Дом", slug="dom", heroImageUrl="/uploads/hero.webp")

    await admin_client.post("/api/admin/projects/dom/media", json={"gallery": [{"url": "/uploads/1.webp"}]})

    project = (await admin_client.get("/api/admin/projects/dom")).json()["project"]
    assert project["heroImageUrl"] == "/uploads/hero.webp"
    assert [(m["kind"], m["order"]) for m in project["media"]] == [("GALLERY", 0)]
    assert project["schemes"] == []


async def test_media_replace_for_unknown_project(admin_client):
    response = await admin_client.post("/api/admin/projects/missing/media", json={"gallery": []})

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


async def test_public_views_follow_admin_edits(admin_client):
    await _create(admin_client, title="Дом", slug="dom", descriptionHtml="<p>Текст</p>")
    await admin_client.post("/api/admin/projects/dom/media", json={"featureImageUrl": "/uploads/hero.webp"})

    summaries = (await admin_client.get("/api/projects")).json()["projects"]
    assert [summary["slug"] for summary in summaries] == ["dom"]

    detail = (await admin_client.get("/api/projects/dom")).json()["project"]
    assert detail["heroImageUrl"] == "/uploads/hero.webp"
    assert detail["descriptionBody"] == ["Текст"]

    await admin_client.patch("/api/admin/projects/dom", json={"title": "Новый дом"})
    detail = (await admin_client.get("/api/projects/dom")).json()["project"]
    assert detail["title"] == "Новый дом"
    summaries = (await admin_client.get("/api/projects")).json()["projects"]
    assert summaries[0]["title"] == "Новый дом"


async def test_public_project_not_found(client):
    response = await client.get("/api/projects/missing")

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}
