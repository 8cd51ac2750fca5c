import io

import pytest
from PIL import Image

from rinart_cms.repositories.media_library import SqlAlchemyMediaLibraryRepository, scrub_url
from rinart_cms.repositories.page_seo import SqlAlchemyPageSeoRepository
from rinart_cms.repositories.projects import SqlAlchemyProjectsRepository
from rinart_cms.repositories.site_settings import (
    SqlAlchemyGlobalBlocksRepository,
    SqlAlchemySiteSettingsRepository,
)
from rinart_cms.repositories.team import SqlAlchemyTeamRepository
from rinart_cms.services import image_optimization
from rinart_cms.services.page_seo import PUBLIC_PATHS
from rinart_cms.services.uploads import StoredUpload

IMAGE_URL = "/uploads/facade.webp"


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 120, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def webp_only(monkeypatch):
    def _unavailable(image):
        raise OSError("encoder unavailable")

    monkeypatch.setattr(image_optimization, "encode_avif", _unavailable)
    monkeypatch.setattr(image_optimization, "encode_avif_external", _unavailable)


async def test_upload_optimises_and_serves_file(admin_client, uploads_dir, webp_only):
    response = await admin_client.post(
        "/api/admin/media/upload",
        files={"file": ("Facade House.png", _png_bytes(), "image/png")},
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["url"].startswith("/uploads/")
    assert body["url"].endswith(".webp")
    assert body["mimeType"] == "image/webp"
    assert body["originalName"] == "Facade House.png"
    assert body["url"].startswith("/uploads/facade-house-")
    assert (uploads_dir / body["url"].removeprefix("/uploads/")).is_file()

    served = await admin_client.get(body["url"])
    assert served.status_code == 200
    assert served.headers["content-type"] == "image/webp"
    assert served.headers["cache-control"] == "public, max-age=31536000, immutable"


async def test_upload_rejects_non_images_and_missing_file(admin_client):
    text = await admin_client.post(
        "/api/admin/media/upload", files={"file": ("notes.txt", b"hello", "text/plain")}
    )
    empty = await admin_client.post("/api/admin/media/upload", files={"file": ("a.png", b"", "image/png")})
    missing = await admin_client.post("/api/admin/media/upload", data={"other": "x"})

    assert text.status_code == 400
    assert text.json() == {"error": "Only image uploads are supported"}
    assert empty.status_code == 400
    assert missing.status_code == 400


async def test_library_registers_local_urls_once(admin_client):
    first = await admin_client.post("/api/admin/media/library", json={"url": IMAGE_URL})
    second = await admin_client.post("/api/admin/media/library", json={"url": IMAGE_URL, "title": "Фасад"})

    assert first.json()["asset"]["title"] == "facade.webp"
    assert second.json()["asset"]["id"] == first.json()["asset"]["id"]
    assets = (await admin_client.get("/api/admin/media/library")).json()["assets"]
    assert [asset["url"] for asset in assets] == [IMAGE_URL]


async def test_library_requires_url(admin_client):
    response = await admin_client.post("/api/admin/media/library", json={"url": "  "})

    assert response.status_code == 400
    assert response.json() == {"error": "Image URL is required"}


async def test_library_downloads_remote_images(admin_client, monkeypatch, uploads_dir):
    async def _fetch(url):
        path = uploads_dir / "remote-1.webp"
        path.write_bytes(b"data")
        return StoredUpload(url="/uploads/remote-1.webp", original_name="remote.jpg", size=4, mime_type="image/webp", path=path)

    monkeypatch.setattr("rinart_cms.api.routes.media.fetch_remote_image", _fetch)

    response = await admin_client.post("/api/admin/media/library", json={"url": "https://example.com/remote.jpg"})

    assert response.json()["asset"]["url"] == "/uploads/remote-1.webp"
    assert response.json()["asset"]["title"] == "remote.jpg"


async def test_deleting_an_asset_scrubs_every_reference(admin_client, session_factory, uploads_dir, revalidation):
    (uploads_dir / "facade.webp").write_bytes(b"image")
    async with session_factory() as session:
        projects = SqlAlchemyProjectsRepository(session)
        await projects.create(
            {
                "slug": "dom",
                "title": "Дом",
                "content": {"body": ["Текст"], "seo": {"title": "Дом", "ogImage": IMAGE_URL}},
            }
        )
        await projects.replace_media(
            "dom",
            feature_image_url=IMAGE_URL,
            gallery=[{"url": IMAGE_URL}, {"url": "/uploads/other.webp"}],
            schemes=[{"url": IMAGE_URL, "title": "План"}],
        )
        await SqlAlchemyMediaLibraryRepository(session).create(IMAGE_URL, "Фасад")
        await SqlAlchemyPageSeoRepository(session).upsert(
            "home", title="Главная", description=None, keywords=[], og_image_url=IMAGE_URL
        )
        await SqlAlchemyTeamRepository(session).create({"name": "Ринат", "image_url": IMAGE_URL})
        await SqlAlchemyGlobalBlocksRepository(session).upsert("home-hero", {"imageUrl": IMAGE_URL})
        await SqlAlchemySiteSettingsRepository(session).upsert(
            "contact", {"heroTitle": "Контакты", "heroImageUrl": IMAGE_URL}
        )

    response = await admin_client.request("DELETE", "/api/admin/media/library", json={"url": IMAGE_URL})

    assert response.json() == {"success": True}
    assert not (uploads_dir / "facade.webp").exists()
    assert set(PUBLIC_PATHS) | {"/dom"} <= revalidation.paths

    async with session_factory() as session:
        project = await SqlAlchemyProjectsRepository(session).get_by_slug("dom")
        assert project.hero_image_url is None
        assert [item.url for item in project.media] == ["/uploads/other.webp"]
        assert project.schemes == []
        assert project.content == {"body": ["Текст"], "seo": {"title": "Дом"}}
        assert await SqlAlchemyMediaLibraryRepository(session).list_assets() == []
        assert (await SqlAlchemyPageSeoRepository(session).get("home")).og_image_url is None
        assert (await SqlAlchemyTeamRepository(session).list_all())[0].image_url is None
        assert await SqlAlchemyGlobalBlocksRepository(session).get("home-hero") == {"imageUrl": None}
        contact = await SqlAlchemySiteSettingsRepository(session).get("contact")
        assert contact == {"heroTitle": "Контакты", "heroImageUrl": None}


async def test_delete_requires_id_or_url(admin_client):
    response = await admin_client.request("DELETE", "/api/admin/media/library", json={})

    assert response.status_code == 400


async def test_uploads_route_rejects_missing_files(client):
    response = await client.get("/uploads/missing.webp")

    assert response.status_code == 404


def test_scrub_url_nulls_values_and_drops_list_items():
    value = {"a": "/x", "b": ["/x", "/y"], "c": {"d": "/x", "e": 1}}

    scrubbed, changed = scrub_url(value, "/x")

    assert changed
    assert scrubbed == {"a": None, "b": ["/y"], "c": {"d": None, "e": 1}}
    assert scrub_url({"a": "/y"}, "/x") == ({"a": "/y"}, False)
