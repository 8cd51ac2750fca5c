import pytest

from rinart_cms.services.site_settings import (
    DEFAULT_APPEARANCE,
    DEFAULT_CONTACT,
    DEFAULT_FOUNDER_BIOGRAPHY,
    DEFAULT_PUBLICATIONS,
    DEFAULT_SOCIAL_LINKS,
)

pytestmark = pytest.mark.asyncio

FRESH = "no-store, no-cache, must-revalidate, proxy-revalidate"


async def test_contact_defaults_and_no_store_headers(admin_client):
    response = await admin_client.get("/api/admin/settings/contact")

    body = response.json()
    assert body["contact"] == DEFAULT_CONTACT
    assert [link["id"] for link in body["socials"]] == [link["id"] for link in DEFAULT_SOCIAL_LINKS]
    assert response.headers["cache-control"] == "no-cache, no-store, must-revalidate"


async def test_contact_update_falls_back_per_field_and_reaches_public_view(admin_client, revalidation):
    before = (await admin_client.get("/api/settings/contact")).json()
    assert before["contact"]["phoneLabel"] == DEFAULT_CONTACT["phoneLabel"]

    response = await admin_client.put(
        "/api/admin/settings/contact",
        json={"contact": {"phoneLabel": " +7 900 000-00-00 ", "heroTitle": "   "}},
    )

    contact = response.json()["contact"]
    assert contact["phoneLabel"] == "+7 900 000-00-00"
    assert contact["heroTitle"] == DEFAULT_CONTACT["heroTitle"]
    after = (await admin_client.get("/api/settings/contact")).json()
    assert after["contact"]["phoneLabel"] == "+7 900 000-00-00"
    assert {"/", "/kontakty"} <= revalidation.paths


async def test_social_links_merge_by_id(admin_client):
    response = await admin_client.put(
        "/api/admin/social",
        json={
            "links": [
                {"id": "telegram", "label": "TG: rinart", "url": "https://t.me/rinart"},
                {"id": "unknown", "label": "ignored", "url": "https://example.com"},
            ]
        },
    )

    links = response.json()["links"]
    assert len(links) == len(DEFAULT_SOCIAL_LINKS)
    telegram = next(link for link in links if link["id"] == "telegram")
    assert telegram == {"id": "telegram", "platform": "telegram", "label": "TG: rinart", "url": "https://t.me/rinart"}
    stored = (await admin_client.get("/api/admin/social")).json()["links"]
    assert stored == links


async def test_appearance_and_global_blocks_are_seeded(client, admin_client):
    appearance = await client.get("/api/settings/appearance")
    assert appearance.headers["cache-control"] == FRESH
    assert appearance.json()["appearance"] == DEFAULT_APPEARANCE

    blocks = await client.get("/api/settings/global-blocks")
    assert blocks.headers["cache-control"] == FRESH
    assert blocks.json()["blocks"] == {
        "home-hero": {"imageUrl": DEFAULT_APPEARANCE["homeHeroImageUrl"]},
        "page-transition": {"imageUrl": DEFAULT_APPEARANCE["transitionImageUrl"]},
    }


async def test_appearance_update_keeps_defaults_for_blank_fields(admin_client):
    response = await admin_client.put(
        "/api/admin/settings/appearance", json={"appearance": {"homeHeroImageUrl": "/uploads/hero.webp"}}
    )

    assert response.json()["appearance"] == {
        "homeHeroImageUrl": "/uploads/hero.webp",
        "transitionImageUrl": DEFAULT_APPEARANCE["transitionImageUrl"],
    }


async def test_global_blocks_update(admin_client, revalidation):
    response = await admin_client.put(
        "/api/admin/settings/global-blocks",
        json={"blocks": {"home-hero": {"imageUrl": " /uploads/new.webp "}}},
    )

    assert response.json()["blocks"]["home-hero"] == {"imageUrl": "/uploads/new.webp"}
    assert {"/", "/proektirovanie"} <= revalidation.paths

    unknown = await admin_client.put("/api/admin/settings/global-blocks", json={"blocks": {"footer": {}}})
    assert unknown.status_code == 400
    assert unknown.json() == {"error": "Unknown content slug"}


async def test_content_items(admin_client):
    items = (await admin_client.get("/api/admin/content")).json()["items"]
    assert [item["slug"] for item in items] == ["home-hero", "page-transition"]
    assert items[0]["title"] == "Главная фотография"

    updated = await admin_client.patch("/api/admin/content/page-transition", json={"imageUrl": "/uploads/logo.png"})
    assert updated.json()["item"] == {
        "slug": "page-transition",
        "title": "Логотип загрузки/перехода",
        "imageUrl": "/uploads/logo.png",
    }

    unknown = await admin_client.patch("/api/admin/content/footer", json={"imageUrl": "/x"})
    assert unknown.status_code == 400
    assert unknown.json() == {"error": "Unknown content slug"}


async def test_publications(admin_client, client):
    assert (await client.get("/api/publications")).json()["publications"] == DEFAULT_PUBLICATIONS

    saved = await admin_client.put("/api/admin/publications", json={"publications": [" Archi.ru ", "", 5]})
    assert saved.json()["publications"] == ["Archi.ru"]
    assert (await client.get("/api/publications")).json()["publications"] == ["Archi.ru"]

    invalid = await admin_client.put("/api/admin/publications", json={"publications": "Archi.ru"})
    assert invalid.status_code == 400


async def test_founder_biography(admin_client, client):
    defaults = (await client.get("/api/founder-biography")).json()["biography"]
    assert len(defaults) == len(DEFAULT_FOUNDER_BIOGRAPHY)

    saved = await admin_client.put(
        "/api/admin/founder-biography",
        json={"biography": [{"year": "2024 г.", "lines": ["Новая линия", " "]}, {"year": "", "lines": ["x"]}]},
    )
    assert saved.json()["biography"] == [{"year": "2024 г.", "lines": ["Новая линия"]}]

    invalid = await admin_client.put("/api/admin/founder-biography", json={"biography": {"year": "x"}})
    assert invalid.status_code == 400
