from datetime import datetime

from hypothesis import given, strategies as st

from rinart_cms.domain.media import MediaAsset
from rinart_cms.domain.projects import Project, ProjectMedia, ProjectScheme
from rinart_cms.services.editor import (
    EditorState,
    GalleryEntry,
    MediaPicker,
    merge_assets,
    move_item,
    order_keys,
)

NOW = datetime(2024, 5, 1, 12, 0, 0)


def _project() -> Project:
    return Project(
        id=1,
        slug="dom-u-ozera",
        title="Дом у озера",
        tagline=None,
        categories=["дома"],
        content={"bodyHtml": "<p>Один</p><p>Два</p>", "facts": [{"label": "Год", "value": "2021"}]},
        created_at=NOW,
        updated_at=NOW,
        media=[
            ProjectMedia(id=3, project_id=1, url="/uploads/b.webp", caption="B", kind="GALLERY", order=2, created_at=NOW),
            ProjectMedia(id=1, project_id=1, url="/uploads/hero.webp", kind="FEATURE", order=0, created_at=NOW),
            ProjectMedia(id=2, project_id=1, url="/uploads/a.webp", kind="GALLERY", order=1, created_at=NOW),
        ],
        schemes=[ProjectScheme(id=1, project_id=1, title="План", url="/uploads/plan.webp", order=0, created_at=NOW)],
    )


def test_state_from_project_uses_feature_and_html_fallbacks():
    state = EditorState.from_project(_project())

    assert state.hero_image_url == "/uploads/hero.webp"
    assert state.description_body == ["Один", "Два"]
    assert [entry.url for entry in state.gallery] == ["/uploads/a.webp", "/uploads/b.webp"]
    assert state.schemes[0].title == "План"


def test_payloads_use_wire_names_and_skip_blank_entries():
    state = EditorState.from_project(_project())
    state.gallery.append(GalleryEntry(url=""))
    state.facts.append({"label": "", "value": ""})

    update = state.to_update_payload()
    media = state.to_media_payload()

    assert update["heroImageUrl"] == "/uploads/hero.webp"
    assert update["facts"] == [{"label": "Год", "value": "2021"}]
    assert media["featureImageUrl"] == "/uploads/hero.webp"
    assert [item["url"] for item in media["gallery"]] == ["/uploads/a.webp", "/uploads/b.webp"]
    assert media["schemes"] == [{"url": "/uploads/plan.webp", "title": "План"}]


@given(
    items=st.lists(st.integers(), max_size=15),
    from_index=st.integers(min_value=-2, max_value=17),
    to_index=st.integers(min_value=-2, max_value=17),
)
def test_move_item_is_a_permutation(items, from_index, to_index):
    moved = move_item(items, from_index, to_index)

    assert sorted(moved) == sorted(items)
    if 0 <= from_index < len(items) and 0 <= to_index < len(items):
        assert moved[to_index] == items[from_index]
    else:
        assert moved == items


def test_order_keys_reads_dicts_and_objects():
    assert order_keys([{"slug": "a"}, {"slug": "b"}]) == ["a", "b"]
    assert order_keys([GalleryEntry(url="/x")], key="url") == ["/x"]


def test_merge_assets_puts_new_assets_first_without_duplicates():
    old = [MediaAsset(id=1, url="/uploads/a.webp", created_at=NOW), MediaAsset(id=2, url="/uploads/b.webp", created_at=NOW)]
    new = [MediaAsset(id=3, url="/uploads/b.webp", created_at=NOW), MediaAsset(id=4, url="/uploads/c.webp", created_at=NOW)]

    merged = merge_assets(old, new)

    assert [asset.id for asset in merged] == [3, 4, 1]


def test_single_picker_replaces_hero():
    state = EditorState.from_project(_project())
    picker = MediaPicker()
    picker.toggle("/uploads/one.webp")
    picker.toggle("/uploads/two.webp")

    picker.apply_to(state)

    assert picker.selected == ["/uploads/two.webp"]
    assert state.hero_image_url == "/uploads/two.webp"


def test_multiple_picker_appends_missing_gallery_images():
    state = EditorState.from_project(_project())
    picker = MediaPicker(multiple=True, selected=["/uploads/a.webp", "/uploads/new.webp"])

    picker.apply_to(state)

    assert [entry.url for entry in state.gallery] == ["/uploads/a.webp", "/uploads/b.webp", "/uploads/new.webp"]

    picker.toggle("/uploads/new.webp")
    assert picker.selected == ["/uploads/a.webp"]
    picker.clear()
    assert picker.selected == []


async def test_editor_payloads_round_trip_through_admin_routes(admin_client):
    created = await admin_client.post("/api/admin/projects", json={"title": "Дом у озера"})
    state = EditorState.from_project(Project.model_validate(created.json()["project"]))
    state.tagline = "Лесной дом"
    state.facts = [{"label": "Год", "value": "2021"}, {"label": "", "value": ""}]
    MediaPicker(selected=["/uploads/hero.webp"]).apply_to(state)
    MediaPicker(multiple=True, selected=["/uploads/a.webp", "/uploads/b.webp"]).apply_to(state)

    updated = await admin_client.patch(f"/api/admin/projects/{state.slug}", json=state.to_update_payload())
    replaced = await admin_client.post(f"/api/admin/projects/{state.slug}/media", json=state.to_media_payload())
    assert updated.status_code == 200, updated.text
    assert replaced.json() == {"success": True}

    stored = (await admin_client.get(f"/api/admin/projects/{state.slug}")).json()["project"]
    reloaded = EditorState.from_project(Project.model_validate(stored))
    assert reloaded.tagline == "Лесной дом"
    assert reloaded.hero_image_url == "/uploads/hero.webp"
    assert reloaded.facts == [{"label": "Год", "value": "2021"}]
    assert [entry.url for entry in reloaded.gallery] == ["/uploads/a.webp", "/uploads/b.webp"]
