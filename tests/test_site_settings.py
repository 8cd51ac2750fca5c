from rinart_cms.domain.settings import SocialLink
from rinart_cms.services.site_settings import (
    DEFAULT_CONTACT,
    DEFAULT_FOUNDER_BIOGRAPHY,
    DEFAULT_SOCIAL_LINKS,
    merge_social_links,
    normalise_contact,
    normalise_founder_biography,
    normalise_publications,
    normalise_social_links,
)


def test_contact_falls_back_to_defaults():
    assert normalise_contact(None).model_dump(by_alias=True) == DEFAULT_CONTACT
    contact = normalise_contact({"emailLabel": "hello@rinart.pro", "cityLabel": 5})
    assert contact.email_label == "hello@rinart.pro"
    assert contact.city_label == DEFAULT_CONTACT["cityLabel"]


def test_social_links_drop_entries_without_url():
    links = normalise_social_links(
        [
            {"id": "yt", "platform": "youtube", "label": "", "url": "https://youtube.com/@rinart"},
            {"platform": "myspace", "url": "https://example.com"},
            {"platform": "vk", "url": " "},
            "garbage",
        ]
    )

    assert [(link.id, link.platform, link.label) for link in links] == [
        ("yt", "youtube", "YOUTUBE"),
        ("instagram", "instagram", "INSTAGRAM"),
    ]
    assert len(normalise_social_links([])) == len(DEFAULT_SOCIAL_LINKS)


def test_merge_social_links_keeps_order_and_ignores_unknown_ids():
    current = [SocialLink.model_validate(link) for link in DEFAULT_SOCIAL_LINKS]

    merged = merge_social_links(current, [{"id": "vk", "url": "https://vk.com/new"}, {"id": "nope"}, "x"])

    assert [link.id for link in merged] == [link.id for link in current]
    assert merged[2].url == "https://vk.com/new"
    assert merged[2].label == current[2].label
    assert current[2].url == "https://vk.com/rinart_buro"


def test_list_settings_fall_back_when_empty():
    assert normalise_publications(["", "  "]) == normalise_publications(None)
    assert len(normalise_founder_biography([{"year": "2020", "lines": []}])) == len(DEFAULT_FOUNDER_BIOGRAPHY)
