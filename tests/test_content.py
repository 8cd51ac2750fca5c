from rinart_cms.services.content import (
    build_content,
    build_seo_payload,
    ensure_facts,
    ensure_string_list,
    html_to_paragraphs,
    normalise_nullable,
    normalise_project_content,
    parse_content,
    parse_json_value,
    parse_string_list_column,
)


def test_empty_sections_are_dropped():
    assert build_content([], [], None, "   ") is None
    assert build_content(["Текст"], [], None) == {"body": ["Текст"]}


def test_build_then_parse_keeps_every_section():
    seo = build_seo_payload(title=" Дом ", keywords=["дом", " ", "озеро"], og_image="/uploads/og.webp")
    content = build_content(
        ["Первый абзац", "Второй абзац"],
        [{"label": "Площадь", "value": "250 м²"}],
        seo,
        "<p>Первый абзац</p>",
    )

    parts = parse_content(content)

    assert parts.body == ["Первый абзац", "Второй абзац"]
    assert parts.facts == [{"label": "Площадь", "value": "250 м²"}]
    assert parts.seo == {"title": "Дом", "keywords": ["дом", "озеро"], "ogImage": "/uploads/og.webp"}
    assert parts.html == "<p>Первый абзац</p>"


def test_parse_content_tolerates_garbage():
    parts = parse_content("not a document")

    assert parts.body == []
    assert parts.facts == []
    assert parts.seo is None
    assert parts.html == ""


def test_normalise_project_content_trims_and_filters():
    content = normalise_project_content(
        {
            "body": [" a ", "", 3, "b"],
            "facts": [{"label": " Год ", "value": " 2021 "}, {"label": "", "value": " "}, "x"],
            "seo": {"title": "  ", "keywords": "дом, баня"},
        }
    )

    assert content == {
        "body": ["a", "b"],
        "facts": [{"label": "Год", "value": "2021"}],
        "seo": {"keywords": ["дом", "баня"]},
    }
    assert normalise_project_content({}) is None
    assert normalise_project_content({"body": [" "]}) is None


def test_loose_input_helpers():
    assert ensure_string_list("a, b ,,c") == ["a", "b", "c"]
    assert ensure_string_list(None) == []
    assert ensure_facts([{"label": "a", "value": 1}, {"label": "b", "value": "c"}]) == [
        {"label": "b", "value": "c"}
    ]
    assert normalise_nullable("  ") is None
    assert normalise_nullable(2021) == "2021"
    assert normalise_nullable(None) is None


def test_html_to_paragraphs():
    html = "<p>Первый <b>абзац</b></p><p></p><p>Второй</p>\nТретий"

    assert html_to_paragraphs(html) == ["Первый абзац", "Второй", "Третий"]


def test_json_columns():
    assert parse_json_value('{"a": 1}', None) == {"a": 1}
    assert parse_json_value("{broken", {}) == {}
    assert parse_json_value(None, []) == []
    assert parse_json_value({"a": 1}, None) == {"a": 1}
    assert parse_string_list_column('["дом", " ", "баня"]') == ["дом", "баня"]
    assert parse_string_list_column("дом, баня") == ["дом", "баня"]
    assert parse_string_list_column(["x", None, " y "]) == ["x", "y"]
    assert parse_string_list_column(None) == []
