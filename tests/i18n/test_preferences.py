from anvilon.i18n.preferences import normalize_lang, pick_localized_text


def test_normalize_lang_defaults_to_russian():
    assert normalize_lang("EN ") == "en"
    assert normalize_lang("lv") == "ru"
    assert normalize_lang(None) == "ru"


def test_pick_localized_text_prefers_english_when_present():
    assert pick_localized_text("Магия", "Magic", "en") == "Magic"
    assert pick_localized_text("Магия", "  ", "en") == "Магия"
    assert pick_localized_text("Магия", "Magic", "ru") == "Магия"


def test_pick_localized_text_uses_fallback_when_both_empty():
    assert pick_localized_text(None, "", "en", fallback="slug") == "slug"
    assert pick_localized_text(None, None) == ""
