"""Tests for the dynamic content store."""

from funnel_studio.editor.dynamic_content import (
    DynamicContentStore,
    ElementKind,
    copy_element_id,
    new_element_id,
)


class TestElementKind:
    """Tests for element kinds and ids."""

    def test_kind_from_generated_id(self):
        """Generated ids map back to their kind."""
        assert ElementKind.from_element_id(new_element_id(ElementKind.EMBED)) == ElementKind.EMBED

    def test_copy_ids_keep_kind(self):
        """Copies of dynamic ids keep the source's kind."""
        copy_id = copy_element_id(new_element_id(ElementKind.BUTTON))
        assert ElementKind.from_element_id(copy_id) == ElementKind.BUTTON

    def test_built_in_copy_ids_map_to_their_kind(self):
        """Copies of built-in slots read back as the slot's dynamic kind."""
        assert ElementKind.from_element_id(copy_element_id("subtext")) == ElementKind.TEXT
        assert ElementKind.from_element_id(copy_element_id("headline")) == ElementKind.HEADLINE
        assert ElementKind.from_element_id(copy_element_id("video")) == ElementKind.VIDEO

    def test_built_ins_have_no_kind(self):
        """Built-in slots are not dynamic."""
        assert ElementKind.from_element_id("headline") is None
        assert ElementKind.from_element_id("video") is None
        assert ElementKind.from_element_id("image_top") is None

    def test_unknown_prefix(self):
        """Ids with an unknown prefix have no kind."""
        assert ElementKind.from_element_id("widget_1") is None

    def test_default_payload_is_fresh(self):
        """Default payloads are independent copies."""
        payload = ElementKind.EMBED.default_payload()
        payload["embed_scale"] = 2
        assert ElementKind.EMBED.default_payload() == {"embed_url": "", "embed_scale": 0.75}


class TestDynamicContentStore:
    """Tests for DynamicContentStore."""

    def test_get_missing_returns_kind_default(self):
        """Missing records fall back to the kind's default."""
        store = DynamicContentStore()
        assert store.get("text_1", ElementKind.TEXT) == {"text": "New text block"}
        assert store.get("video_1", ElementKind.VIDEO) == {"video_url": ""}
        assert store.get("text_1") == {"text": "New text block"}
        assert store.get("widget_1") == {}

    def test_create_uses_default(self):
        """New records start with default content."""
        store = DynamicContentStore().create(ElementKind.BUTTON, "button_1")
        assert store.get("button_1") == {"text": "Click me"}
        assert store.kind_of("button_1") == ElementKind.BUTTON

    def test_set_merges(self):
        """set merges rather than replaces."""
        store = DynamicContentStore().create(ElementKind.EMBED, "embed_1")
        store = store.set("embed_1", {"embed_url": "https://cal.com/x"})
        assert store.get("embed_1") == {"embed_url": "https://cal.com/x", "embed_scale": 0.75}

    def test_set_does_not_touch_original(self):
        """Mutators return a new store."""
        original = DynamicContentStore().create(ElementKind.TEXT, "text_1")
        updated = original.set("text_1", {"text": "Changed"})
        assert original.get("text_1") == {"text": "New text block"}
        assert updated.get("text_1") == {"text": "Changed"}

    def test_set_new_dynamic_id(self):
        """set on a missing dynamic id starts from the default."""
        store = DynamicContentStore().set("headline_1", {"color": "red"})
        assert store.get("headline_1") == {"text": "New Headline", "color": "red"}

    def test_set_built_in_is_ignored(self):
        """Built-in slots do not live in the store."""
        store = DynamicContentStore()
        assert store.set("headline", {"text": "x"}) is store

    def test_duplicate_is_independent(self):
        """Duplicated records are equal but not shared."""
        store = DynamicContentStore().create(ElementKind.TEXT, "text_1").set("text_1", {"text": "Hi", "meta": {"a": 1}})
        store = store.duplicate("text_1", "text_2")
        assert store.get("text_2") == store.get("text_1")
        store.record("text_2").payload["meta"]["a"] = 2
        assert store.get("text_1")["meta"] == {"a": 1}

    def test_delete(self):
        """delete removes the record."""
        store = DynamicContentStore().create(ElementKind.DIVIDER, "divider_1").delete("divider_1")
        assert "divider_1" not in store
        assert len(store) == 0

    def test_from_dict_drops_unknown_kinds(self):
        """Entries whose kind cannot be read are dropped on load."""
        store = DynamicContentStore.from_dict({
            "text_1": {"text": "Hi"},
            "mystery": {"text": "?"},
        })
        assert list(store) == ["text_1"]
        assert store.to_dict() == {"text_1": {"text": "Hi"}}
