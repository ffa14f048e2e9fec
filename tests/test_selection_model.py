"""Tests for the copy-on-write selection model."""

import pytest

from webprod.selection import SelectionError, SelectionModel, normalize_value


def _assert_coupled(model: SelectionModel) -> None:
    """Selected exactly when an entry exists, and every entry has a value."""
    for _section, item in model.template.iter_items():
        entry = model.get(item.id)
        assert model.is_selected(item.id) is (entry is not None)
        if entry is not None:
            assert entry.value is not None


@pytest.fixture
def empty(small_template):
    return SelectionModel(small_template)


class TestToggleItem:
    def test_toggle_on_creates_empty_text_value(self, empty, small_template):
        model = empty.toggle_item(small_template.get_item("name"), "basic")
        assert model.is_selected("name")
        assert model.get("name").value == ""
        assert model.get("name").section_id == "basic"

    def test_toggle_on_checkbox_starts_empty_tuple(self, empty, small_template):
        model = empty.toggle_item(small_template.get_item("features"), "choices")
        assert model.get("features").value == ()

    def test_toggle_twice_restores_prior_state(self, empty, small_template):
        item = small_template.get_item("notes")
        assert empty.toggle_item(item, "basic").toggle_item(item, "basic") == empty

    def test_value_lost_on_toggle_off(self, empty, small_template):
        item = small_template.get_item("notes")
        model = empty.toggle_item(item, "basic").update_value("notes", "メモ")
        model = model.toggle_item(item, "basic").toggle_item(item, "basic")
        assert model.get("notes").value == ""

    def test_wrong_section_raises(self, empty, small_template):
        with pytest.raises(SelectionError, match="belongs to section 'basic'"):
            empty.toggle_item(small_template.get_item("name"), "choices")

    def test_coupling_holds(self, empty, small_template):
        model = empty
        for _section, item in small_template.iter_items():
            model = model.toggle_item(item, small_template.section_of(item.id).id)
            _assert_coupled(model)


class TestCopyOnWrite:
    def test_every_mutation_returns_new_instance(self, empty, small_template):
        section = small_template.get_section("choices")
        toggled = empty.toggle_item(small_template.get_item("size"), "choices")
        assert toggled is not empty
        assert not empty.is_selected("size")

        updated = toggled.update_value("size", "M")
        assert updated is not toggled
        assert toggled.get("size").value == ""

        bulk = updated.select_all_in_section(section)
        assert bulk is not updated
        cleared = bulk.deselect_all_in_section(section)
        assert cleared is not bulk

    def test_update_on_unselected_item_is_noop(self, empty):
        assert empty.update_value("notes", "ignored") is empty

    def test_update_unknown_item_raises(self, empty):
        with pytest.raises(SelectionError, match="Unknown item id 'ghost'"):
            empty.update_value("ghost", "x")


class TestBulkOperations:
    def test_select_all_is_non_destructive(self, empty, small_template):
        section = small_template.get_section("choices")
        model = empty.toggle_item(small_template.get_item("size"), "choices")
        model = model.update_value("size", "L").select_all_in_section(section)
        assert model.get("size").value == "L"
        assert model.get("features").value == ()
        _assert_coupled(model)

    def test_deselect_all_discards_values(self, empty, small_template):
        section = small_template.get_section("basic")
        model = empty.select_all_in_section(section).update_value("name", "Acme")
        model = model.deselect_all_in_section(section)
        assert not model.is_selected("name")
        assert not model.is_selected("notes")
        assert len(model) == 0

    def test_deselect_all_leaves_other_sections(self, empty, small_template):
        model = empty.select_all_in_section(small_template.get_section("basic"))
        model = model.select_all_in_section(small_template.get_section("choices"))
        model = model.deselect_all_in_section(small_template.get_section("basic"))
        assert list(model) == ["size", "features"]


class TestValues:
    def test_checkbox_kept_in_option_order_without_duplicates(self, small_template):
        item = small_template.get_item("features")
        assert normalize_value(item, ["決済", "検索", "決済"]) == ("検索", "決済")

    def test_checkbox_rejects_unknown_option(self, small_template):
        with pytest.raises(SelectionError, match="not options of 'features'"):
            normalize_value(small_template.get_item("features"), ["ポイント"])

    def test_checkbox_rejects_plain_string(self, small_template):
        with pytest.raises(SelectionError, match="expects a list"):
            normalize_value(small_template.get_item("features"), "検索")

    def test_select_accepts_blank(self, small_template):
        assert normalize_value(small_template.get_item("size"), "") == ""

    def test_select_rejects_unknown_option(self, small_template):
        with pytest.raises(SelectionError):
            normalize_value(small_template.get_item("size"), "XL")

    def test_text_rejects_list(self, small_template):
        with pytest.raises(SelectionError, match="expects text"):
            normalize_value(small_template.get_item("name"), ["a"])


class TestQueries:
    def test_entries_follow_catalog_order(self, empty, small_template):
        model = empty.toggle_item(small_template.get_item("features"), "choices")
        model = model.toggle_item(small_template.get_item("name"), "basic")
        assert [entry.item_id for entry in model.entries()] == ["name", "features"]

    def test_selected_items_payload(self, empty, small_template):
        model = empty.toggle_item(small_template.get_item("features"), "choices")
        model = model.update_value("features", ["ログイン"])
        assert model.to_selected_items() == [
            {"itemId": "features", "sectionId": "choices", "value": ["ログイン"]}
        ]

    def test_equality_ignores_mutation_history(self, empty, small_template):
        a = empty.toggle_item(small_template.get_item("name"), "basic")
        b = empty.select_all_in_section(small_template.get_section("basic")).toggle_item(
            small_template.get_item("notes"), "basic"
        )
        assert a == b
        assert "name" in b
