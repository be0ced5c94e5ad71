"""Tests for entity and thread display labels."""

from quest_loom.display import entity_label, get_entity_display_name, thread_display_label
from quest_loom.models import Item, Quest, Thread


def _thread(subtype, label=""):
    return Thread(
        id="thread:1", game_id="g", source_id="quest:1", target_id="place:1",
        subtype=subtype, label=label,
    )


def test_entity_label_uses_title_or_name():
    assert entity_label(Quest(id="quest:1", game_id="g", title="Find the Crown")) == "Find the Crown"
    assert entity_label(Item(id="item:1", game_id="g", name="Rope")) == "Rope"


def test_entity_label_falls_back_to_id():
    assert entity_label(Item(id="item:1", game_id="g", name="")) == "item:1"


async def test_display_name_lookup(world):
    rope = world.item("Rope")
    assert await get_entity_display_name(world.store, world.game_id, rope) == "Rope"


async def test_display_name_falls_back_to_reference(world):
    assert await get_entity_display_name(world.store, world.game_id, "item:gone") == "item:gone"
    assert await get_entity_display_name(world.store, world.game_id, "nonsense") == "nonsense"
    assert await get_entity_display_name(world.store, world.game_id, "") == ""


def test_thread_labels():
    assert thread_display_label(_thread("custom", "  owes money to ")) == "owes money to"
    assert thread_display_label(_thread("location")) == "Location"
    assert thread_display_label(_thread("direct_place_link")) == "Connected to"
