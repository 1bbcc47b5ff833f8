"""Collection Store — themed issues of a curator's own picks."""

import pytest

from threesby.core.errors import DomainValidationError, ResourceNotFoundError
from threesby.services.records import load_picks


async def test_issue_numbers_increment_per_profile(collections, curator_id, approved_id):
    first = await collections.create(curator_id, {"title": "Spring"})
    second = await collections.create(curator_id, {"title": "Summer"})
    other = await collections.create(approved_id, {"title": "Elsewhere"})

    assert (first.issue_number, second.issue_number) == (1, 2)
    assert other.issue_number == 1
    assert first.font_color == "dark"


async def test_issue_number_follows_max_after_delete(collections, curator_id):
    first = await collections.create(curator_id, {"title": "One"})
    await collections.create(curator_id, {"title": "Two"})
    await collections.delete(curator_id, first.id)

    third = await collections.create(curator_id, {"title": "Three"})

    assert third.issue_number == 3


async def test_pick_ids_deduplicated_in_order(collections, test_db, curator_id):
    a, b = [p.id for p in await load_picks(test_db, curator_id)][:2]

    collection = await collections.create(curator_id, {
        "title": "Mixed", "pick_ids": [b, a, b], "categories": ["books", "books"],
    })

    assert collection.pick_ids == [str(b), str(a)]
    assert collection.categories == ["books"]


async def test_foreign_pick_refused(collections, test_db, curator_id, approved_id):
    foreign = (await load_picks(test_db, approved_id))[0].id
    with pytest.raises(DomainValidationError) as exc:
        await collections.create(curator_id, {"title": "Stolen", "pick_ids": [foreign]})
    assert exc.value.field == "pick_ids"
    assert await collections.list_for_profile(curator_id) == []


@pytest.mark.parametrize("data, field", [
    ({"title": "  "}, "title"),
    ({"title": "x", "categories": ["movies"]}, "categories"),
    ({"title": "x", "font_color": "neon"}, "font_color"),
    ({"title": "x", "issue_number": 7}, "issue_number"),
])
async def test_create_rejects_bad_fields(collections, curator_id, data, field):
    with pytest.raises(DomainValidationError) as exc:
        await collections.create(curator_id, data)
    assert exc.value.field == field


async def test_update_changes_fields(collections, curator_id, clock):
    collection = await collections.create(curator_id, {"title": "Draft title"})
    clock.advance(minutes=3)

    updated = await collections.update(curator_id, collection.id, {
        "title": " Final title ", "font_color": "light",
    })

    assert updated.title == "Final title"
    assert updated.font_color == "light"
    assert updated.issue_number == 1


async def test_other_curators_collection_is_not_found(
    collections, curator_id, approved_id,
):
    collection = await collections.create(approved_id, {"title": "Bea's"})
    collection_id = collection.id
    with pytest.raises(ResourceNotFoundError):
        await collections.update(curator_id, collection_id, {"title": "Mine"})
    with pytest.raises(ResourceNotFoundError):
        await collections.delete(curator_id, collection_id)
