"""
Tests for the SQLite tag and feedback data access layers.
"""

import pytest

from dal.feedback_dal import FeedbackDAL
from dal.tag_dal import TagConflictError, TagDAL, TagNotFoundError
from utils.database_init import AsyncDatabaseInitializer


def test_create_and_list_tags(db_initializer, run):
    dal = TagDAL(db_initializer)

    async def scenario():
        first = await dal.create_tag("noisy", "S1")
        second = await dal.create_tag("quiet", "S1")
        await dal.create_tag("noisy", "S2")
        return first, second, await dal.list_tags("S1")

    first, second, tags = run(scenario())

    assert first.votes == 0
    assert first.id != second.id
    assert [tag.name for tag in tags] == ["noisy", "quiet"]
    assert all(tag.session_id == "S1" for tag in tags)
    assert first.to_json()["_id"] == first.id


def test_duplicate_tag_name_in_session_conflicts(db_initializer, run):
    dal = TagDAL(db_initializer)

    async def scenario():
        await dal.create_tag("noisy", "S1")
        await dal.create_tag("noisy", "S1")

    with pytest.raises(TagConflictError):
        run(scenario())


def test_votes_are_viewpoint_relative_and_floored(db_initializer, run):
    dal = TagDAL(db_initializer)

    async def scenario():
        tag = await dal.create_tag("noisy", "S1")
        counts = [
            await dal.vote_tag(tag.id, "S1", "v1", "add"),
            await dal.vote_tag(tag.id, "S1", "v1", "add"),
            await dal.vote_tag(tag.id, "S1", "v2", "add"),
            await dal.vote_tag(tag.id, "S1", "v1", "remove"),
            await dal.vote_tag(tag.id, "S1", "v2", "remove"),
            await dal.vote_tag(tag.id, "S1", "v2", "remove"),
        ]
        listed = {
            "v1": (await dal.list_tags("S1", "v1"))[0].votes,
            "v2": (await dal.list_tags("S1", "v2"))[0].votes,
            "v3": (await dal.list_tags("S1", "v3"))[0].votes,
            None: (await dal.list_tags("S1"))[0].votes,
        }
        return counts, listed

    counts, listed = run(scenario())

    assert counts == [1, 2, 1, 1, 0, 0]
    assert listed == {"v1": 1, "v2": 0, "v3": 0, None: 0}


def test_remove_without_counter_does_not_create_one(db_initializer, run):
    dal = TagDAL(db_initializer)

    async def scenario():
        tag = await dal.create_tag("noisy", "S1")
        removed = await dal.vote_tag(tag.id, "S1", "v1", "remove")
        async with db_initializer.connection() as conn:
            cur = await conn.execute("SELECT COUNT(*) FROM viewpoint_votes")
            rows = (await cur.fetchone())[0]
        return removed, rows

    assert run(scenario()) == (0, 0)


def test_vote_on_unknown_tag_raises(db_initializer, run):
    dal = TagDAL(db_initializer)

    async def scenario():
        tag = await dal.create_tag("noisy", "S1")
        await dal.vote_tag(tag.id, "S2", "v1", "add")

    with pytest.raises(TagNotFoundError):
        run(scenario())


def test_vote_rejects_unknown_action(db_initializer, run):
    with pytest.raises(ValueError):
        run(TagDAL(db_initializer).vote_tag("t", "S1", "v1", "double"))


def test_feedback_is_scoped_and_newest_first(db_initializer, run):
    dal = FeedbackDAL(db_initializer)

    async def scenario():
        first = await dal.create_feedback("v1", "S1", "nice", ["quiet"])
        second = await dal.create_feedback("v1", "S1", "loud", [])
        await dal.create_feedback("v1", "S2", "elsewhere", [])
        await dal.create_feedback("v2", "S1", "other view", [])
        return first, second, await dal.list_feedback("v1", "S1")

    first, second, items = run(scenario())

    assert [item.id for item in items] == [second.id, first.id]
    assert items[1].tags == ["quiet"]
    assert items[1].to_json()["viewpointId"] == "v1"
    assert first.timestamp


def test_database_survives_restart_unless_reset(tmp_path, run):
    async def write():
        await TagDAL(AsyncDatabaseInitializer(tmp_path)).create_tag("noisy", "S1")

    async def read(reset):
        return await TagDAL(AsyncDatabaseInitializer(tmp_path, reset=reset)).list_tags("S1")

    run(write())
    assert len(run(read(False))) == 1
    assert run(read(True)) == []


def test_initializer_rejects_file_path(tmp_path):
    target = tmp_path / "not_a_dir"
    target.write_text("x")

    with pytest.raises(RuntimeError):
        AsyncDatabaseInitializer(target)
