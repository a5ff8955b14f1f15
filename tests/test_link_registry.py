"""
Link registry behaviour, run against every storage backend
(SQLite via SQLAlchemy, fake Redis, in-memory).
"""
import asyncio
import time
from datetime import datetime

import pytest

from tinylink.exceptions import CodeConflict, InvalidCode, InvalidInput, InvalidURL, NotFound


class TestCreateAndGet:

    def test_round_trip(self, registry):
        """create() then get() returns the same link with no clicks"""
        created = asyncio.run(registry.create("AbC123", "https://example.com/a/b"))
        fetched = asyncio.run(registry.get("AbC123"))

        assert fetched.code == created.code == "AbC123"
        assert fetched.url == "https://example.com/a/b"
        assert fetched.clicks == 0
        assert fetched.last_clicked is None
        assert isinstance(fetched.created_at, datetime)
        assert fetched.created_at.tzinfo is not None

    def test_url_stored_as_given(self, registry):
        asyncio.run(registry.create("bare01", "https://x.io"))

        assert asyncio.run(registry.get("bare01")).url == "https://x.io"

    def test_get_missing_code(self, registry):
        with pytest.raises(NotFound):
            asyncio.run(registry.get("doesnotexist"))

    def test_duplicate_code_conflicts(self, registry):
        asyncio.run(registry.create("AbC123", "https://x.io"))

        with pytest.raises(CodeConflict):
            asyncio.run(registry.create("AbC123", "https://other.example"))

        # The first writer keeps the code
        assert asyncio.run(registry.get("AbC123")).url == "https://x.io"

    def test_codes_are_case_sensitive(self, registry):
        asyncio.run(registry.create("abcdef", "https://lower.example"))
        asyncio.run(registry.create("ABCDEF", "https://upper.example"))

        assert asyncio.run(registry.get("abcdef")).url == "https://lower.example"
        assert asyncio.run(registry.get("ABCDEF")).url == "https://upper.example"

    @pytest.mark.parametrize("code", ["ab1", "abcdefghi", "abc-12", "abc 12", ""])
    def test_invalid_code_writes_nothing(self, registry, code):
        with pytest.raises(InvalidCode):
            asyncio.run(registry.create(code, "https://example.com"))

        assert asyncio.run(registry.list()) == []

    @pytest.mark.parametrize(
        "url",
        ["", "   ", "not-a-valid-url", "ftp://example.com/file", "example.com", "/relative/path", "https://",
         "https://goo\tgle.com/x", "https://exa\nmple.com", "https://example.com/a b"],
    )
    def test_invalid_url_writes_nothing(self, registry, url):
        with pytest.raises(InvalidURL):
            asyncio.run(registry.create("AbC123", url))

        assert asyncio.run(registry.exists("AbC123")) is False

    def test_invalid_errors_share_a_base(self, registry):
        with pytest.raises(InvalidInput):
            asyncio.run(registry.create("ab1", "https://example.com"))
        with pytest.raises(InvalidInput):
            asyncio.run(registry.create("AbC123", "nope"))


class TestList:

    def test_empty(self, registry):
        assert asyncio.run(registry.list()) == []

    def test_contains_every_distinct_code(self, registry):
        asyncio.run(registry.create("first1", "https://one.example"))
        asyncio.run(registry.create("second2", "https://two.example"))

        codes = {link.code for link in asyncio.run(registry.list())}

        assert codes == {"first1", "second2"}

    def test_newest_first(self, registry):
        for code in ["oldest1", "middle1", "newest1"]:
            asyncio.run(registry.create(code, f"https://{code}.example"))
            time.sleep(0.01)

        links = asyncio.run(registry.list())

        created = [link.created_at for link in links]
        assert created == sorted(created, reverse=True)
        assert links[0].code == "newest1"
        assert links[-1].code == "oldest1"


class TestIncrementClick:

    def test_increment_sets_clicks_and_last_clicked(self, registry):
        asyncio.run(registry.create("AbC123", "https://x.io"))

        assert asyncio.run(registry.increment_click("AbC123")) is True

        link = asyncio.run(registry.get("AbC123"))
        assert link.clicks == 1
        assert link.last_clicked is not None
        assert link.last_clicked >= link.created_at

    def test_repeated_increments_accumulate(self, registry):
        asyncio.run(registry.create("AbC123", "https://x.io"))

        for _ in range(5):
            asyncio.run(registry.increment_click("AbC123"))
        first_last_clicked = asyncio.run(registry.get("AbC123")).last_clicked
        asyncio.run(registry.increment_click("AbC123"))

        link = asyncio.run(registry.get("AbC123"))
        assert link.clicks == 6
        assert link.last_clicked >= first_last_clicked

    def test_missing_code_is_a_no_op(self, registry):
        assert asyncio.run(registry.increment_click("ghost1")) is False
        assert asyncio.run(registry.exists("ghost1")) is False

    def test_increment_after_delete_does_not_resurrect(self, registry):
        asyncio.run(registry.create("AbC123", "https://x.io"))
        asyncio.run(registry.delete("AbC123"))

        assert asyncio.run(registry.increment_click("AbC123")) is False
        with pytest.raises(NotFound):
            asyncio.run(registry.get("AbC123"))


class TestDeleteAndExists:

    def test_delete_then_delete_again(self, registry):
        asyncio.run(registry.create("AbC123", "https://x.io"))

        asyncio.run(registry.delete("AbC123"))

        with pytest.raises(NotFound):
            asyncio.run(registry.delete("AbC123"))

    def test_delete_removes_from_list(self, registry):
        asyncio.run(registry.create("keep01", "https://keep.example"))
        asyncio.run(registry.create("drop01", "https://drop.example"))

        asyncio.run(registry.delete("drop01"))

        assert [link.code for link in asyncio.run(registry.list())] == ["keep01"]

    def test_code_reusable_after_delete(self, registry):
        asyncio.run(registry.create("AbC123", "https://x.io"))
        asyncio.run(registry.increment_click("AbC123"))
        asyncio.run(registry.delete("AbC123"))

        link = asyncio.run(registry.create("AbC123", "https://y.io"))

        assert link.url == "https://y.io"
        assert asyncio.run(registry.get("AbC123")).clicks == 0

    def test_exists(self, registry):
        assert asyncio.run(registry.exists("AbC123")) is False

        asyncio.run(registry.create("AbC123", "https://x.io"))

        assert asyncio.run(registry.exists("AbC123")) is True
