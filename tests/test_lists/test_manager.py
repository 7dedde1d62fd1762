"""Tests for ReadingListManager."""

import pytest
from sqlalchemy import func, select

from shelflists.lists.models import ReadingList, ReadingListBook
from shelflists.lists.schemas import ListType, ListVisibility
from shelflists.results import ErrorKind

from ..conftest import OTHER_OWNER, OWNER


class TestCreateList:
    """Tests for creating reading lists."""

    def test_create_list_defaults(self, list_manager):
        """Test creating a list with only a title."""
        result = list_manager.create_list(OWNER, "  Summer Reading  ")

        assert result.success
        created = result.data
        assert created.title == "Summer Reading"
        assert created.owner_id == OWNER
        assert created.visibility == ListVisibility.PRIVATE
        assert created.list_type == ListType.STANDARD
        assert created.year is None
        assert created.description is None

    def test_create_list_with_all_fields(self, list_manager):
        """Test creating a list with description and visibility."""
        result = list_manager.create_list(
            OWNER,
            "Classics",
            description="  Old but gold  ",
            visibility=ListVisibility.PUBLIC,
        )

        assert result.data.description == "Old but gold"
        assert result.data.visibility == ListVisibility.PUBLIC

    def test_blank_description_stored_as_none(self, list_manager):
        result = list_manager.create_list(OWNER, "Classics", description="   ")

        assert result.data.description is None

    @pytest.mark.parametrize("title", ["", "   ", "x" * 201])
    def test_invalid_title(self, list_manager, title):
        """Test that empty and overlong titles are rejected."""
        result = list_manager.create_list(OWNER, title)

        assert not result
        assert result.error == ErrorKind.VALIDATION_ERROR

    def test_title_at_limit(self, list_manager):
        assert list_manager.create_list(OWNER, "x" * 200).success

    def test_description_too_long(self, list_manager):
        result = list_manager.create_list(OWNER, "List", description="x" * 2001)

        assert result.error == ErrorKind.VALIDATION_ERROR

    def test_favorites_year_requires_year(self, list_manager):
        result = list_manager.create_list(OWNER, "Faves", list_type=ListType.FAVORITES_YEAR)

        assert result.error == ErrorKind.VALIDATION_ERROR
        assert "Year is required" in result.message

    def test_year_only_on_favorites_year(self, list_manager):
        result = list_manager.create_list(OWNER, "Faves", year="2024")

        assert result.error == ErrorKind.VALIDATION_ERROR

    def test_unauthenticated(self, list_manager):
        for owner in (None, "", "   "):
            result = list_manager.create_list(owner, "List")
            assert result.error == ErrorKind.UNAUTHENTICATED


class TestFavoritesUniqueness:
    """Tests for one favorites list per owner (and year)."""

    def test_one_all_time_list_per_owner(self, list_manager):
        first = list_manager.create_list(OWNER, "Faves", list_type=ListType.FAVORITES_ALL)
        second = list_manager.create_list(OWNER, "Faves 2", list_type=ListType.FAVORITES_ALL)
        third = list_manager.create_list(OWNER, "Faves 3", list_type=ListType.FAVORITES_ALL)

        assert first.success
        assert second.error == ErrorKind.UNIQUENESS_VIOLATION
        assert third.error == ErrorKind.UNIQUENESS_VIOLATION

    def test_one_year_list_per_owner_and_year(self, list_manager):
        first = list_manager.create_list(
            OWNER, "2024", list_type=ListType.FAVORITES_YEAR, year="2024"
        )
        second = list_manager.create_list(
            OWNER, "2024 again", list_type=ListType.FAVORITES_YEAR, year="2024"
        )
        other_year = list_manager.create_list(
            OWNER, "2023", list_type=ListType.FAVORITES_YEAR, year="2023"
        )

        assert first.success
        assert second.error == ErrorKind.UNIQUENESS_VIOLATION
        assert "2024" in second.message
        assert other_year.success

    def test_other_owners_unaffected(self, list_manager):
        list_manager.create_list(OWNER, "Faves", list_type=ListType.FAVORITES_ALL)

        result = list_manager.create_list(OTHER_OWNER, "Faves", list_type=ListType.FAVORITES_ALL)

        assert result.success

    def test_standard_lists_not_unique(self, list_manager):
        assert list_manager.create_list(OWNER, "Same").success
        assert list_manager.create_list(OWNER, "Same").success

    def test_race_caught_by_unique_index(self, list_manager, monkeypatch):
        """A creation that slips past the check is still refused."""
        list_manager.create_list(OWNER, "Faves", list_type=ListType.FAVORITES_ALL)
        monkeypatch.setattr(
            "shelflists.lists.manager.find_favorites_list", lambda *args: None
        )

        result = list_manager.create_list(OWNER, "Faves", list_type=ListType.FAVORITES_ALL)

        assert result.error == ErrorKind.UNIQUENESS_VIOLATION

    def test_year_race_caught_by_unique_index(self, list_manager, db, monkeypatch):
        list_manager.create_list(OWNER, "2024", list_type=ListType.FAVORITES_YEAR, year="2024")
        monkeypatch.setattr(
            "shelflists.lists.manager.find_favorites_list", lambda *args: None
        )

        result = list_manager.create_list(
            OWNER, "2024", list_type=ListType.FAVORITES_YEAR, year="2024"
        )

        assert result.error == ErrorKind.UNIQUENESS_VIOLATION
        with db.get_session() as session:
            count = session.execute(select(func.count(ReadingList.id))).scalar_one()
        assert count == 1


class TestUpdateList:
    """Tests for updating list metadata."""

    def test_update_fields(self, list_manager, standard_list):
        result = list_manager.update_list(
            OWNER,
            standard_list.id,
            title="  Renamed ",
            description="New description",
            visibility=ListVisibility.UNLISTED,
            cover_image="https://example.com/cover.jpg",
        )

        assert result.success
        assert result.data.title == "Renamed"
        assert result.data.description == "New description"
        assert result.data.visibility == ListVisibility.UNLISTED
        assert result.data.cover_image == "https://example.com/cover.jpg"

    def test_partial_update_keeps_other_fields(self, list_manager):
        created = list_manager.create_list(OWNER, "Keep", description="Stay").unwrap()

        result = list_manager.update_list(OWNER, created.id, visibility=ListVisibility.PUBLIC)

        assert result.data.title == "Keep"
        assert result.data.description == "Stay"

    def test_empty_description_clears(self, list_manager):
        created = list_manager.create_list(OWNER, "Keep", description="Stay").unwrap()

        result = list_manager.update_list(OWNER, created.id, description="  ")

        assert result.data.description is None

    def test_type_and_year_unchanged(self, list_manager):
        created = list_manager.create_list(
            OWNER, "2024", list_type=ListType.FAVORITES_YEAR, year="2024"
        ).unwrap()

        result = list_manager.update_list(OWNER, created.id, title="Best of 2024")

        assert result.data.list_type == ListType.FAVORITES_YEAR
        assert result.data.year == "2024"

    def test_invalid_title(self, list_manager, standard_list):
        result = list_manager.update_list(OWNER, standard_list.id, title="   ")

        assert result.error == ErrorKind.VALIDATION_ERROR

    def test_not_owner(self, list_manager, standard_list):
        result = list_manager.update_list(OTHER_OWNER, standard_list.id, title="Mine now")

        assert result.error == ErrorKind.OWNERSHIP_ERROR
        assert list_manager.get_list(OWNER, standard_list.id).data.title == "To Read"

    def test_not_found(self, list_manager):
        result = list_manager.update_list(OWNER, "00000000-0000-0000-0000-000000000000", title="x")

        assert result.error == ErrorKind.NOT_FOUND


class TestDeleteList:
    """Tests for deleting lists."""

    def test_delete_cascades_memberships(
        self, db, list_manager, membership_manager, standard_list, make_book
    ):
        book = make_book()
        membership_manager.add_membership(OWNER, standard_list.id, book.id)

        result = list_manager.delete_list(OWNER, standard_list.id)

        assert result.success
        assert list_manager.get_list(OWNER, standard_list.id).error == ErrorKind.NOT_FOUND
        with db.get_session() as session:
            remaining = session.execute(select(func.count(ReadingListBook.id))).scalar_one()
        assert remaining == 0
        # The book itself survives
        assert db.get_book(book.id) is not None

    def test_delete_not_owner(self, list_manager, standard_list):
        result = list_manager.delete_list(OTHER_OWNER, standard_list.id)

        assert result.error == ErrorKind.OWNERSHIP_ERROR
        assert list_manager.get_list(OWNER, standard_list.id).success

    def test_delete_not_found(self, list_manager):
        result = list_manager.delete_list(OWNER, "missing")

        assert result.error == ErrorKind.NOT_FOUND


class TestListLookups:
    """Tests for reading lists back."""

    def test_get_list_not_owner(self, list_manager, standard_list):
        assert list_manager.get_list(OTHER_OWNER, standard_list.id).error == (
            ErrorKind.OWNERSHIP_ERROR
        )

    def test_get_user_lists(self, list_manager, membership_manager, make_book):
        first = list_manager.create_list(OWNER, "First").unwrap()
        list_manager.create_list(OWNER, "Second")
        list_manager.create_list(OTHER_OWNER, "Not mine")
        membership_manager.add_membership(OWNER, first.id, make_book().id)
        list_manager.update_list(OWNER, first.id, title="First, updated")

        result = list_manager.get_user_lists(OWNER)

        assert result.success
        titles = [summary.title for summary in result.data]
        assert titles == ["First, updated", "Second"]
        assert result.data[0].book_count == 1
        assert result.data[1].book_count == 0

    def test_get_list_with_books_in_position_order(
        self, list_manager, membership_manager, standard_list, make_book
    ):
        late = make_book(title="Late")
        early = make_book(title="Early")
        membership_manager.add_membership(OWNER, standard_list.id, late.id, position=500)
        membership_manager.add_membership(OWNER, standard_list.id, early.id, position=50)

        result = list_manager.get_list_with_books(OWNER, standard_list.id)

        assert result.success
        assert [book.book_title for book in result.data.books] == ["Early", "Late"]
        assert [book.position for book in result.data.books] == [50, 500]
