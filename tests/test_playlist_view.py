import itertools
import unittest
from datetime import datetime, timedelta, timezone

from favtube.errors import ValidationError
from favtube.schemas import VideoRef
from favtube.services import SortMode, project


def _video(video_id: str, title: str, rating: int = 0, minutes: int = 0) -> VideoRef:
    added = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes)
    return VideoRef(id=video_id, title=title, rating=rating, added_at=added)


class ProjectTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.items = [
            _video("c", "charlie", rating=2, minutes=1),
            _video("a", "Alpha", rating=5, minutes=2),
            _video("e", "Éclair", rating=2, minutes=3),
            _video("b", "bravo", rating=0, minutes=4),
        ]

    def ids(self, items) -> list:
        return [item.id for item in items]

    def test_insertion_order_is_unchanged(self) -> None:
        self.assertEqual(["c", "a", "e", "b"], self.ids(project(self.items)))

    def test_title_ascending_ignores_case_and_accents(self) -> None:
        result = project(self.items, "", SortMode.TITLE_ASCENDING)
        self.assertEqual(["a", "b", "c", "e"], self.ids(result))

    def test_title_ties_keep_insertion_order(self) -> None:
        items = [_video("x1", "Same"), _video("x2", "Other"), _video("x3", "Same")]
        result = project(items, "", SortMode.TITLE_ASCENDING)
        self.assertEqual(["x2", "x1", "x3"], self.ids(result))

    def test_rating_descending_breaks_ties_by_title(self) -> None:
        result = project(self.items, "", SortMode.RATING_DESCENDING)
        self.assertEqual(["a", "c", "e", "b"], self.ids(result))

    def test_added_descending_is_newest_first(self) -> None:
        result = project(self.items, "", SortMode.ADDED_DESCENDING)
        self.assertEqual(["b", "e", "a", "c"], self.ids(result))

    def test_filter_is_case_insensitive_substring(self) -> None:
        self.assertEqual(["c", "a"], self.ids(project(self.items, "HA")))
        self.assertEqual(["a"], self.ids(project(self.items, "  alp ")))
        self.assertEqual([], self.ids(project(self.items, "zzz")))

    def test_filter_then_sort(self) -> None:
        result = project(self.items, "a", SortMode.TITLE_ASCENDING)
        self.assertEqual(["a", "b", "c", "e"], self.ids(result))
        result = project(self.items, "r", SortMode.RATING_DESCENDING)
        self.assertEqual(["c", "e", "b"], self.ids(result))

    def test_projection_is_pure(self) -> None:
        original = list(self.items)
        first = project(self.items, "a", SortMode.RATING_DESCENDING)
        second = project(self.items, "a", SortMode.RATING_DESCENDING)
        self.assertEqual(first, second)
        self.assertEqual(original, self.items)

    def test_sorts_do_not_depend_on_input_order(self) -> None:
        for mode in (SortMode.TITLE_ASCENDING, SortMode.RATING_DESCENDING):
            expected = project(self.items, "", mode)
            for permutation in itertools.permutations(self.items):
                self.assertEqual(expected, project(list(permutation), "", mode))

    def test_parse_sort_mode(self) -> None:
        self.assertEqual(SortMode.TITLE_ASCENDING, SortMode.parse("title"))
        self.assertEqual(SortMode.INSERTION_ORDER, SortMode.parse(""))
        with self.assertRaises(ValidationError):
            SortMode.parse("views")


if __name__ == "__main__":
    unittest.main()
