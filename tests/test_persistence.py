import json
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

from favtube.database import create_db_engine, create_session_factory, init_db
from favtube.errors import DuplicateVideoError, PersistenceError
from favtube.models import UserLibraryRecord
from favtube.schemas import Playlist, UserLibrary, VideoRef
from favtube.services import DatabaseRepository, JsonFileRepository, PlaylistStore
from favtube.services import persistence


def _library() -> UserLibrary:
    playlist = Playlist(
        id="pl_1",
        name="Favorites",
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        items=[
            VideoRef(
                id="yt1",
                title="Song A",
                thumbnail_url="https://i.ytimg.com/vi/yt1/hqdefault.jpg",
                duration="3:45",
                view_count=1200,
                rating=4,
                added_at=datetime(2024, 5, 2, tzinfo=timezone.utc),
            )
        ],
    )
    return UserLibrary(playlists={playlist.id: playlist})


class JsonFileRepositoryTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.repository = JsonFileRepository(Path(self._tmp.name))

    def test_missing_file_loads_empty(self) -> None:
        self.assertEqual({}, self.repository.load_library("alice").playlists)

    def test_round_trip(self) -> None:
        self.repository.save_library("alice", _library())
        loaded = self.repository.load_library("alice")
        self.assertEqual(_library(), loaded)
        self.assertTrue(self.repository.path_for("alice").is_file())

    def test_corrupt_file_loads_empty(self) -> None:
        self.repository.path_for("alice").write_text("{not json", encoding="utf-8")
        self.assertEqual({}, self.repository.load_library("alice").playlists)

        self.repository.path_for("bob").write_text('{"playlists": [{"id": 3}]}', encoding="utf-8")
        self.assertEqual({}, self.repository.load_library("bob").playlists)

    def test_bare_list_of_playlists_is_accepted(self) -> None:
        self.repository.path_for("alice").write_text(
            '[{"id": "pl_x", "name": "Old", "items": [], "createdAt": null,'
            ' "created_at": "2024-01-01T00:00:00Z"}]',
            encoding="utf-8",
        )
        loaded = self.repository.load_library("alice")
        self.assertEqual(["pl_x"], list(loaded.playlists))

    def test_node_server_file_is_loaded_and_kept(self) -> None:
        document = [
            {
                "id": "pl_old",
                "name": "Old",
                "createdAt": "2023-03-01T10:00:00.000Z",
                "items": [
                    {
                        "type": "youtube",
                        "videoId": "abc",
                        "title": "Old Song",
                        "thumbnailUrl": "https://i.ytimg.com/vi/abc/hqdefault.jpg",
                        "duration": "4:01",
                        "views": "—",
                        "rating": 3,
                        "addedAt": "2023-03-02T10:00:00.000Z",
                    },
                    {
                        "id": "item_1a2b",
                        "type": "mp3",
                        "title": "Demo",
                        "fileUrl": "/uploads/alice/1700000000000_demo.mp3",
                        "rating": 0,
                        "addedAt": "2023-03-03T10:00:00.000Z",
                    },
                ],
            }
        ]
        self.repository.path_for("alice").write_text(json.dumps(document), encoding="utf-8")

        playlist = self.repository.load_library("alice").playlists["pl_old"]
        self.assertEqual(datetime(2023, 3, 1, 10, tzinfo=timezone.utc), playlist.created_at)

        song, upload = playlist.items
        self.assertEqual("abc", song.id)
        self.assertEqual("youtube", song.source)
        self.assertEqual("https://i.ytimg.com/vi/abc/hqdefault.jpg", song.thumbnail_url)
        self.assertEqual("4:01", song.duration)
        self.assertIsNone(song.view_count)
        self.assertEqual(3, song.rating)
        self.assertEqual("item_1a2b", upload.id)
        self.assertEqual("upload", upload.source)
        self.assertEqual("/uploads/alice/1700000000000_demo.mp3", upload.file_url)

        # A later mutation rewrites the file without losing the old playlist
        store = PlaylistStore(self.repository)
        store.create_playlist("alice", "New")
        with self.assertRaises(DuplicateVideoError):
            store.add_video("alice", "pl_old", VideoRef(id="abc", title="Again"))

        reloaded = self.repository.load_library("alice")
        self.assertEqual(["Old", "New"], [p.name for p in reloaded.playlists.values()])
        self.assertEqual(["abc", "item_1a2b"], [item.id for item in reloaded.playlists["pl_old"].items])

    def test_duplicate_video_ids_are_dropped_on_load(self) -> None:
        document = {
            "playlists": [
                {
                    "id": "pl_a",
                    "name": "A",
                    "created_at": "2024-01-01T00:00:00Z",
                    "items": [{"id": "v1", "title": "First"}, {"id": "v1", "title": "Again"}],
                },
                {
                    "id": "pl_b",
                    "name": "B",
                    "created_at": "2024-01-02T00:00:00Z",
                    "items": [{"id": "v1", "title": "Elsewhere"}, {"id": "v2", "title": "Other"}],
                },
            ]
        }
        self.repository.path_for("alice").write_text(json.dumps(document), encoding="utf-8")

        library = self.repository.load_library("alice")
        self.assertEqual(["First"], [item.title for item in library.playlists["pl_a"].items])
        self.assertEqual(["v2"], [item.id for item in library.playlists["pl_b"].items])
        playlist, item = library.find_video("v1")
        self.assertEqual(("pl_a", "First"), (playlist.id, item.title))

    def test_failed_write_keeps_previous_file(self) -> None:
        self.repository.save_library("alice", _library())
        before = self.repository.path_for("alice").read_text(encoding="utf-8")

        with patch.object(persistence.os, "replace", side_effect=OSError("disk full")):
            with self.assertRaises(PersistenceError):
                self.repository.save_library("alice", UserLibrary())

        self.assertEqual(before, self.repository.path_for("alice").read_text(encoding="utf-8"))
        leftovers = [p for p in self.repository.base_dir.iterdir() if p.suffix == ".tmp"]
        self.assertEqual([], leftovers)

    def test_store_persists_through_files(self) -> None:
        store = PlaylistStore(self.repository)
        playlist = store.create_playlist("alice", "Favorites")
        store.add_video("alice", playlist.id, VideoRef(id="yt1", title="Song A"))

        reopened = PlaylistStore(JsonFileRepository(Path(self._tmp.name)))
        self.assertTrue(reopened.is_video_favorited("alice", "yt1"))


class DatabaseRepositoryTestCase(unittest.TestCase):
    def setUp(self) -> None:
        engine = create_db_engine("sqlite://")
        init_db(engine)
        self.session_factory = create_session_factory(engine)
        self.repository = DatabaseRepository(self.session_factory)

    def test_missing_row_loads_empty(self) -> None:
        self.assertEqual({}, self.repository.load_library("alice").playlists)

    def test_round_trip_and_update(self) -> None:
        self.repository.save_library("alice", _library())
        self.assertEqual(_library(), self.repository.load_library("alice"))

        self.repository.save_library("alice", UserLibrary())
        self.assertEqual({}, self.repository.load_library("alice").playlists)

        with self.session_factory() as db:
            self.assertEqual(1, db.query(UserLibraryRecord).count())

    def test_corrupt_payload_loads_empty(self) -> None:
        with self.session_factory() as db:
            db.add(UserLibraryRecord(user_id="alice", payload="[[["))
            db.commit()
        self.assertEqual({}, self.repository.load_library("alice").playlists)


if __name__ == "__main__":
    unittest.main()
