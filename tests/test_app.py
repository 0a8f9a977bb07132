import io
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from rich.console import Console

from uploadstore import app
from uploadstore.config import StorageProperties
from uploadstore.storage_service import FileSystemStorageService
from uploadstore.uploads import FileUpload


class _AppTestCase(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.base = Path(self._td.name)
        self.storage = FileSystemStorageService(StorageProperties(location=self.base / "uploads"))
        self.output = io.StringIO()
        console_patch = patch.object(app, "console", Console(file=self.output, width=160))
        console_patch.start()
        self.addCleanup(console_patch.stop)
        self.addCleanup(self._td.cleanup)

    def printed(self) -> str:
        return self.output.getvalue()


class TestUploadFlow(_AppTestCase):
    def test_upload_copies_local_file_under_chosen_name(self):
        source = self.base / "draft.txt"
        source.write_bytes(b"draft body")
        with patch.object(app.Prompt, "ask", side_effect=[str(source), "published.txt"]):
            stored = app.handle_file_upload(self.storage)
        self.assertEqual(stored, self.storage.root_location / "published.txt")
        self.assertEqual(stored.read_bytes(), b"draft body")
        self.assertIn("Upload Success", self.printed())

    def test_missing_source_is_reported(self):
        with patch.object(app.Prompt, "ask", side_effect=[str(self.base / "nope.txt")]):
            self.assertIsNone(app.handle_file_upload(self.storage))
        self.assertIn("File not found", self.printed())

    def test_storage_errors_are_rendered_not_raised(self):
        source = self.base / "evil.txt"
        source.write_bytes(b"x")
        with patch.object(app.Prompt, "ask", side_effect=[str(source), "../evil.txt"]):
            self.assertIsNone(app.handle_file_upload(self.storage))
        self.assertIn("outside current directory", self.printed())
        self.assertEqual((self.base / "evil.txt").read_bytes(), b"x")
        self.assertEqual(list(self.storage.load_all()), [])

    def test_resolve_upload_path_rejects_directories_and_blanks(self):
        path, error = app._resolve_upload_path("   ")
        self.assertIsNone(path)
        self.assertIn("Empty path", error)
        path, error = app._resolve_upload_path(str(self.base))
        self.assertIsNone(path)
        self.assertIn("not a regular file", error)


class TestListAndDownloadFlows(_AppTestCase):
    def test_list_returns_sorted_names(self):
        for name in ("b.txt", "a.txt"):
            self.storage.store(FileUpload.from_bytes(name, b"data"))
        names = app.list_stored_files(self.storage)
        self.assertEqual(names, [Path("a.txt"), Path("b.txt")])
        self.assertIn("Stored Files", self.printed())

    def test_list_reports_empty_storage(self):
        self.assertEqual(app.list_stored_files(self.storage), [])
        self.assertIn("No files stored yet", self.printed())

    def test_download_writes_resource_bytes(self):
        self.storage.store(FileUpload.from_bytes("report.csv", b"a,b\n1,2\n"))
        destination = self.base / "out.csv"
        with patch.object(app.Prompt, "ask", side_effect=["report.csv", str(destination)]):
            result = app.handle_file_download(self.storage)
        self.assertEqual(result, destination)
        self.assertEqual(destination.read_bytes(), b"a,b\n1,2\n")

    def test_download_of_unknown_file_is_reported(self):
        with patch.object(app.Prompt, "ask", side_effect=["ghost.txt"]):
            self.assertIsNone(app.handle_file_download(self.storage))
        self.assertIn("Could not read file: ghost.txt", self.printed())


class TestPurgeFlow(_AppTestCase):
    def test_confirmed_purge_empties_and_recreates_root(self):
        self.storage.store(FileUpload.from_bytes("a.txt", b"a"))
        with patch.object(app.Confirm, "ask", return_value=True):
            self.assertTrue(app.handle_purge(self.storage))
        self.assertTrue(self.storage.root_location.is_dir())
        self.assertEqual(list(self.storage.load_all()), [])

    def test_cancelled_purge_keeps_files(self):
        self.storage.store(FileUpload.from_bytes("a.txt", b"a"))
        with patch.object(app.Confirm, "ask", return_value=False):
            self.assertFalse(app.handle_purge(self.storage))
        self.assertEqual(list(self.storage.load_all()), [Path("a.txt")])
        self.assertIn("Purge cancelled", self.printed())


class TestMainLoop(_AppTestCase):
    def test_menu_runs_until_exit(self):
        props = StorageProperties(location=self.base / "main-root")
        with patch.object(app, "configure_logging") as fake_configure, patch.object(
            app, "StorageProperties"
        ) as fake_properties, patch.object(app.Prompt, "ask", side_effect=["2", "5"]):
            fake_properties.from_env.return_value = props
            with self.assertRaises(SystemExit) as ctx:
                app.main()
        self.assertEqual(ctx.exception.code, 0)
        fake_configure.assert_called_once()
        self.assertTrue((self.base / "main-root").is_dir())
        self.assertIn("No files stored yet", self.printed())

    def test_init_failure_exits_with_error(self):
        blocker = self.base / "blocker"
        blocker.write_text("file, not dir", encoding="utf-8")
        props = StorageProperties(location=blocker)
        with patch.object(app, "configure_logging"), patch.object(app, "StorageProperties") as fake_properties:
            fake_properties.from_env.return_value = props
            with self.assertRaises(SystemExit) as ctx:
                app.main()
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("Could not initialize storage", self.printed())


if __name__ == "__main__":
    unittest.main()
