import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
import tempfile

from memreport.errors import ArtifactConflictError, ArtifactExpiredError, ArtifactNotFoundError
from tools.artifacts import ArtifactStorage, expand_upload_paths


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


class TestArtifactStorage(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)
        self.workspace = self.root / "ws"
        (self.workspace / "dist").mkdir(parents=True)
        self.binary = self.workspace / "dist" / "nargo"
        self.binary.write_bytes(b"\x7fELF fake")
        self.clock = FakeClock()
        self.storage = ArtifactStorage(self.root / "artifacts", "run1", clock=self.clock)

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_upload_then_download_preserves_relative_layout(self) -> None:
        info = self.storage.upload("nargo", [self.binary], retention_days=3)
        self.assertEqual(info.files, ("nargo",))
        self.assertEqual(info.expires_at - info.created_at, timedelta(days=3))

        dest = self.root / "job2" / "nargo"
        files = self.storage.download("nargo", dest)
        self.assertEqual(files, [dest / "nargo"])
        self.assertEqual((dest / "nargo").read_bytes(), b"\x7fELF fake")

    def test_download_from_other_run_scope(self) -> None:
        self.storage.upload("nargo", [self.binary], retention_days=3)
        later = ArtifactStorage(self.root / "artifacts", "run2", clock=self.clock)

        with self.assertRaises(ArtifactNotFoundError):
            later.download("nargo", self.root / "out")
        later.download("nargo", self.root / "out", run_id="run1")
        self.assertTrue((self.root / "out" / "nargo").is_file())

    def test_latest_run_id_ignores_runs_without_artifacts(self) -> None:
        self.assertIsNone(self.storage.latest_run_id())

        self.storage.upload("nargo", [self.binary], retention_days=3)
        ArtifactStorage(self.root / "artifacts", "run3", clock=self.clock).upload("logs", [self.binary], retention_days=3)
        # a run directory with nothing stored in it
        (self.root / "artifacts" / "run4").mkdir()

        self.assertEqual(self.storage.latest_run_id(), "run3")
        self.assertEqual(self.storage.latest_run_id("nargo"), "run1")

    def test_expired_artifact_cannot_be_downloaded(self) -> None:
        self.storage.upload("nargo", [self.binary], retention_days=3)
        self.clock.now += timedelta(days=3, seconds=1)
        with self.assertRaises(ArtifactExpiredError):
            self.storage.download("nargo", self.root / "out")

    def test_purge_removes_only_expired(self) -> None:
        self.storage.upload("old", [self.binary], retention_days=1)
        self.storage.upload("fresh", [self.binary], retention_days=90)
        self.clock.now += timedelta(days=2)

        removed = self.storage.purge_expired()

        self.assertEqual([i.name for i in removed], ["old"])
        self.assertEqual([i.name for i in self.storage.list()], ["fresh"])

    def test_reupload_same_name_conflicts(self) -> None:
        self.storage.upload("nargo", [self.binary], retention_days=3)
        with self.assertRaises(ArtifactConflictError):
            self.storage.upload("nargo", [self.binary], retention_days=3)

    def test_retention_bounds(self) -> None:
        for days in (0, 91):
            with self.assertRaises(ValueError):
                self.storage.upload(f"a{days}", [self.binary], retention_days=days)

    def test_missing_artifact(self) -> None:
        with self.assertRaises(ArtifactNotFoundError):
            self.storage.info("nope")

    def test_expand_upload_paths(self) -> None:
        (self.workspace / "dist" / "sub").mkdir()
        (self.workspace / "dist" / "sub" / "x.txt").write_text("x", encoding="utf-8")

        self.assertEqual(expand_upload_paths(self.workspace, ["./dist/nargo"]), [self.binary])
        self.assertEqual(
            expand_upload_paths(self.workspace, ["dist"]),
            sorted([self.binary, self.workspace / "dist" / "sub" / "x.txt"]),
        )
        self.assertEqual(expand_upload_paths(self.workspace, ["missing/*"]), [])
