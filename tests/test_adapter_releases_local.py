from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from _testutil import ensure_repo_on_path


class TestLocalReleaseStore(unittest.TestCase):
    def test_create_get_and_reject_duplicate(self) -> None:
        ensure_repo_on_path()

        from isomirror.infra.adapters.releases_local import LocalReleaseStore
        from isomirror.infra.errors import ConflictError

        with tempfile.TemporaryDirectory() as td:
            store = LocalReleaseStore(Path(td) / "releases")
            self.assertIsNone(store.get("2.7.2"))

            a = Path(td) / "img.iso"
            a.write_bytes(b"iso")
            b = Path(td) / "img.iso.sha256"
            b.write_text("x  img.iso\n", encoding="utf-8")

            rec = store.create(version_key="2.7.2", title="T 2.7.2", notes="n", assets=[a, b])
            self.assertEqual(rec.assets, ("img.iso", "img.iso.sha256"))
            self.assertTrue(rec.url.startswith("file://"))

            got = store.get("2.7.2")
            self.assertIsNotNone(got)
            self.assertEqual(got.title, "T 2.7.2")
            self.assertEqual(got.assets, ("img.iso", "img.iso.sha256"))
            self.assertEqual((Path(td) / "releases" / "2.7.2" / "img.iso").read_bytes(), b"iso")

            with self.assertRaises(ConflictError):
                store.create(version_key="2.7.2", title="again", notes="", assets=[a])
            self.assertEqual(store.get("2.7.2").title, "T 2.7.2")

    def test_missing_asset_leaves_no_release(self) -> None:
        ensure_repo_on_path()

        from isomirror.infra.adapters.releases_local import LocalReleaseStore
        from isomirror.infra.errors import PublishError

        with tempfile.TemporaryDirectory() as td:
            base = Path(td) / "releases"
            store = LocalReleaseStore(base)
            with self.assertRaises(PublishError):
                store.create(version_key="1.0.0", title="t", notes="", assets=[Path(td) / "missing.iso"])
            self.assertIsNone(store.get("1.0.0"))
            self.assertEqual(list(base.iterdir()), [])

    def test_rejects_path_like_keys(self) -> None:
        ensure_repo_on_path()

        from isomirror.infra.adapters.releases_local import LocalReleaseStore
        from isomirror.infra.errors import ValidationError

        with tempfile.TemporaryDirectory() as td:
            store = LocalReleaseStore(Path(td))
            for bad in ("", "..", "a/b"):
                with self.assertRaises(ValidationError):
                    store.get(bad)


if __name__ == "__main__":
    unittest.main()
