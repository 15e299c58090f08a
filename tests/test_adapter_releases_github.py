from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from _testutil import ensure_repo_on_path


class FakeGhError(RuntimeError):
    def __init__(self, stderr: str):
        super().__init__(stderr)
        self.stderr = stderr


class FakeGitHubReleaseIO:
    def __init__(self):
        self.releases = {}
        self.create_calls = []
        self.delete_calls = []
        self.fail_create_with = ""
        self.fail_view_with = ""
        self.leave_draft_on_failure = False

    def view(self, *, tag: str):
        if self.fail_view_with:
            raise FakeGhError(self.fail_view_with)
        return self.releases.get(tag)

    def create(self, *, tag: str, title: str, notes: str, file_paths):
        self.create_calls.append((tag, [Path(p).name for p in file_paths]))
        if self.fail_create_with:
            if self.leave_draft_on_failure:
                self.releases[tag] = {"tagName": tag, "name": title, "isDraft": True, "assets": []}
            raise FakeGhError(self.fail_create_with)
        if tag in self.releases:
            raise FakeGhError(f"HTTP 422: Validation Failed (tag_name already exists) {tag}")
        self.releases[tag] = {
            "tagName": tag,
            "name": title,
            "body": notes,
            "url": f"https://github.com/o/r/releases/tag/{tag}",
            "isDraft": False,
            "assets": [{"name": Path(p).name} for p in file_paths],
        }
        return f"https://github.com/o/r/releases/tag/{tag}"

    def delete(self, *, tag: str) -> None:
        self.delete_calls.append(tag)
        self.releases.pop(tag, None)


class TestGitHubReleaseStore(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()

        from isomirror.infra.adapters.releases_github import GitHubReleaseStore, GitHubReleaseStoreSettings

        self.fake = FakeGitHubReleaseIO()
        self.store = GitHubReleaseStore(settings=GitHubReleaseStoreSettings(repo="o/r"), io=self.fake)
        self._td = tempfile.TemporaryDirectory()
        self.asset = Path(self._td.name) / "img.iso"
        self.asset.write_bytes(b"iso")

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_get_and_create(self) -> None:
        self.assertIsNone(self.store.get("2.7.2"))

        rec = self.store.create(version_key="2.7.2", title="pfSense CE 2.7.2", notes="body", assets=[self.asset])
        self.assertEqual(rec.url, "https://github.com/o/r/releases/tag/2.7.2")
        self.assertEqual(rec.assets, ("img.iso",))

        got = self.store.get("2.7.2")
        self.assertEqual(got.version_key, "2.7.2")
        self.assertEqual(got.title, "pfSense CE 2.7.2")
        self.assertEqual(got.assets, ("img.iso",))

    def test_duplicate_is_conflict_and_existing_release_kept(self) -> None:
        from isomirror.infra.errors import ConflictError

        self.store.create(version_key="2.7.2", title="t", notes="", assets=[self.asset])
        with self.assertRaises(ConflictError):
            self.store.create(version_key="2.7.2", title="t", notes="", assets=[self.asset])
        self.assertEqual(self.fake.delete_calls, [])
        self.assertIsNotNone(self.store.get("2.7.2"))

    def test_upload_failure_removes_partial_release(self) -> None:
        from isomirror.infra.errors import ConflictError, PublishError

        self.fake.fail_create_with = "upload failed: connection reset"
        self.fake.leave_draft_on_failure = True
        with self.assertRaises(PublishError) as ctx:
            self.store.create(version_key="2.7.2", title="t", notes="", assets=[self.asset])
        self.assertNotIsInstance(ctx.exception, ConflictError)
        self.assertEqual(self.fake.delete_calls, ["2.7.2"])
        self.assertNotIn("2.7.2", self.fake.releases)

    def test_failure_with_nothing_left_behind_deletes_nothing(self) -> None:
        from isomirror.infra.errors import ConflictError, PublishError

        self.fake.fail_create_with = "HTTP 502: Bad Gateway"
        with self.assertRaises(PublishError) as ctx:
            self.store.create(version_key="2.7.2", title="t", notes="", assets=[self.asset])
        self.assertNotIsInstance(ctx.exception, ConflictError)
        self.assertEqual(self.fake.delete_calls, [])

    def test_generic_failure_never_deletes_a_published_release(self) -> None:
        from isomirror.infra.errors import ConflictError

        published = {
            "tagName": "2.7.2",
            "name": "pfSense CE 2.7.2",
            "url": "https://github.com/o/r/releases/tag/2.7.2",
            "isDraft": False,
            "assets": [{"name": "img.iso"}],
        }
        self.fake.releases["2.7.2"] = published
        self.fake.fail_create_with = "HTTP 502: Bad Gateway"

        with self.assertRaises(ConflictError):
            self.store.create(version_key="2.7.2", title="t", notes="", assets=[self.asset])
        self.assertEqual(self.fake.delete_calls, [])
        self.assertIs(self.fake.releases["2.7.2"], published)

    def test_uninspectable_tag_after_failure_deletes_nothing(self) -> None:
        from isomirror.infra.errors import PublishError

        self.fake.fail_create_with = "HTTP 502: Bad Gateway"
        self.fake.leave_draft_on_failure = True
        self.fake.fail_view_with = "HTTP 503: Service Unavailable"
        with self.assertRaises(PublishError):
            self.store.create(version_key="2.7.2", title="t", notes="", assets=[self.asset])
        self.assertEqual(self.fake.delete_calls, [])

    def test_query_failure_is_registry_error(self) -> None:
        from isomirror.infra.errors import RegistryError

        self.fake.fail_view_with = "HTTP 401: Bad credentials"
        with self.assertRaises(RegistryError):
            self.store.get("2.7.2")

    def test_missing_token_without_injected_io(self) -> None:
        from isomirror.infra.adapters.releases_github import GitHubReleaseStore, GitHubReleaseStoreSettings
        from isomirror.infra.errors import ValidationError

        saved = {k: os.environ.pop(k, None) for k in ("GITHUB_TOKEN", "GH_TOKEN")}
        try:
            store = GitHubReleaseStore(settings=GitHubReleaseStoreSettings(repo="o/r"))
            with self.assertRaises(ValidationError):
                store.get("2.7.2")
        finally:
            for k, v in saved.items():
                if v is not None:
                    os.environ[k] = v


if __name__ == "__main__":
    unittest.main()
