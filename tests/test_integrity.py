from __future__ import annotations

import hashlib
import tempfile
import unittest
from pathlib import Path

from _testutil import ensure_repo_on_path

NAME = "Product-CE-2.7.2-RELEASE-amd64.iso.gz"


class TestIntegrityVerifier(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)
        self.artifact = self.root / NAME
        self.artifact.write_bytes(b"compressed-bytes")
        self.digest = hashlib.sha256(b"compressed-bytes").hexdigest()
        self.sidecar = self.root / (NAME + ".sha256")

    def tearDown(self) -> None:
        self._td.cleanup()

    def test_gnu_format(self) -> None:
        from isomirror.artifacts.integrity import verify_sidecar

        self.sidecar.write_text(f"{self.digest}  {NAME}\n", encoding="utf-8")
        self.assertEqual(verify_sidecar(self.artifact, self.sidecar), self.digest)

    def test_bsd_format_uppercase_hex(self) -> None:
        from isomirror.artifacts.integrity import verify_sidecar

        self.sidecar.write_text(f"SHA256 ({NAME}) = {self.digest.upper()}\n", encoding="utf-8")
        self.assertEqual(verify_sidecar(self.artifact, self.sidecar), self.digest)

    def test_multi_entry_sidecar_uses_matching_name(self) -> None:
        from isomirror.artifacts.integrity import verify_sidecar

        other = hashlib.sha256(b"other").hexdigest()
        self.sidecar.write_text(f"{other}  other.iso.gz\n{self.digest} *{NAME}\n", encoding="utf-8")
        self.assertEqual(verify_sidecar(self.artifact, self.sidecar), self.digest)

    def test_mismatch_raises(self) -> None:
        from isomirror.artifacts.integrity import verify_sidecar
        from isomirror.infra.errors import IntegrityError

        self.sidecar.write_text(f"{hashlib.sha256(b'tampered').hexdigest()}  {NAME}\n", encoding="utf-8")
        with self.assertRaises(IntegrityError):
            verify_sidecar(self.artifact, self.sidecar)

    def test_malformed_or_missing_entry_raises(self) -> None:
        from isomirror.artifacts.integrity import verify_sidecar
        from isomirror.infra.errors import IntegrityError

        self.sidecar.write_text("abc123  " + NAME + "\n", encoding="utf-8")
        with self.assertRaises(IntegrityError):
            verify_sidecar(self.artifact, self.sidecar)

        self.sidecar.write_text(f"{self.digest}  a.gz\n{self.digest}  b.gz\n", encoding="utf-8")
        with self.assertRaises(IntegrityError):
            verify_sidecar(self.artifact, self.sidecar)

        self.sidecar.write_text("<html>404</html>\n", encoding="utf-8")
        with self.assertRaises(IntegrityError):
            verify_sidecar(self.artifact, self.sidecar)


if __name__ == "__main__":
    unittest.main()
