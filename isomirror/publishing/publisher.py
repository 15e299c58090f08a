from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..artifacts.checksums import GeneratedChecksums
from ..config import MirrorConfig
from ..infra.contracts import ReleaseStore
from ..infra.errors import MirrorError, PublishError
from ..infra.models import ArtifactReference, ReleaseRecord
from .notes import render_release_notes


class Publisher:
    """Creates the single release for a version. Never retries."""

    def __init__(self, store: ReleaseStore, config: MirrorConfig):
        self.store = store
        self.config = config

    def publish(
        self,
        ref: ArtifactReference,
        final_path: Path,
        checksums: GeneratedChecksums,
        *,
        now: Optional[datetime] = None,
    ) -> ReleaseRecord:
        assets = [Path(final_path), checksums.sha256_path, checksums.md5_path]
        for a in assets:
            if not a.is_file():
                raise PublishError(f"Release asset missing before publish: {a}")
        if Path(final_path).name != ref.final_name:
            raise PublishError(f"Final artifact {Path(final_path).name} does not match {ref.final_name}")

        title = self.config.release_title(ref.version)
        notes = render_release_notes(
            ref,
            heading=title,
            source_label=self.config.source_label,
            source_url=self.config.base_url,
            now=now or datetime.now(timezone.utc),
        )

        print(f"[publish] Creating release {ref.version} ({title}) with {len(assets)} assets")
        try:
            record = self.store.create(version_key=ref.version, title=title, notes=notes, assets=assets)
        except MirrorError:
            raise
        except Exception as e:
            raise PublishError(f"Failed to publish release {ref.version}: {e}") from e
        print(f"[publish] Release {record.version_key} created {record.url}".rstrip())
        return record
