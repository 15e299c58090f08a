"""Discover-then-publish pipeline.

One run: read the upstream listing, pick the newest artifact, stop early if its
version is already released, otherwise download, verify, decompress, checksum
and publish it. Stages run strictly in sequence and the first failure ends the
run. Downloaded and generated files live in a TransientWorkspace that is cleared
on every exit path.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..artifacts.checksums import generate_checksums
from ..artifacts.integrity import verify_sidecar
from ..artifacts.transform import decompress_gzip
from ..config import MirrorConfig
from ..discovery.listing import build_artifact_pattern, extract_candidates
from ..discovery.versions import select_latest
from ..infra.contracts import ReleaseStore
from ..infra.errors import TransformError
from ..infra.factory import build_release_store
from ..infra.models import ArtifactReference, RunSummary
from ..publishing.publisher import Publisher
from ..transfer.fetcher import Fetcher, RetryPolicy, build_session
from ..utils.fs import TransientWorkspace


def build_fetcher(config: MirrorConfig) -> Fetcher:
    fs = config.fetch
    return Fetcher(
        policy=RetryPolicy(max_attempts=fs.max_attempts, delay_seconds=fs.delay_seconds),
        session=build_session(
            transport_retries=fs.transport_retries,
            transport_backoff_seconds=fs.transport_backoff_seconds,
        ),
        timeout_seconds=fs.timeout_seconds,
    )


def discover_latest(config: MirrorConfig, fetcher: Fetcher) -> ArtifactReference:
    art = config.artifact
    print(f"[discover] Discovering latest {art.product} version at {config.base_url}/")
    body = fetcher.fetch_text(config.base_url + "/")
    pattern = build_artifact_pattern(
        product=art.product,
        edition=art.edition,
        channel=art.channel,
        arch=art.arch,
        extension=art.extension,
    )
    names = extract_candidates(body, pattern)
    ref = select_latest(names, pattern, base_url=config.base_url)
    print(f"[discover] Found version: {ref.version}")
    print(f"[discover] Artifact: {ref.final_name}")
    return ref


def failed_summary(error: BaseException, reference: Optional[ArtifactReference] = None) -> RunSummary:
    """Summary for a run that stopped on error, before or after discovery."""
    return RunSummary(
        outcome="failed",
        version=reference.version if reference else "",
        final_name=reference.final_name if reference else "",
        error=f"{type(error).__name__}: {error}",
    )


class MirrorRun:
    """A single invocation of the pipeline.

    `reference` is set as soon as discovery succeeds so a caller can report which
    version a failed run was working on.
    """

    def __init__(
        self,
        config: MirrorConfig,
        *,
        store: Optional[ReleaseStore] = None,
        fetcher: Optional[Fetcher] = None,
    ):
        self.config = config
        self.store = store if store is not None else build_release_store(
            config.release_store.kind, config.release_store.settings
        )
        self.fetcher = fetcher if fetcher is not None else build_fetcher(config)
        self.reference: Optional[ArtifactReference] = None

    def execute(self, *, now: Optional[datetime] = None) -> RunSummary:
        with TransientWorkspace(self.config.work_dir) as ws:
            ref = discover_latest(self.config, self.fetcher)
            self.reference = ref

            print(f"[registry] Checking if release {ref.version} already exists...")
            existing = self.store.get(ref.version)
            if existing is not None:
                print(f"[registry] Release {ref.version} already exists, skipping")
                return RunSummary(
                    outcome="skipped",
                    version=ref.version,
                    final_name=ref.final_name,
                    release_url=existing.url,
                )
            print(f"[registry] New release {ref.version} detected, proceeding")

            compressed = self.fetcher.fetch_to_file(ref.download_url, ws.path(ref.compressed_name))
            sidecar = self.fetcher.fetch_to_file(ref.checksum_url, ws.path(ref.fetched_sidecar_name))

            verify_sidecar(compressed, sidecar, "sha256")

            result = decompress_gzip(compressed)
            if result.path.name != ref.final_name:
                raise TransformError(f"Expected {ref.final_name}, extraction produced {result.path.name}")

            checksums = generate_checksums(result.path)
            record = Publisher(self.store, self.config).publish(ref, result.path, checksums, now=now)

            return RunSummary(
                outcome="published",
                version=record.version_key,
                final_name=ref.final_name,
                release_url=record.url,
            )

    def failure_summary(self, error: BaseException) -> RunSummary:
        return failed_summary(error, self.reference)


def run_once(
    config: MirrorConfig,
    *,
    store: Optional[ReleaseStore] = None,
    fetcher: Optional[Fetcher] = None,
    now: Optional[datetime] = None,
) -> RunSummary:
    """Run the pipeline once. Returns a published/skipped summary or raises a MirrorError."""
    return MirrorRun(config, store=store, fetcher=fetcher).execute(now=now)
