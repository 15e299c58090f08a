from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from typing import Optional, Sequence

from .config import load_mirror_config
from .config import MirrorConfig
from .infra.errors import MirrorError
from .orchestration.pipeline import MirrorRun, build_fetcher, discover_latest, failed_summary
from .orchestration.summary import emit_summary


def _load_config(args: argparse.Namespace) -> MirrorConfig:
    return load_mirror_config(
        args.config,
        overrides={
            "MIRROR_BASE_URL": args.base_url,
            "MIRROR_WORK_DIR": getattr(args, "work_dir", None),
            "MIRROR_RELEASE_STORE_KIND": getattr(args, "store_kind", None),
            "MIRROR_RELEASE_STORE_DIR": getattr(args, "store_dir", None),
        },
    )


def cmd_run(args: argparse.Namespace) -> int:
    run: Optional[MirrorRun] = None
    try:
        run = MirrorRun(_load_config(args))
        summary = run.execute()
    except MirrorError as e:
        print(f"[run] {type(e).__name__}: {e}")
        emit_summary(run.failure_summary(e) if run is not None else failed_summary(e))
        return 1
    emit_summary(summary)
    return 0


def cmd_discover(args: argparse.Namespace) -> int:
    try:
        config = _load_config(args)
        ref = discover_latest(config, build_fetcher(config))
    except MirrorError as e:
        print(f"[discover] {type(e).__name__}: {e}")
        return 1
    print(json.dumps(asdict(ref), indent=2, sort_keys=True))
    return 0


def _add_common(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("--config", default=None, help="Mirror config YAML (default: MIRROR_CONFIG or packaged default)")
    sp.add_argument("--base-url", default=None, help="Upstream directory listing URL")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="isomirror")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("run", help="Mirror the newest upstream release once")
    _add_common(sp)
    sp.add_argument("--work-dir", default=None, help="Directory for transient downloads")
    sp.add_argument("--store-kind", default=None, help="Release store kind (github_release, local_fs)")
    sp.add_argument("--store-dir", default=None, help="Base directory for the local_fs release store")
    sp.set_defaults(func=cmd_run)

    sp = sub.add_parser("discover", help="Print the newest upstream artifact without publishing")
    _add_common(sp)
    sp.set_defaults(func=cmd_discover)

    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
