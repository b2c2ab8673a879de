# culturejobs/cli.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import Optional, Sequence

from culturejobs import config, providers
from culturejobs.core.steplog import LoggingStepLogger
from culturejobs.db import crud
from culturejobs.db.models import Base
from culturejobs.db.session import ENGINE, current_engine_url, get_session
from culturejobs.errors import CultureJobsError
from culturejobs.providers.culture_be import sync_new_jobs

logger = logging.getLogger("culturejobs.cli")


def _json_default(o):
    if isinstance(o, datetime):
        return o.isoformat()
    return str(o)


def _print_json(payload) -> None:
    print(json.dumps(payload, default=_json_default, ensure_ascii=False, indent=2))


def cmd_init_db(args: argparse.Namespace) -> int:
    logger.info("Initializing database schema url=%s", current_engine_url())
    Base.metadata.create_all(bind=ENGINE)
    logger.info("Database schema initialized successfully.")
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    provider = providers.get(args.source)
    with get_session() as session:
        summary = sync_new_jobs(
            session,
            provider=provider,
            log_step=LoggingStepLogger(logging.getLogger("culturejobs.sync")),
            concurrency=args.concurrency,
        )
    _print_json(summary.to_dict())
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    with get_session() as session:
        jobs = crud.list_jobs(session)
    for job in jobs[: args.limit] if args.limit else jobs:
        print(f"{job.uid:>7}  {job.publication_date_raw}  {job.posting_type:<9}  {job.organization} | {job.title}")
    print(f"{len(jobs)} job(s)")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    with get_session() as session:
        job = crud.get_job_by_uid(session, args.uid)
    if job is None:
        print(f"Job {args.uid} not found", file=sys.stderr)
        return 1
    payload = {c.name: getattr(job, c.name) for c in job.__table__.columns}
    _print_json(payload)
    return 0


def cmd_last_sync(args: argparse.Namespace) -> int:
    with get_session() as session:
        last = crud.get_last_synced_at(session)
    print(last.isoformat() if last else "never")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("culturejobs.api.main:app", host=args.host, port=args.port, log_level=config.log_level().lower())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="culture-jobs", description="culture.be job board sync")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="Create database tables")
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser("sync", help="Scrape the job board and apply new/removed offers")
    p.add_argument("--source", default="culture_be", choices=sorted(providers.REGISTRY))
    p.add_argument("--concurrency", type=int, default=None,
                   help="Parallel detail fetches (default: env CULTUREJOBS_DETAIL_CONCURRENCY or 4)")
    p.set_defaults(func=cmd_sync)

    p = sub.add_parser("list", help="List persisted jobs, newest first")
    p.add_argument("--limit", type=int, default=0, help="Show at most N rows (0 = all)")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("show", help="Dump one persisted job as JSON")
    p.add_argument("uid", type=int)
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("last-sync", help="Print when the last sync completed")
    p.set_defaults(func=cmd_last_sync)

    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(
        level=getattr(logging, config.log_level(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except CultureJobsError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 2


if __name__ == "__main__":
    # When executed as `python -m culturejobs.cli ...`
    sys.exit(main())
