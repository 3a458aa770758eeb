"""Talent CLI.

Usage:
    python cli.py talent init-db
    python cli.py talent sync --user-id <uuid>
    python cli.py talent migrate --user-id <uuid> --batch-size 50
    python cli.py talent migration-status
    python cli.py talent status
    python cli.py talent pending
    python cli.py talent logs --limit 10 --job talent-migration
    python cli.py talent review <application-id> approved --user-id <uuid>
    python cli.py talent grant-role <uuid> editor
    python cli.py talent token <uuid>
"""
import argparse
import json
import logging
import sys

from .authorization import AuthorizationError, Principal
from .database import get_session, init_db
from .migration_service import run_talent_migration
from .reporting import JOB_NAMES, get_migration_stats, get_sync_logs, get_sync_status_summary
from .review_service import (
    ReviewError,
    TALENT_STATUSES,
    USER_ROLES,
    grant_role,
    list_pending_submissions,
    update_application_status,
)
from .schemas import MigrationItemStatus, SyncItemStatus
from .store import StoreError
from .sync_service import run_talent_sync

STATUS_ICONS = {
    SyncItemStatus.SYNCED: "✅",
    SyncItemStatus.ALREADY_EXISTS: "⏭️",
    SyncItemStatus.PARTIAL_SUCCESS: "⚠️",
    SyncItemStatus.ERROR: "❌",
}

MIGRATION_ICONS = {
    MigrationItemStatus.MIGRATED: "✅",
    MigrationItemStatus.SKIPPED: "⏭️",
    MigrationItemStatus.ERROR: "❌",
}


def cmd_sync(args) -> int:
    principal = Principal(user_id=args.user_id) if args.user_id else None
    with get_session() as session:
        summary = run_talent_sync(session, principal)

    if args.json:
        print(summary.model_dump_json(indent=2))
        return 0

    print(f"🔄 Talent sync: {summary.processed} submissions processed")
    for r in summary.results:
        line = f"   {STATUS_ICONS[r.status]} {r.email} → {r.status.value}"
        if r.error:
            line += f" ({r.error})"
        print(line)
    counts = summary.counts()
    print(
        f"📊 synced={counts['synced']} already_exists={counts['already_exists']} "
        f"partial_success={counts['partial_success']} error={counts['error']}"
    )
    return 1 if summary.needs_attention else 0


def cmd_migrate(args) -> int:
    principal = Principal(user_id=args.user_id) if args.user_id else None
    with get_session() as session:
        summary = run_talent_migration(session, principal, batch_size=args.batch_size)

    if args.json:
        print(summary.model_dump_json(indent=2))
        return 0

    print(f"🚚 Talent migration: {summary.processed} approved applications checked")
    for r in summary.results:
        if r.status is MigrationItemStatus.SKIPPED:
            continue
        line = f"   {MIGRATION_ICONS[r.status]} {r.email} → {r.status.value}"
        if r.error:
            line += f" ({r.error})"
        print(line)
    print(f"📊 {summary.message}")
    return 0 if summary.success else 1


def cmd_migration_status(args) -> int:
    with get_session() as session:
        stats = get_migration_stats(session)
    print(json.dumps(stats, indent=2))
    return 0


def cmd_status(args) -> int:
    with get_session() as session:
        summary = get_sync_status_summary(session)
    print(json.dumps(summary, indent=2))
    return 0


def cmd_pending(args) -> int:
    with get_session() as session:
        pending = list_pending_submissions(session)
        print(f"📋 {len(pending)} pending submissions")
        for s in pending:
            print(f"   {s.created_at:%Y-%m-%d %H:%M}  {s.email:40} {s.full_name}")
    return 0


def cmd_logs(args) -> int:
    with get_session() as session:
        logs = get_sync_logs(session, limit=args.limit, function_name=args.job)
    for log in logs:
        results = log["results"]
        ok = "✅" if results.get("success") else "❌"
        print(f"{ok} {log['executed_at']}  processed={results.get('processed', 0)} "
              f"{results.get('counts') or results.get('error', '')}")
    if not logs:
        print("ℹ️ No sync runs recorded yet.")
    return 0


def cmd_review(args) -> int:
    principal = Principal(user_id=args.user_id) if args.user_id else None
    with get_session() as session:
        app = update_application_status(
            session, principal, args.application_id, args.status, notes=args.notes
        )
        print(f"✅ {app.email} → {app.status}")
    return 0


def cmd_init_db(args) -> int:
    init_db()
    print("✅ Tables created")
    return 0


def cmd_grant_role(args) -> int:
    # Bootstrap path: no acting principal, whoever runs the CLI owns the DB.
    with get_session() as session:
        row = grant_role(session, args.target_user_id, args.role)
        print(f"✅ {row.user_id} → {row.role}")
    return 0


def cmd_token(args) -> int:
    from portal.auth.jwt import create_access_token

    token = create_access_token({"sub": args.target_user_id, "email": args.email})
    print(token)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Talent Sync & Review')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('init-db', help='Create database tables')

    p = sub.add_parser('sync', help='Move pending submissions into the talent directory')
    p.add_argument('--user-id', help='Acting principal (needs admin or editor role)')
    p.add_argument('--json', action='store_true', help='Print the raw summary')

    p = sub.add_parser('migrate', help='Copy approved applications to the talent roster')
    p.add_argument('--user-id', help='Acting principal (needs admin or editor role)')
    p.add_argument('--batch-size', type=int, help='Migrate at most N applications')
    p.add_argument('--json', action='store_true', help='Print the raw summary')

    sub.add_parser('migration-status', help='Roster migration progress')
    sub.add_parser('status', help='Submission / directory counts')
    sub.add_parser('pending', help='List submissions waiting for sync')

    p = sub.add_parser('logs', help='Recent sync runs')
    p.add_argument('--limit', type=int, default=5)
    p.add_argument('--job', choices=JOB_NAMES, default=JOB_NAMES[0])

    p = sub.add_parser('review', help='Set a talent application status')
    p.add_argument('application_id')
    p.add_argument('status', choices=sorted(TALENT_STATUSES))
    p.add_argument('--notes')
    p.add_argument('--user-id', help='Acting principal (needs admin or editor role)')

    p = sub.add_parser('grant-role', help='Assign a role to a user')
    p.add_argument('target_user_id')
    p.add_argument('role', choices=sorted(USER_ROLES))

    p = sub.add_parser('token', help='Issue a bearer token for a user (dev/ops)')
    p.add_argument('target_user_id')
    p.add_argument('--email')

    return parser


COMMANDS = {
    'init-db': cmd_init_db,
    'sync': cmd_sync,
    'migrate': cmd_migrate,
    'migration-status': cmd_migration_status,
    'status': cmd_status,
    'pending': cmd_pending,
    'logs': cmd_logs,
    'review': cmd_review,
    'grant-role': cmd_grant_role,
    'token': cmd_token,
}


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    try:
        return COMMANDS[args.command](args)
    except AuthorizationError as e:
        print(f"🔒 {type(e).__name__}: {e}")
        return 2
    except (ReviewError, StoreError) as e:
        print(f"❌ {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
