#!/usr/bin/env python3
"""Unified CLI for the Talent Back-Office.

Usage:
    python cli.py talent --help
    python cli.py serve --port 8000
"""
import sys
import argparse


def main():
    parser = argparse.ArgumentParser(
        description='Talent Back-Office',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modules:
  talent   Submission sync, roster migration, review, roles
  serve    Run the HTTP API

Examples:
  python cli.py talent init-db
  python cli.py talent grant-role 3f1c... admin
  python cli.py talent sync --user-id 3f1c...
  python cli.py talent migrate --user-id 3f1c...
  python cli.py talent status
  python cli.py serve --port 8000
"""
    )

    parser.add_argument(
        'module',
        choices=['talent', 'serve'],
        help='Module to run'
    )

    # Parse just the module, pass rest to submodule
    args, remaining = parser.parse_known_args()

    if args.module == 'talent':
        from modules.talent.cli import main as talent_main
        sys.exit(talent_main(remaining))

    elif args.module == 'serve':
        import uvicorn
        serve = argparse.ArgumentParser(prog='cli.py serve')
        serve.add_argument('--host', default='127.0.0.1')
        serve.add_argument('--port', type=int, default=8000)
        serve.add_argument('--reload', action='store_true')
        opts = serve.parse_args(remaining)
        uvicorn.run('portal.main:app', host=opts.host, port=opts.port, reload=opts.reload)


if __name__ == '__main__':
    main()
