#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
RSSViewer API entry point

Usage:
  python run.py                  # serve on BACKEND_PORT (default 4000)
  python run.py serve --reload   # dev mode with hot reload
  python run.py check            # probe the three databases once
  python run.py test             # smoke-test a running server
  python run.py info             # print database settings (passwords masked)
"""
import argparse
import asyncio
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

load_dotenv(ROOT / ".env", override=False)


def _banner(title):
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def _serve(host: str, port: int, reload: bool):
    _banner("Starting RSSViewer API")
    cmd = [sys.executable, "-m", "uvicorn", "rssviewer.app:app", "--host", host, "--port", str(port)]
    if reload:
        cmd.append("--reload")
    print(f"🚀 http://{host}:{port}")
    proc = subprocess.Popen(cmd, cwd=str(ROOT))
    try:
        return proc.wait()
    except KeyboardInterrupt:
        print("\n🛑 Interrupted, shutting down ...")
        proc.terminate()
        try:
            return proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
            return 1


def _check() -> int:
    from rssviewer.core.config import get_settings
    from rssviewer.core.logging import setup_logging
    from rssviewer.storage.db import PoolSet, run_startup_checks

    settings = get_settings()
    setup_logging(settings.log_level)
    pools = PoolSet.from_settings(settings)

    async def _run():
        try:
            return await run_startup_checks(pools)
        finally:
            await pools.close()

    report = asyncio.run(_run())
    for name, ok in report["connected"].items():
        print(f"  {'✅' if ok else '❌'} {name}")
    print(f"  news rows:       {report['news_rows']}")
    print(f"  securities rows: {report['securities_rows']}")
    print(f"  sentiment rows:  {report['sentiment_rows']}")
    return 0 if all(report["connected"].values()) else 1


def _smoke_test(host: str, port: int, security: str) -> int:
    from rssviewer.client import DashboardClient, DashboardError

    client = DashboardClient(f"http://{host}:{port}")
    try:
        print("[1/4] sources ...")
        sources = client.sources()
        print(f"      {len(sources)} sources")
        print("[2/4] news page 1 ...")
        page = client.news(page=1, limit=5)
        print(f"      total={page['total']} items={len(page['items'])}")
        print("[3/4] sentiment ...")
        print(f"      {len(client.sentiment())} records")
        print(f"[4/4] securities/{security} ...")
        print(f"      {len(client.security(security))} bars")
    except DashboardError as e:
        print(f"❌ {e}")
        return 1
    print("\n✅ Smoke test done.")
    return 0


def _show_info():
    from rssviewer.core.config import get_settings

    settings = get_settings()
    print("News DB:        ", settings.news_db.masked_url)
    print("Price-series DB:", settings.price_db.masked_url)
    print("Sentiment DB:   ", settings.sentiment_db.masked_url)
    print("Allowed origins:", ", ".join(settings.allowed_origins))


def main(argv=None):
    from rssviewer.core.config import get_settings

    settings = get_settings()
    parser = argparse.ArgumentParser(description="RSSViewer API runner")
    sub = parser.add_subparsers(dest="cmd")

    p_serve = sub.add_parser("serve", help="run the API (default)")
    p_serve.add_argument("--host", type=str, default=settings.host)
    p_serve.add_argument("--port", type=int, default=settings.port)
    p_serve.add_argument("--reload", action="store_true")

    sub.add_parser("check", help="probe databases and table diagnostics")

    p_test = sub.add_parser("test", help="smoke-test a running server")
    p_test.add_argument("--host", type=str, default="127.0.0.1")
    p_test.add_argument("--port", type=int, default=settings.port)
    p_test.add_argument("--security", type=str, default="BTC")

    sub.add_parser("info", help="print database settings")

    args = parser.parse_args(argv)
    if args.cmd is None:
        return _serve(settings.host, settings.port, False)
    if args.cmd == "serve":
        return _serve(args.host, args.port, args.reload)
    if args.cmd == "check":
        return _check()
    if args.cmd == "test":
        return _smoke_test(args.host, args.port, args.security)
    if args.cmd == "info":
        return _show_info()
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
