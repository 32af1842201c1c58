"""Fire loserpool administrative triggers against a running API.

Meant for a scheduler (cron, systemd timer) that cannot import the package.
"""

from __future__ import annotations

import argparse
import json
import os

import httpx


TRIGGERS = {
    "sync-week": "/admin/sync-week",
    "assign-defaults": "/admin/assign-defaults",
    "evaluate-results": "/admin/evaluate-results",
    "refresh-current-week": "/admin/refresh-current-week",
}


def main() -> None:
    parser = argparse.ArgumentParser(description="Trigger loserpool admin jobs over HTTP")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("trigger", choices=[*TRIGGERS, "season", "breakdown", "export"], help="Job to run")
    parser.add_argument("--phase", default=None, help="PRE, REG or POST")
    parser.add_argument("--week", type=int, default=None)
    parser.add_argument("--absolute-week", type=int, default=None, help="Season-wide week number, instead of --phase/--week")
    parser.add_argument("--year", type=int, default=None)
    parser.add_argument("--label", default=None, help="Week label for reports, e.g. REG7")
    parser.add_argument(
        "--token",
        default=os.getenv("LOSERPOOL_CRON_TOKEN"),
        help="Bearer token for admin routes (defaults to LOSERPOOL_CRON_TOKEN)",
    )
    parser.add_argument("--timeout", type=float, default=60.0)
    args = parser.parse_args()

    headers = {"Authorization": f"Bearer {args.token}"} if args.token else {}
    with httpx.Client(base_url=args.base_url, headers=headers, timeout=args.timeout) as client:
        if args.trigger == "season":
            resp = client.get("/season")
        elif args.trigger == "breakdown":
            resp = client.get("/reports/team-breakdown", params={"label": args.label} if args.label else None)
        elif args.trigger == "export":
            resp = client.get("/reports/picks.csv")
            resp.raise_for_status()
            print(resp.text)
            return
        elif args.trigger in ("sync-week", "assign-defaults"):
            body = {"phase": args.phase, "week": args.week, "absolute_week": args.absolute_week}
            if args.trigger == "sync-week":
                body["year"] = args.year
            resp = client.post(TRIGGERS[args.trigger], json=body)
        else:
            resp = client.post(TRIGGERS[args.trigger])

        if resp.status_code == 401:
            raise SystemExit("admin token rejected")
        if resp.status_code >= 400:
            raise SystemExit(f"{args.trigger} failed ({resp.status_code}): {resp.text}")
        print(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    main()
