"""Command-line front end for the co-living client.

Usage:
    coliving login you@example.com          # prompts for the emailed OTP
    coliving whoami
    coliving quote 9500 --months 6 --pre-book
    coliving properties --location indiranagar --max-rent 12000
    coliving bookings
    coliving tickets
    coliving payment-status ORDER123
    coliving logout

The session is kept under COLIVING_STORAGE_DIR between runs.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Callable

from coliving.api import ApiClient, Backend, split_by_status
from coliving.config import Settings, settings
from coliving.exceptions import ColivingError
from coliving.flows import LoginFlow
from coliving.models.property import filter_properties
from coliving.notifications import Notifier, describe_error
from coliving.pricing import BookingMode, compute_quote, validate_duration
from coliving.session import SessionManager

log = logging.getLogger("coliving.cli")


class App:
    """Wires the Session Manager, notifier and API groups for one CLI run."""

    def __init__(self, cfg: Settings | None = None) -> None:
        self.config = cfg or settings
        self.notifier = Notifier()
        self.sessions = SessionManager.from_settings(self.config, notifier=self.notifier)
        self.backend = Backend(ApiClient(self.sessions, self.config))

    def print_notices(self) -> None:
        for notice in self.notifier.event_log:
            line = f"[{notice['level']}] {notice['title']}"
            if notice["message"]:
                line += f": {notice['message']}"
            print(line, file=sys.stderr)


def _money(amount) -> str:
    return f"₹ {amount:,.0f}"


# ── Commands ─────────────────────────────────────────────────────


async def cmd_login(app: App, args: argparse.Namespace) -> int:
    flow = LoginFlow(app.backend, app.notifier)
    if not await flow.send_otp(args.email):
        if flow.errors:
            print(flow.errors["email"], file=sys.stderr)
        return 1
    otp = args.otp or input("OTP: ")
    session = await flow.verify_otp(otp)
    if session is None:
        if flow.errors:
            print(flow.errors["otp"], file=sys.stderr)
        return 1
    print(f"Logged in as {session.full_name or session.id}")
    return 0


async def cmd_whoami(app: App, args: argparse.Namespace) -> int:
    session = app.sessions.current
    if session is None:
        print("Not logged in")
        return 1
    print(json.dumps(session.profile_blob(), indent=2))
    return 0


async def cmd_logout(app: App, args: argparse.Namespace) -> int:
    await app.sessions.logout()
    return 0


async def cmd_quote(app: App, args: argparse.Namespace) -> int:
    months = validate_duration(args.months)
    mode = BookingMode.PRE_BOOK if args.pre_book else BookingMode.FULL_BOOK
    quote = compute_quote(args.rent, months, mode)
    for label, amount in quote.breakdown():
        print(f"{label:<45} {_money(amount):>14}")
    print(f"{quote.action_label} {_money(quote.amount_due_now)}")
    return 0


async def cmd_properties(app: App, args: argparse.Namespace) -> int:
    properties = await app.backend.properties.list_properties()
    properties = filter_properties(
        properties,
        location=args.location or "",
        room_type=args.room_type or "",
        max_rent=args.max_rent,
    )
    for p in properties:
        print(f"{p.id:>5}  {p.name} — {p.address}")
        for rc in p.rate_card:
            print(f"       rate card {rc.id}: {rc.room_type}, {_money(rc.rent)}/month")
    print(f"# {len(properties)} properties", file=sys.stderr)
    return 0


async def cmd_bookings(app: App, args: argparse.Namespace) -> int:
    page = await app.backend.bookings.list_bookings(page=args.page, limit=args.limit)
    for b in page.bookings:
        room = b.room
        where = ""
        if room is not None:
            prop = room.property_info.name if room.property_info else ""
            where = f"{room.room_type} #{room.room_number} {prop}".strip()
        print(f"{b.id:>5}  {b.display_status or b.status:<10} {b.check_in_date or '':<12} {where}")
    print(f"# page {args.page} of {page.total_pages}", file=sys.stderr)
    return 0


async def cmd_tickets(app: App, args: argparse.Namespace) -> int:
    ongoing, closed = split_by_status(await app.backend.tickets.list_tickets())
    for t in ongoing + closed:
        print(f"{t.support_code or t.id!s:<10} {t.status_label:<8} {t.issue}")
    print(f"# {len(ongoing)} ongoing, {len(closed)} closed", file=sys.stderr)
    return 0


async def cmd_payment_status(app: App, args: argparse.Namespace) -> int:
    outcome = await app.backend.payments.resolve(args.order_id)
    if outcome.succeeded:
        print("Payment successful")
        return 0
    print(f"Payment failed: {outcome.reason} {outcome.detail}".strip())
    return 1


COMMANDS: dict[str, Callable] = {
    "login": cmd_login,
    "whoami": cmd_whoami,
    "logout": cmd_logout,
    "quote": cmd_quote,
    "properties": cmd_properties,
    "bookings": cmd_bookings,
    "tickets": cmd_tickets,
    "payment-status": cmd_payment_status,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Co-living rental client",
        prog="coliving",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Log in with an emailed OTP")
    p.add_argument("email")
    p.add_argument("--otp", help="OTP (prompted when omitted)")

    sub.add_parser("whoami", help="Show the logged-in user")
    sub.add_parser("logout", help="Forget the stored session")

    p = sub.add_parser("quote", help="Price a stay")
    p.add_argument("rent", type=float, help="Monthly rent")
    p.add_argument("--months", type=int, default=3, help="3, 6 or 12")
    p.add_argument("--pre-book", action="store_true", help="Pay 10%% now")

    p = sub.add_parser("properties", help="List properties and rate cards")
    p.add_argument("--location", help="Substring of the address")
    p.add_argument("--room-type", help='e.g. "Double sharing"')
    p.add_argument("--max-rent", type=float)

    p = sub.add_parser("bookings", help="List your bookings")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--limit", type=int, default=10)

    sub.add_parser("tickets", help="List your support tickets")

    p = sub.add_parser("payment-status", help="Check a payment by order id")
    p.add_argument("order_id")

    return parser


async def run(args: argparse.Namespace, cfg: Settings | None = None) -> int:
    app = App(cfg)
    for warning in app.config.validate_startup():
        log.warning(warning)
    await app.sessions.load_persisted_session()
    try:
        return await COMMANDS[args.command](app, args)
    except ColivingError as e:
        print(f"Error: {describe_error(e)}", file=sys.stderr)
        return 1
    finally:
        app.print_notices()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(run(args))
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
