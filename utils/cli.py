#!/usr/bin/env python3
"""
LoveConnect CLI — admin commands against the configured database.

Usage:
    loveconnect stats
    loveconnect users --country cz
    loveconnect like 1 2 --super
    loveconnect send-gift 1 2 3 --message "Ahoj"

Examples:
    loveconnect seed
    loveconnect search --country cz --min-age 20 --max-age 30 --verified
"""

import argparse
import asyncio
import logging
import sys
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import settings
from core.database import build_sessionmaker, engine
from core.errors import DuplicateLikeError, LoveConnectError
from services import gifts as gifts_service
from services import users as users_service
from services.matches import list_matches
from services.matching import MatchEngine
from services.messaging import list_messages
from services.stats import get_stats
from utils.reset_db import async_init_database
from utils.seed_db import seed

log = logging.getLogger(__name__)


def _format_user(user) -> str:
    badges = f"{' ✅' if user.verified else ''}{' ⭐' if user.premium else ''}"
    return f"{user.id}. {user.name}, {user.age} ({user.country.upper()}){badges}"


async def cmd_stats(db, args):
    stats = await get_stats(db)
    print("📊 Database Statistics:")
    print(f"👥 Users: {stats.users}")
    print(f"💕 Active Matches: {stats.matches}")
    print(f"💬 Messages: {stats.messages}")
    print(f"🎁 Gifts Sent: {stats.gifts}")


async def cmd_users(db, args):
    users = await users_service.list_users(db, args.country)
    print(f"👥 Users{f' in {args.country.upper()}' if args.country else ''}:")
    for user in users:
        print(_format_user(user))


async def cmd_user(db, args):
    user = await users_service.get_user(db, args.user_id)
    print("👤 User Details:")
    print(f"Name: {user.name}")
    print(f"Email: {user.email or '-'}")
    print(f"Age: {user.age}")
    print(f"Country: {user.country.upper()}")
    print(f"Bio: {user.bio or 'No bio'}")
    print(f"Verified: {'Yes ✅' if user.verified else 'No'}")
    print(f"Premium: {'Yes ⭐' if user.premium else 'No'}")
    print(f"Distance: {user.distance} km")


async def cmd_photos(db, args):
    photos = await users_service.list_photos(db, args.user_id)
    print(f"📸 Photos for user {args.user_id}:")
    for photo in photos:
        print(f"{photo.order_index + 1}. {photo.photo_url}{' (Primary)' if photo.is_primary else ''}")


async def cmd_matches(db, args):
    summaries = await list_matches(db, args.user_id)
    print(f"💕 Matches for user {args.user_id}:")
    for summary in summaries:
        other = summary.other_user
        print(f"{summary.match.id}. {other.name}, {other.age} ({other.country.upper()})")


async def cmd_messages(db, args):
    # Переписку может читать только участник матча, поэтому нужен --as
    views = await list_messages(db, args.as_user, args.match_id)
    print(f"💬 Messages for match {args.match_id}:")
    for view in views:
        print(f"[{view.message.sent_at:%Y-%m-%d %H:%M}] {view.sender_name}: {view.message.message_text}")


async def cmd_gifts(db, args):
    print("🎁 Available Gifts:")
    for gift in await gifts_service.list_gifts(db):
        print(f"{gift.id}. {gift.icon} {gift.name} - {gift.price_czk} Kč / {gift.price_eur} € ({gift.category})")


async def cmd_search(db, args):
    results = await users_service.search_users(
        db,
        country=args.country,
        min_age=args.min_age,
        max_age=args.max_age,
        max_distance=args.max_distance,
        verified=args.verified,
        premium=args.premium,
        limit=args.limit,
    )
    print(f"🔍 Search Results ({len(results)} found):")
    for user in results:
        print(_format_user(user))


async def cmd_add_user(db, args):
    user = await users_service.create_user(
        db,
        name=args.name,
        email=args.email,
        age=args.age,
        country=args.country,
        bio=args.bio,
        verified=args.verified,
        premium=args.premium,
        distance=args.distance,
    )
    print(f"✅ User created with ID: {user.id}")


async def cmd_like(db, args):
    try:
        result = await MatchEngine.for_session(db).record_like(args.liker_id, args.liked_id, args.super)
    except DuplicateLikeError as e:
        print(f"ℹ️  {e}{' (already matched)' if e.matched else ''}")
        return
    print(f"✅ {'Super like' if args.super else 'Like'} added!")
    if result.matched:
        print("🎉 It's a mutual like!")
        if result.match_created:
            print(f"💕 Match {result.match_id} created!")


async def cmd_send_gift(db, args):
    view = await gifts_service.send_gift(db, args.sender_id, args.receiver_id, args.gift_id, args.message)
    print(f"✅ {view.gift.icon} {view.gift.name} sent to {view.receiver_name}!")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loveconnect",
        description="LoveConnect database CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("stats", help="Show database statistics").set_defaults(handler=cmd_stats)

    p = sub.add_parser("users", help="List all users")
    p.add_argument("--country", help="Filter by country code")
    p.set_defaults(handler=cmd_users)

    p = sub.add_parser("user", help="Show user details")
    p.add_argument("user_id", type=int)
    p.set_defaults(handler=cmd_user)

    p = sub.add_parser("photos", help="Show user photos")
    p.add_argument("user_id", type=int)
    p.set_defaults(handler=cmd_photos)

    p = sub.add_parser("matches", help="Show user matches")
    p.add_argument("user_id", type=int)
    p.set_defaults(handler=cmd_matches)

    p = sub.add_parser("messages", help="Show match messages")
    p.add_argument("match_id", type=int)
    p.add_argument("--as", dest="as_user", type=int, required=True, help="Participant user id")
    p.set_defaults(handler=cmd_messages)

    sub.add_parser("gifts", help="Show all available gifts").set_defaults(handler=cmd_gifts)

    p = sub.add_parser("search", help="Search users with filters")
    p.add_argument("--country")
    p.add_argument("--min-age", type=int)
    p.add_argument("--max-age", type=int)
    p.add_argument("--max-distance", type=int)
    p.add_argument("--verified", action="store_true")
    p.add_argument("--premium", action="store_true")
    p.add_argument("--limit", type=int, default=10)
    p.set_defaults(handler=cmd_search)

    p = sub.add_parser("add-user", help="Add new user")
    p.add_argument("--name", required=True)
    p.add_argument("--age", type=int, required=True)
    p.add_argument("--country", required=True, help="cz/sk/de/etc")
    p.add_argument("--email")
    p.add_argument("--bio", default="")
    p.add_argument("--verified", action="store_true")
    p.add_argument("--premium", action="store_true")
    p.add_argument("--distance", type=int, default=0)
    p.set_defaults(handler=cmd_add_user)

    p = sub.add_parser("like", help="Add like, creating a match when it is mutual")
    p.add_argument("liker_id", type=int)
    p.add_argument("liked_id", type=int)
    p.add_argument("--super", action="store_true", help="Super like")
    p.set_defaults(handler=cmd_like)

    p = sub.add_parser("send-gift", help="Send gift")
    p.add_argument("sender_id", type=int)
    p.add_argument("receiver_id", type=int)
    p.add_argument("gift_id", type=int)
    p.add_argument("--message")
    p.set_defaults(handler=cmd_send_gift)

    sub.add_parser("init-db", help="Create missing tables").set_defaults(handler=None, action="init-db")
    sub.add_parser("seed", help="Insert sample users, gifts and likes").set_defaults(handler=None, action="seed")

    return parser


async def run(args, db_engine: AsyncEngine = engine) -> None:
    handler: Optional[Callable] = args.handler
    try:
        if handler is None:
            if args.action == "init-db":
                await async_init_database(db_engine)
                print("✅ Tables created successfully")
            else:
                counts = await seed(db_engine)
                print(f"🎉 Seeded {counts['users']} users, {counts['gifts']} gifts, {counts['matches']} matches")
            return

        async with build_sessionmaker(db_engine)() as db:
            await handler(db, args)
    finally:
        await db_engine.dispose()


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.LOG_LEVEL)

    try:
        asyncio.run(run(args))
    except LoveConnectError as e:
        print(f"❌ {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(130)


if __name__ == "__main__":
    main()
