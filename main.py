#!/usr/bin/env python3
"""
Marketplace command line driver.

    python main.py init-db
    python main.py matches <requester_user_id>
    python main.py smart-matches <requester_user_id> --limit 5
"""
import argparse
import asyncio
import json
import logging
import sys

from core.app_context import AppContext
from core.config_loader import load_config
from database.database import make_session_factory
from database.init_db import init_db
from database.uow import marketplace_uow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run_matches(ctx: AppContext, session_factory, user_id: str) -> list:
    with marketplace_uow(session_factory) as repo:
        requester = repo.requesters.get_by_user_id(user_id)
        if requester is None:
            logger.warning(f"No requester profile for user {user_id}")
            return []
        matches = await ctx.scoring_service(repo).find_matches(requester)
        return [m.to_dict() for m in matches]


async def run_smart_matches(ctx: AppContext, session_factory, user_id: str, limit: int) -> list:
    with marketplace_uow(session_factory) as repo:
        results = await ctx.matching_service(repo).get_personalized_recommendations(user_id, limit)
        return [r.to_dict() for r in results]


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Marketplace matching driver")
    parser.add_argument('--config', type=str, default='config.yaml', help="Path to config.yaml")
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help="Create database tables")

    matches_parser = subparsers.add_parser('matches', help="Coarse provider matches (0-100)")
    matches_parser.add_argument('user_id', type=str)

    smart_parser = subparsers.add_parser('smart-matches', help="Ranked services and products (0-1)")
    smart_parser.add_argument('user_id', type=str)
    smart_parser.add_argument('--limit', type=int, default=None)

    args = parser.parse_args(argv)

    config = load_config(args.config)
    session_factory = make_session_factory(config.database.url, echo=config.database.echo)
    ctx = AppContext.build(config)

    if args.command == 'init-db':
        init_db(session_factory.kw['bind'])
        logger.info("Database initialized")
        return 0

    try:
        if args.command == 'matches':
            output = asyncio.run(run_matches(ctx, session_factory, args.user_id))
        else:
            limit = args.limit if args.limit is not None else config.matching.recommendations_limit
            output = asyncio.run(run_smart_matches(ctx, session_factory, args.user_id, limit))
    except Exception as e:
        logger.error(f"Command '{args.command}' failed: {e}", exc_info=True)
        return 1

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
