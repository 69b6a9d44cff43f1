"""Command line entry point."""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from lernwort.app import LernwortApp
from lernwort.config import ensure_directories, settings
from lernwort.exceptions import UserFacingError
from lernwort.logging_config import setup_logging
from lernwort.monitoring import start_monitoring

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(prog="lernwort", description="German vocabulary with remote sync")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("sync", help="Sync the collection with the remote store")
    commands.add_parser("list", help="List collected words")

    say = commands.add_parser("say", help="Pronounce a word or sentence")
    say.add_argument("text")

    add = commands.add_parser("add", help="Look up a word and add it to the collection")
    add.add_argument("word")

    delete = commands.add_parser("delete", help="Delete a word by id")
    delete.add_argument("id")

    review = commands.add_parser("review", help="Record a learning answer for a word")
    review.add_argument("id")
    answer = review.add_mutually_exclusive_group(required=True)
    answer.add_argument("--correct", dest="correct", action="store_true")
    answer.add_argument("--wrong", dest="correct", action="store_false")

    set_url = commands.add_parser("set-url", help="Configure the remote store endpoint")
    set_url.add_argument("url")

    return parser


def format_word(word) -> str:
    article = f"{word.gender} " if word.gender != "none" else ""
    return f"{word.id}  {article}{word.word:<20} {word.meaning:<25} {word.mastery_level:>3}%"


async def run(args: argparse.Namespace, app: Optional[LernwortApp] = None) -> int:
    """Run one command against a started application."""
    app = app or LernwortApp()
    await app.start(auto_sync=args.command != "sync")
    try:
        if args.command == "sync":
            report = await app.sync()
            if report is None:
                print("Sync did not run, see log for details")
                return 1
            print(f"Synced at {report.synced_at}: {report.adopted} new, {report.pushed} sent")
        elif args.command == "list":
            for word in app.words:
                print(format_word(word))
            if app.last_synced_at:
                print(f"Last synced: {app.last_synced_at}")
        elif args.command == "say":
            await app.speak(args.text)
        elif args.command == "add":
            word = await app.lookup(args.word)
            if word is None:
                return 1
            print(format_word(word))
        elif args.command == "delete":
            if not await app.delete_word(args.id):
                raise UserFacingError(f"No word with id {args.id}")
        elif args.command == "review":
            word = await app.record_review(args.id, args.correct)
            if word is None:
                raise UserFacingError(f"No word with id {args.id}")
            print(format_word(word))
        elif args.command == "set-url":
            app.set_sheet_url(args.url)
        return 0
    finally:
        await app.stop()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    ensure_directories()
    setup_logging("Starting lernwort ...", level=args.log_level)

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics served on port {settings.monitoring.port}")

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(run(args))
    except UserFacingError as e:
        print(e)
        return 1
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
        return 130
    finally:
        loop.close()


if __name__ == "__main__":
    sys.exit(main())
