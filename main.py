import time
import logging
import signal
import os
import sys
import json
import argparse

from core.config_loader import load_config, AppConfig
from core.quality.errors import QualityError, MetricsStoreError
from core.quality.models import ComputedBy
from core.quality.service import AnswerQualityService
from database.database import build_session_factory, create_db_engine
from database.init_db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Global flag for graceful shutdown
running = True

def signal_handler(sig, frame):
    global running
    logger.info("Shutdown signal received")
    running = False


def build_service(config: AppConfig) -> AnswerQualityService:
    session_factory = build_session_factory(config.database.url)
    return AnswerQualityService.build(config, session_factory)


def cmd_init_db(config, args):
    init_db(create_db_engine(config.database.url))


def cmd_recompute(config, args):
    service = build_service(config)
    metrics = service.recompute_one(args.answer_id, args.source)
    print(json.dumps(metrics.to_dict(), indent=2))


def cmd_recompute_question(config, args):
    service = build_service(config)
    result = service.recompute_question(args.question_id, args.source)
    print(json.dumps(result.to_dict(), indent=2))


def cmd_recompute_author(config, args):
    service = build_service(config)
    result = service.recompute_author(args.author_id, args.source)
    print(json.dumps(result.to_dict(), indent=2))


def cmd_recompute_stale(config, args):
    service = build_service(config)

    if not args.interval:
        result = service.batch_recompute_stale(args.max_age_days, args.limit, ComputedBy.CRON)
        print(json.dumps(result.to_dict(), indent=2))
        return

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    cycle_count = 0
    while running:
        cycle_count += 1
        cycle_start = time.time()
        logger.info(f"=== Starting Cycle #{cycle_count} ===")
        try:
            service.batch_recompute_stale(args.max_age_days, args.limit, ComputedBy.CRON)
        except MetricsStoreError as e:
            logger.error(f"Metrics store unavailable, batch aborted: {e}", exc_info=True)

        cycle_elapsed = time.time() - cycle_start
        if running:
            logger.info(f"=== Cycle #{cycle_count} completed in {cycle_elapsed:.2f}s. Sleeping for {args.interval} seconds... ===")
            # Sleep in chunks to allow responsive shutdown
            for _ in range(max(1, args.interval // 5)):
                if not running: break
                time.sleep(5)


def cmd_debug(config, args):
    service = build_service(config)
    payload = service.get_debug(args.answer_id)
    print(json.dumps(payload.to_dict(), indent=2, default=str))


def cmd_serve(config, args):
    os.environ.setdefault('CONFIG_PATH', args.config)
    from web.backend.app import main as serve
    serve()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Answer Quality Score engine")
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to config.yaml (default: config.yaml)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    p = subparsers.add_parser('init-db', help='Create tables if they do not exist')
    p.set_defaults(func=cmd_init_db)

    sources = [s.value for s in ComputedBy]

    p = subparsers.add_parser('recompute', help='Recompute the AQS of one answer')
    p.add_argument('answer_id')
    p.add_argument('--source', choices=sources, default=ComputedBy.ADMIN.value)
    p.set_defaults(func=cmd_recompute)

    p = subparsers.add_parser('recompute-question', help='Recompute every answer of a question')
    p.add_argument('question_id')
    p.add_argument('--source', choices=sources, default=ComputedBy.SYSTEM.value)
    p.set_defaults(func=cmd_recompute_question)

    p = subparsers.add_parser('recompute-author', help='Recompute every answer by an author')
    p.add_argument('author_id')
    p.add_argument('--source', choices=sources, default=ComputedBy.SYSTEM.value)
    p.set_defaults(func=cmd_recompute_author)

    p = subparsers.add_parser('recompute-stale', help='Batch recompute stale answers')
    p.add_argument('--max-age-days', type=int, default=None,
                   help='Maximum age of metrics before recompute (default from config)')
    p.add_argument('--limit', type=int, default=None,
                   help='Maximum number of answers to process (default from config)')
    p.add_argument('--interval', type=int, default=0,
                   help='Repeat every N seconds until interrupted (default: run once)')
    p.set_defaults(func=cmd_recompute_stale)

    p = subparsers.add_parser('debug', help='Print the stored signal breakdown of an answer')
    p.add_argument('answer_id')
    p.set_defaults(func=cmd_debug)

    p = subparsers.add_parser('serve', help='Run the web API')
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)

    try:
        args.func(config, args)
    except QualityError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
