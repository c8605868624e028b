import logging
import argparse
import sys
from functools import partial

from core.config_loader import load_config
from core.quality import AnswerQualityService, RecomputeTrigger, QualityError
from database.database import make_engine, make_session_factory
from database.init_db import init_db
from database.uow import qa_uow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_quality_service(config) -> AnswerQualityService:
    session_factory = make_session_factory(make_engine(config.database.url))
    return AnswerQualityService(uow_factory=partial(qa_uow, session_factory), config=config.quality)


def cmd_init_db(config, args) -> int:
    init_db(bind=make_engine(config.database.url))
    return 0


def cmd_recompute(config, args) -> int:
    service = build_quality_service(config)
    result = service.recompute(args.answer_id, RecomputeTrigger(args.trigger))
    logger.info(
        f"Answer {result.answer_id}: AQS {result.previous_aqs} -> {result.aqs}, "
        f"label {result.previous_label} -> {result.label.value}"
    )
    return 0


def cmd_recompute_stale(config, args) -> int:
    service = build_quality_service(config)
    max_age_days = args.max_age_days if args.max_age_days is not None else config.cron.max_age_days
    limit = args.limit if args.limit is not None else config.cron.limit

    outcome = service.batch_recompute_stale(max_age_days=max_age_days, limit=limit)
    logger.info(
        f"Stale recompute finished: processed={outcome['processed']}, "
        f"updated={outcome['updated']}, failed={outcome['failed']}"
    )
    return 1 if outcome['failed'] else 0


def cmd_profile_strength(config, args) -> int:
    service = build_quality_service(config)
    results = service.update_profile_strength_and_recompute(args.user_id, args.strength)
    logger.info(f"Recomputed {len(results)} answers for user {args.user_id}")
    return 0


def cmd_serve(config, args) -> int:
    import uvicorn

    host = args.host or config.web.host
    port = args.port or config.web.port
    logger.info(f"Starting CareerQA API on {host}:{port}")
    uvicorn.run("web.backend.app:app", host=host, port=port, reload=False, log_level="info")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CareerQA answer quality tooling")
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to config.yaml (default: ./config.yaml)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    p = subparsers.add_parser('init-db', help='Create the Q&A and quality tables')
    p.set_defaults(handler=cmd_init_db)

    p = subparsers.add_parser('recompute', help='Recompute the AQS of one answer')
    p.add_argument('answer_id', type=str)
    p.add_argument('--trigger', type=str, default=RecomputeTrigger.MANUAL.value,
                   choices=[t.value for t in RecomputeTrigger])
    p.set_defaults(handler=cmd_recompute)

    p = subparsers.add_parser('recompute-stale', help='Recompute answers with missing or old metrics')
    p.add_argument('--max-age-days', type=int, default=None)
    p.add_argument('--limit', type=int, default=None)
    p.set_defaults(handler=cmd_recompute_stale)

    p = subparsers.add_parser('profile-strength', help="Set a user's profile strength and rescore their answers")
    p.add_argument('user_id', type=str)
    p.add_argument('strength', type=float)
    p.set_defaults(handler=cmd_profile_strength)

    p = subparsers.add_parser('serve', help='Run the web API')
    p.add_argument('--host', type=str, default=None)
    p.add_argument('--port', type=int, default=None)
    p.set_defaults(handler=cmd_serve)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)

    try:
        return args.handler(config, args)
    except QualityError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
