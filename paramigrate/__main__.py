import argparse
import json
import logging
import sys

from .core.config import get_settings
from .core.errors import MigrationError, PreconditionError


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            # JSON results go to stdout; keep logs off it
            logging.StreamHandler(sys.stderr)
        ]
    )
    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)


logger = logging.getLogger(__name__)


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2))


def _build_engine():
    from .core.migration import MigrationEngine
    return MigrationEngine(settings=get_settings())


def _plan(engine, args):
    engine.scan_project_state(args.project_root)
    strategy = args.strategy or engine.detect_strategy()
    if strategy is None:
        raise PreconditionError(f"No migration strategy detected for {args.project_root}")
    return engine.create_replacement_plan(strategy)


# ── Commands ────────────────────────────────────────────────────────────

def cmd_serve(args) -> int:
    from .api.app import create_app
    app = create_app(settings=get_settings())

    import uvicorn

    logger.info(f"Starting FastAPI server on http://{args.bind}:{args.port}")
    print(f"\n  paramigrate is running at: http://localhost:{args.port}", file=sys.stderr)
    print(f"  API docs at: http://localhost:{args.port}/docs\n", file=sys.stderr)

    uvicorn.run(
        app,
        host=args.bind,
        port=args.port,
        log_level=args.log_level.lower(),
    )
    return 0


def cmd_analyze(args) -> int:
    from .core.migration import analyze_project
    _print_json(analyze_project(args.project_root, settings=get_settings()))
    return 0


def cmd_compatibility(args) -> int:
    from .core.migration import check_project_compatibility
    _print_json(check_project_compatibility(args.project_root, settings=get_settings()))
    return 0


def cmd_plan(args) -> int:
    plan = _plan(_build_engine(), args)
    _print_json(plan.to_dict())
    return 0


def cmd_migrate(args) -> int:
    engine = _build_engine()
    _plan(engine, args)
    result = engine.execute_atomic_migration()
    payload = {"status": engine.status.value, "result": result.to_dict()}
    if result.final_state is not None:
        payload["score"] = engine.calculate_migration_success(result.final_state)
    _print_json(payload)
    return 0 if result.success else 1


def cmd_validate(args) -> int:
    engine = _build_engine()
    engine.scan_project_state(args.project_root)
    completion = engine.validate_completion()
    _print_json({
        "pre_flight": engine.validate_pre_flight().to_dict(),
        "post_migration": engine.validate_post_migration().to_dict(),
        "completion": completion.to_dict(),
        "score": engine.calculate_migration_success(),
    })
    return 0 if completion.valid else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paramigrate",
        description="paramigrate - migrate wallet providers to the Para SDK",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--bind", type=str, default="127.0.0.1", help="Interface to bind")
    serve.add_argument("--port", type=int, default=9010, help="Port for the API server")
    serve.set_defaults(func=cmd_serve)

    analyze = commands.add_parser("analyze", help="Print an analysis report")
    analyze.add_argument("project_root")
    analyze.set_defaults(func=cmd_analyze)

    compatibility = commands.add_parser("compatibility", help="Check Wagmi hook compatibility")
    compatibility.add_argument("project_root")
    compatibility.set_defaults(func=cmd_compatibility)

    for name, func, help_text in (
        ("plan", cmd_plan, "Print the replacement plan"),
        ("migrate", cmd_migrate, "Plan and execute a migration"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("project_root")
        sub.add_argument("--strategy", type=str, default=None,
                         help="Strategy name (detected when omitted)")
        sub.set_defaults(func=func)

    validate = commands.add_parser("validate", help="Run all validation batteries")
    validate.add_argument("project_root")
    validate.set_defaults(func=cmd_validate)
    return parser


def main(argv=None) -> int:
    """Main entry point for paramigrate."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        return args.func(args)
    except MigrationError as e:
        logger.error(str(e))
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
