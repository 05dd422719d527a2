"""CLI entrypoints for sitegen commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .llm.runner import LLMRunner
from .logging import configure_logging
from .refine.engine import RefinementEngine
from .refine.judge import LLMJudge, MalformedResponseError
from .trigger.events import event_from_push_payload
from .trigger.policy import TriggerPolicy, is_self_generated_push


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _add_repo_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo",
        default=".",
        help="Repository root holding .sitegen.yml (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitegen",
        description="Decide on and refine LLM-generated project sites.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    decide_parser = subparsers.add_parser(
        "decide",
        help="Report whether a push payload would trigger site generation.",
    )
    _add_verbose_option(decide_parser, suppress_default=True)
    _add_repo_option(decide_parser)
    decide_parser.add_argument("payload", help="Path to a push event payload (JSON).")

    refine_parser = subparsers.add_parser(
        "refine",
        help="Run the evaluate-and-refine loop over an existing HTML page.",
    )
    _add_verbose_option(refine_parser, suppress_default=True)
    _add_repo_option(refine_parser)
    refine_parser.add_argument("artifact", help="Path to the generated HTML page.")
    refine_parser.add_argument(
        "--output",
        help="Write the refined page here instead of printing it.",
    )
    refine_parser.add_argument("--project-name", help="Project name given to the judge.")
    refine_parser.add_argument(
        "--description",
        default="",
        help="Project description given to the judge.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for sitegen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    repo_path = Path(args.repo).expanduser().resolve()
    try:
        config = load_config(repo_path)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "decide":
        try:
            payload = json.loads(Path(args.payload).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            parser.exit(1, f"Unable to read payload: {exc}\n")
        if not isinstance(payload, dict):
            parser.exit(1, "Payload must be a JSON object\n")

        event = event_from_push_payload(payload, config.trigger.to_trigger_config())
        if is_self_generated_push(event.commits):
            print("skip: Self-generated push")
            parser.exit(1)
        decision = TriggerPolicy().decide(event)
        verdict = "generate" if decision.should_generate else "skip"
        print(f"{verdict}: {decision.reason}")
        if not decision.should_generate:
            parser.exit(1)
    elif args.command == "refine":
        artifact_path = Path(args.artifact)
        try:
            html = artifact_path.read_text(encoding="utf-8")
        except OSError as exc:
            parser.exit(1, f"Unable to read artifact: {exc}\n")

        refine_config = config.refine.to_refinement_config(
            project_name=args.project_name or repo_path.name,
            project_description=args.description,
        )
        judge = LLMJudge(LLMRunner.from_config(config.llm), refine_config)
        try:
            result = RefinementEngine().refine(html, refine_config, judge.evaluate, judge.improve)
        except MalformedResponseError as exc:
            parser.exit(1, f"sitegen refine failed: {exc}\n")
        except RuntimeError as exc:
            parser.exit(1, f"sitegen refine failed: {exc}\nRun with --verbose for more details.\n")

        if args.output:
            Path(args.output).write_text(result.artifact, encoding="utf-8")
        else:
            print(result.artifact)
        print(
            f"Score {result.evaluation.score}/10 after {result.iterations} iteration(s)"
            f" (improved: {'yes' if result.improved else 'no'})",
            file=sys.stderr,
        )
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
