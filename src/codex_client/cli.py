from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .client import CompletionClient
from .commands import Commands
from .config import CodexClientConfig
from .contracts import Err
from .errors import ConfigurationError
from .logging import configure_logging
from .metrics import maybe_start_metrics
from .router import ResultRouter
from .surfaces import Span, TextDocument, Workspace

_COMMENT_MARKERS = {
    ".c": "//",
    ".cc": "//",
    ".cpp": "//",
    ".cs": "//",
    ".el": ";;",
    ".go": "//",
    ".h": "//",
    ".hs": "--",
    ".java": "//",
    ".js": "//",
    ".kt": "//",
    ".lisp": ";;",
    ".lua": "--",
    ".rs": "//",
    ".scala": "//",
    ".sql": "--",
    ".swift": "//",
    ".ts": "//",
}

_REGION_COMMANDS = {
    "fix": "fix_region",
    "explain": "explain_region",
    "tests": "generate_tests_for_region",
    "refactor": "refactor_region",
    "region": "prompt_with_region",
}


def comment_marker_for(path: Path, default: str) -> str:
    return _COMMENT_MARKERS.get(path.suffix.lower(), default)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codex-client", description="Send code or prompts to a completion endpoint.")
    sub = parser.add_subparsers(dest="command", required=True)

    prompt = sub.add_parser("prompt", help="Send free-form text ('-' reads stdin).")
    prompt.add_argument("text")

    for name in (*_REGION_COMMANDS, "replace"):
        region = sub.add_parser(name, help=f"Run '{name}' on a region of FILE.")
        region.add_argument("file", type=Path)
        region.add_argument("--start", type=int, default=0, help="Region start offset (default: 0).")
        region.add_argument("--end", type=int, default=None, help="Region end offset (default: end of file).")
    return parser


async def run(
    argv: list[str] | None = None,
    *,
    cfg: CodexClientConfig | None = None,
    client: CompletionClient | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    cfg = cfg or CodexClientConfig()

    workspace = Workspace(notify=lambda message: print(message, file=sys.stderr))
    router = ResultRouter(workspace, panel_name=cfg.results_panel_name)
    client = client or CompletionClient.from_config(cfg)

    async with client:
        commands = Commands(client, cfg, router)
        try:
            if args.command == "prompt":
                text = sys.stdin.read() if args.text == "-" else args.text
                result = await commands.prompt_with_free_text(text, interactive=False)
            else:
                document = TextDocument(
                    args.file.read_text(encoding="utf-8"),
                    comment_marker=comment_marker_for(args.file, cfg.comment_marker),
                    name=str(args.file),
                )
                span = Span(args.start, len(document.text) if args.end is None else args.end)
                if args.command == "replace":
                    result = await commands.prompt_with_region_and_replace(document, span)
                else:
                    command = getattr(commands, _REGION_COMMANDS[args.command])
                    result = await command(document, span, interactive=False)
        except ConfigurationError as e:
            print(f"ConfigurationError: {e}", file=sys.stderr)
            return 2
        except OSError as e:
            print(f"Cannot read {e.filename}: {e.strerror}", file=sys.stderr)
            return 2
        except ValueError as e:
            print(f"Invalid region: {e}", file=sys.stderr)
            return 2

    if isinstance(result, Err) or workspace.errors:
        return 1
    if args.command == "replace":
        args.file.write_text(document.text, encoding="utf-8")
        return 0
    panel = workspace.find_panel(cfg.results_panel_name)
    if panel is not None:
        print(panel.text)
    return 0


def main() -> None:  # pragma: no cover
    cfg = CodexClientConfig()
    configure_logging(level=cfg.log_level, fmt=cfg.log_format, secrets=[s for s in (cfg.api_key,) if s])
    maybe_start_metrics(enable=cfg.enable_metrics, bind=cfg.metrics_bind, port=cfg.metrics_port)
    sys.exit(asyncio.run(run(cfg=cfg)))


if __name__ == "__main__":  # pragma: no cover
    main()
