"""
Run configuration loading for link-verifier.

A run config is a YAML or JSON mapping of CLI option names to values,
e.g.:

    remote: https://example.com
    local: http://localhost:8080
    aliases: [https://www.example.com]
    ignore: [docs/old, downloads]
    verify: true
"""

import argparse
import json
from pathlib import Path

import yaml


# Config-file keys that differ from argparse destinations
KEY_ALIASES = {
    "aliases": "alias",
    "ignores": "ignore",
    "check": "verify",
    "verify_remote": "verify",
    "linkfile": "link_file",
    "links": "link_file",
    "workers": "jobs",
}

# Destinations that accept a list (repeatable CLI options)
LIST_KEYS = {"alias", "ignore"}


def load_run_config(path: str) -> dict:
    """Load a run configuration from JSON or YAML."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Run config not found: {path}")

    # Handle empty files (e.g., /dev/null) gracefully
    content = p.read_text(encoding="utf-8").strip()
    if not content:
        return {}

    if p.suffix.lower() in (".yaml", ".yml"):
        result = yaml.safe_load(content)
    else:
        result = json.loads(content)

    if result and not isinstance(result, dict):
        raise ValueError(f"Run config must be a mapping: {path}")
    return result or {}


def apply_run_config(
    args: argparse.Namespace,
    cfg: dict,
    provided_flags: set[str],
) -> argparse.Namespace:
    """Apply run config to args, respecting CLI overrides."""
    if not cfg:
        return args

    for key, value in cfg.items():
        arg_key = KEY_ALIASES.get(key.replace("-", "_"), key.replace("-", "_"))
        if arg_key not in args.__dict__:
            continue
        if arg_key in provided_flags:
            continue
        if arg_key in LIST_KEYS and isinstance(value, str):
            value = [value]
        setattr(args, arg_key, value)

    return args


def provided_flag_names(argv: list[str], parser: argparse.ArgumentParser) -> set[str]:
    """
    Destinations of the options explicitly given on the command line.

    Understands the forms argparse accepts: --opt=value, unambiguous long
    prefixes, short options with an attached value (-rURL) and bundled
    short flags (-wc).
    """
    actions = {}
    for action in parser._actions:
        for opt in action.option_strings:
            actions[opt] = action

    provided = set()
    for arg in argv:
        if arg == "--":
            break
        if not arg.startswith("-") or arg == "-":
            continue

        if arg.startswith("--"):
            opt = arg.split("=", 1)[0]
            action = actions.get(opt)
            if action is None and parser.allow_abbrev:
                matches = {a for o, a in actions.items() if o.startswith("--") and o.startswith(opt)}
                action = matches.pop() if len(matches) == 1 else None
            if action is not None:
                provided.add(action.dest)
            continue

        for ch in arg[1:]:
            action = actions.get("-" + ch)
            if action is None:
                break
            provided.add(action.dest)
            if action.nargs != 0:
                # The rest of the argument is this option's value
                break
    return provided
