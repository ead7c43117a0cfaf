# -*- coding: utf-8 -*-
"""Location: ./pushgateway/cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

pushgateway CLI, a thin wrapper around Uvicorn.
This module is exposed as a **console-script** via:

    [project.scripts]
    pushgateway = "pushgateway.cli:main"

so that a user can simply type `pushgateway ...` instead of the longer
`uvicorn pushgateway.main:app ...`.

Features
─────────
* Injects the default FastAPI application path (``pushgateway.main:app``)
  when the user doesn't supply one explicitly.
* Adds default host/port (127.0.0.1:8080) unless the user passes
  ``--host``/``--port`` or overrides them via the environment variables
  ``PUSHGW_HOST`` and ``PUSHGW_PORT``.
* Forwards all remaining arguments verbatim to Uvicorn's own CLI, so
  `--reload`, `--workers`, etc. work exactly the same.

Typical usage
─────────────
```console
$ pushgateway --reload                      # dev server on 127.0.0.1:8080
$ pushgateway --validate-config .env        # check settings and exit
$ pushgateway --validate-webhooks hooks.yaml  # check webhook records and exit
```
"""

# Future
from __future__ import annotations

# Standard
import json
import os
from pathlib import Path
import sys
from typing import List, Optional

# Third-Party
from pydantic import ValidationError
import uvicorn
import yaml

# First-Party
from pushgateway import __version__
from pushgateway.config import Settings
from pushgateway.webhooks.loader.config import ConfigLoader
from pushgateway.webhooks.models import WebhookConfig

# ---------------------------------------------------------------------------
# Configuration defaults (overridable via environment variables)
# ---------------------------------------------------------------------------
DEFAULT_APP = "pushgateway.main:app"
DEFAULT_HOST = os.getenv("PUSHGW_HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PUSHGW_PORT", "8080"))

# ---------------------------------------------------------------------------
# Helper utilities
# ---------------------------------------------------------------------------


def _needs_app(arg_list: List[str]) -> bool:
    """Return *True* when the CLI invocation has *no* positional APP path.

    Uvicorn takes the first non-flag token as the application path.

    Args:
        arg_list (List[str]): List of arguments

    Returns:
        bool: Returns *True* when the CLI invocation has *no* positional APP path

    Examples:
        >>> _needs_app([])
        True
        >>> _needs_app(["--reload"])
        True
        >>> _needs_app(["myapp.main:app"])
        False
    """
    return len(arg_list) == 0 or arg_list[0].startswith("-")


def _insert_defaults(raw_args: List[str]) -> List[str]:
    """Return a *new* argv with defaults added where needed.

    Args:
        raw_args (List[str]): List of input arguments to cli

    Returns:
        List[str]: List of arguments

    Examples:
        >>> result = _insert_defaults([])
        >>> result[0]
        'pushgateway.main:app'
        >>> _insert_defaults(["--uds", "/tmp/gw.sock"])
        ['pushgateway.main:app', '--uds', '/tmp/gw.sock']
    """
    args = list(raw_args)

    if _needs_app(args):
        args.insert(0, DEFAULT_APP)

    # Host/port make no sense with a UNIX domain socket
    if "--uds" not in args:
        if "--host" not in args and "--http" not in args:
            args.extend(["--host", DEFAULT_HOST])
        if "--port" not in args:
            args.extend(["--port", str(DEFAULT_PORT)])

    return args


def _handle_validate_config(path: str = ".env") -> None:
    """Validate the application's environment configuration file.

    Args:
        path (str): Path to the .env file to validate. Defaults to ".env".

    Raises:
        SystemExit: Exits with code 1 if the configuration is invalid.
    """
    try:
        Settings(_env_file=path)
    except ValidationError as exc:
        print(f"❌ Invalid configuration in {path}", file=sys.stderr)
        print(exc.json(indent=2), file=sys.stderr)
        raise SystemExit(1)

    print(f"✅ Configuration in {path} is valid")


def _handle_validate_webhooks(path: str) -> None:
    """Validate a webhook configuration file without starting the server.

    Args:
        path (str): Path to the webhooks YAML file.

    Raises:
        SystemExit: Exits with code 1 if the file or any record is invalid.
    """
    try:
        records = ConfigLoader.load_config(path).webhooks
    except (OSError, yaml.YAMLError, ValidationError, TypeError) as exc:
        print(f"❌ Cannot load {path}: {exc}", file=sys.stderr)
        raise SystemExit(1)

    failed = False
    for index, record in enumerate(records):
        try:
            WebhookConfig.model_validate(record)
        except ValidationError as exc:
            failed = True
            print(f"❌ Record #{index} is invalid", file=sys.stderr)
            print(exc.json(indent=2), file=sys.stderr)
    if failed:
        raise SystemExit(1)

    print(f"✅ {len(records)} webhook record(s) in {path} are valid")


def _handle_config_schema(output: Optional[str] = None) -> None:
    """Export the JSON schema for the gateway Settings.

    Args:
        output (Optional[str]): Optional file path to write the schema.
            If None, prints to stdout.
    """
    schema = Settings.model_json_schema(mode="validation")
    data = json.dumps(schema, indent=2, sort_keys=True)

    if output:
        path = Path(output)
        path.write_text(data, encoding="utf-8")
        print(f"✅ Schema written to {path}")
    else:
        print(data)


# ---------------------------------------------------------------------------
# Public entry-point
# ---------------------------------------------------------------------------


def main() -> None:  # noqa: D401 - imperative mood is fine here
    """Entry point for the *pushgateway* console script (delegates to Uvicorn).

    Environment Variables:
        PUSHGW_HOST: Default host (default: "127.0.0.1")
        PUSHGW_PORT: Default port (default: "8080")

    Flags:
        --validate-config [path]     Validate .env file (default: .env)
        --validate-webhooks [path]   Validate webhook records (default: settings.webhook_config_file)
        --config-schema [output]     Print or write JSON schema for Settings
    """
    if "--version" in sys.argv or "-V" in sys.argv:
        print(f"pushgateway {__version__}")
        return

    if len(sys.argv) > 1:
        cmd = sys.argv[1]

        if cmd == "--validate-config":
            env_path = sys.argv[2] if len(sys.argv) > 2 else ".env"
            _handle_validate_config(env_path)
            return

        if cmd == "--validate-webhooks":
            path = sys.argv[2] if len(sys.argv) > 2 else Settings().webhook_config_file
            _handle_validate_webhooks(path)
            return

        if cmd == "--config-schema":
            output = sys.argv[2] if len(sys.argv) > 2 else None
            _handle_config_schema(output)
            return

    user_args = sys.argv[1:]
    uvicorn_argv = _insert_defaults(user_args)

    # Uvicorn's `main()` uses sys.argv
    sys.argv = ["pushgateway", *uvicorn_argv]
    uvicorn.main()  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":  # pragma: no cover - executed only when run directly
    main()
