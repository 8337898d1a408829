#!/usr/bin/env python3
"""Developer entry point: run provider operations outside the host.

    python -m nautobot_provider [--config nautobot.yaml] [--url URL] \\
        [--max-pages N] [--page-size N] [--name NAME] [--slug SLUG] [-v] \\
        {read,schema} manufacturers

Configuration is resolved exactly as the host's configure call does: the
YAML file (keys ``url`` and ``token``) stands in for the provider block,
``--url`` overrides it, and ``NAUTOBOT_URL``/``NAUTOBOT_TOKEN`` fill in
whatever is left unset.  The token is deliberately not accepted on the
command line.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

import yaml

from nautobot_provider.config import HostConfig
from nautobot_provider.diagnostics import Diagnostics
from nautobot_provider.models import ManufacturerListParams
from nautobot_provider.provider import TYPE_NAME, NautobotProvider


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="nautobot_provider",
        description="Run Nautobot provider operations outside the host",
    )
    p.add_argument("command", choices=["read", "schema"])
    p.add_argument("data_source", help="Data source name, e.g. manufacturers")
    p.add_argument("--config", type=Path, default=None, help="YAML file with url/token keys")
    p.add_argument("--url", default=None, help="Nautobot base URL (overrides --config)")
    p.add_argument("--max-pages", type=int, default=None)
    p.add_argument("--page-size", type=int, default=None)
    p.add_argument("--name", default=None, help="Filter by exact name")
    p.add_argument("--slug", default=None, help="Filter by slug")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)


def load_host_config(path: Path | None, url: str | None) -> HostConfig:
    """Merge the YAML config file with command-line overrides."""
    data: dict[str, Any] = {}
    if path is not None:
        loaded = yaml.safe_load(path.read_text()) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{path}: expected a mapping with url/token keys")
        data.update({k: loaded[k] for k in ("url", "token") if k in loaded})
    if url:
        data["url"] = url
    return HostConfig.from_mapping(data)


def _report(diags: Diagnostics) -> None:
    for d in diags:
        print(str(d), file=sys.stderr)


def _type_name(name: str) -> str:
    return name if name.startswith(f"{TYPE_NAME}_") else f"{TYPE_NAME}_{name}"


async def run(args: argparse.Namespace, provider: NautobotProvider | None = None) -> int:
    provider = provider or NautobotProvider()
    kwargs = {
        "params": ManufacturerListParams(name=args.name, slug=args.slug),
        "max_pages": args.max_pages,
        "page_size": args.page_size,
    }

    if args.command == "schema":
        ds = provider.data_source(_type_name(args.data_source), **kwargs)
        print(json.dumps(ds.schema().to_dict(), indent=2))
        return 0

    configured = provider.configure(load_host_config(args.config, args.url))
    _report(configured.diagnostics)
    if configured.diagnostics.has_error():
        return 1

    ds = provider.data_source(
        _type_name(args.data_source), configured.data_source_data, **kwargs
    )
    result = await ds.read()
    _report(result.diagnostics)
    if result.state is None:
        return 1
    print(json.dumps(result.state.to_python(), indent=2))
    return 1 if result.diagnostics.has_error() else 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="  %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    try:
        return asyncio.run(run(args))
    except KeyError as exc:
        print(f"ERROR: {exc.args[0]}", file=sys.stderr)
        return 2
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
