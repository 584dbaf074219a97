"""
Date: 2026-10-18
Description:
Main entry point for the dot-path binder.

Handles configuration loading, logging setup, metrics server startup, and
binds one query string per line (from the arguments or stdin) into a nested structure.
"""

import logging
import sys
from pprint import pformat

from dotbinder.config import get_config
from dotbinder.exceptions import BinderError
from dotbinder.instantiators import get_instantiator, MapInstantiator
from dotbinder.metrics import start_metrics_server
from dotbinder.parameters import Parameters, Target


def setup_logging(level: str):
    root = logging.getLogger()
    # Remove default handlers
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)-5s %(name)s: %(message)s"))
    root.addHandler(ch)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def bind_lines(lines, instantiator, target: Target, out=None) -> int:
    """
    Bind every non-blank line and print the result. Returns the number of lines that failed.
    """
    if out is None:
        out = sys.stdout
    failures = 0
    for line in lines:
        if not line.strip():
            continue
        try:
            parameters = Parameters.from_query_string(line)
            result = instantiator.instantiate(target, parameters)
        except BinderError as e:
            logging.error("Failed to bind '%s': %s", line.strip(), e)
            failures += 1
            continue
        print(pformat(result, sort_dicts=False), file=out)
    return failures


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    cfg = get_config()

    setup_logging(cfg.logging.level)
    logging.info("Starting dot-path binder")

    if cfg.metrics.enabled:
        start_metrics_server(cfg.metrics.port)

    target = Target(name=cfg.target.name, kind=cfg.target.kind)
    instantiator = get_instantiator(target, [MapInstantiator.from_config(cfg)])
    try:
        failures = bind_lines(argv or sys.stdin, instantiator, target)
    except KeyboardInterrupt:
        logging.info("Binder interrupted by user, shutting down")
        failures = 0
    if failures:
        sys.exit(1)


if __name__ == '__main__':
    main()
