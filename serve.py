import argparse
import logging
import sys

import uvicorn

from webrepl import ConfigError, create_app, load_config


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Serve the Python web REPL and namespace browser.")
    parser.add_argument("--config", help="YAML config file (default: $WEBREPL_CONFIG)")
    parser.add_argument("--host", help="interface to bind")
    parser.add_argument("--port", type=int, help="port to listen on")
    parser.add_argument("--log-level", help="logging level name")
    return parser.parse_args(argv)


def main(argv=None):
    """Load the config, then run the app under uvicorn until interrupted."""
    args = parse_args(argv)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    host = args.host or cfg.host
    port = args.port if args.port is not None else cfg.port
    level = (args.log_level or cfg.log_level).upper()

    # Bound to the real stderr before any capture proxies are installed
    logging.basicConfig(stream=sys.stderr, level=level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("webrepl").info("serving on http://%s:%d (namespace %s)", host, port, cfg.namespace)

    # Anyone who can reach this port can run code in this process.
    uvicorn.run(create_app(cfg), host=host, port=port, log_level=level.lower())


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nExiting.")
