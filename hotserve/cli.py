import argparse
import errno
import logging
import os
import socket
import sys

from aiohttp import web

from .app import DEFAULT_DEBOUNCE, make_app
from .errors import HotserveError, PortInUseError, ServePathError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000

ADDRESS_IN_USE = {errno.EADDRINUSE, getattr(errno, "WSAEADDRINUSE", errno.EADDRINUSE)}


def resolve_root(path):
    """Return the directory to serve for ``path``.

    A file target serves its containing directory.
    """
    if not os.path.exists(path):
        raise ServePathError(f"Path does not exist: {path}")
    root = os.path.realpath(path)
    if os.path.isfile(root):
        root = os.path.dirname(root)
    if not os.path.isdir(root) or not os.access(root, os.R_OK | os.X_OK):
        raise ServePathError(f"Cannot read directory: {root}")
    return root


def bind_socket(host, port):
    """Bind the listening socket before anything else is set up."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        if os.name != "nt":
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        if e.errno in ADDRESS_IN_USE:
            raise PortInUseError(host, port) from e
        raise HotserveError(f"Cannot listen on {host}:{port}: {e.strerror or e}") from e
    return sock


def port_number(value):
    port = int(value)
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"invalid port: {value}")
    return port


def build_parser():
    parser = argparse.ArgumentParser(
        prog="hotserve",
        description="Serve a directory and reload the browser when its files change",
    )
    parser.add_argument("path", nargs="?", default=".",
                        help="file or directory to serve (default: current directory)")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("-p", "--port", type=port_number, default=DEFAULT_PORT,
                        help=f"port to listen on (default: {DEFAULT_PORT}, 0 picks a free one)")
    parser.add_argument("--debounce", type=float, default=DEFAULT_DEBOUNCE,
                        help="seconds to fold bursts of changes into one reload")
    parser.add_argument("--no-watch", dest="watch", action="store_false",
                        help="serve files without live reload")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        root = resolve_root(args.path)
        sock = bind_socket(args.host, args.port)
    except HotserveError as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    port = sock.getsockname()[1]
    app = make_app(root, port, debounce=args.debounce, watch=args.watch)

    print(f"Serving {root}")
    print(f"Live server running at http://{args.host}:{port}")
    web.run_app(app, sock=sock, print=None)
    return 0
