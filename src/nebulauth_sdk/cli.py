"""
Command-line interface for NebulAuth Python SDK
Provides key verification and request signing diagnostics
"""

import argparse
import sys
import json
import logging
from typing import Optional

from .version import __version__
from .config import load_client_options_from_env, load_client_options_from_file
from .exceptions import NebulAuthError
from .http_client import (
    NebulAuthClient,
    NebulAuthResponse,
    VerifyKeyInput,
    AuthVerifyInput,
)
from .signing.types import PopAuthOptions


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='nebulauth-cli',
        description='NebulAuth SDK command-line interface for key verification and request signing'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'NebulAuth Python SDK {__version__}'
    )

    parser.add_argument(
        '--config',
        help='JSON file with client options (environment variables are used otherwise)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_verify_parser(subparsers)
    setup_sign_headers_parser(subparsers)

    return parser


def setup_verify_parser(subparsers):
    """Setup key verification subcommands."""
    verify_key_parser = subparsers.add_parser('verify-key', help='Verify a license key (POST /keys/verify)')
    verify_key_parser.add_argument('--key', required=True, help='License key')
    verify_key_parser.add_argument('--hwid', help='Hardware ID sent in the X-HWID header')
    verify_key_parser.add_argument('--request-id', help='Request identifier echoed by the server')

    auth_verify_parser = subparsers.add_parser('auth-verify', help='Verify a key for an auth session (POST /auth/verify)')
    auth_verify_parser.add_argument('--key', required=True, help='License key')
    auth_verify_parser.add_argument('--hwid', help='Hardware ID')
    auth_verify_parser.add_argument('--request-id', help='Request identifier echoed by the server')


def setup_sign_headers_parser(subparsers):
    """Setup the sign-headers dry run subcommand."""
    sign_parser = subparsers.add_parser('sign-headers', help='Print the auth headers for a request without sending it')
    sign_parser.add_argument('--method', default='POST', help='HTTP method (default: POST)')
    sign_parser.add_argument('--url', required=True, help='Full request URL')
    sign_parser.add_argument('--body', default='', help='Exact request body')
    sign_parser.add_argument('--use-pop', action='store_true', help='Sign with a proof-of-possession key')
    sign_parser.add_argument('--access-token', help='PoP access token')
    sign_parser.add_argument('--pop-key', help='PoP signing key')


def load_options(args):
    """Load client options from --config or the environment."""
    if args.config:
        return load_client_options_from_file(args.config)
    return load_client_options_from_env()


def print_response(response: NebulAuthResponse) -> int:
    """Print a response as JSON and map it to an exit code."""
    print(json.dumps({
        'status_code': response.status_code,
        'ok': response.ok,
        'data': response.data,
    }, indent=2))
    return 0 if response.ok else 1


def handle_verify_key_command(args) -> int:
    """Handle key verification."""
    with NebulAuthClient(load_options(args)) as client:
        response = client.verify_key(VerifyKeyInput(
            key=args.key,
            hwid=args.hwid,
            request_id=args.request_id
        ))
    return print_response(response)


def handle_auth_verify_command(args) -> int:
    """Handle auth session verification."""
    with NebulAuthClient(load_options(args)) as client:
        response = client.auth_verify(AuthVerifyInput(
            key=args.key,
            hwid=args.hwid,
            request_id=args.request_id
        ))
    return print_response(response)


def handle_sign_headers_command(args) -> int:
    """Handle sign-headers dry run."""
    override = None
    if args.use_pop:
        override = PopAuthOptions(
            use_pop=True,
            access_token=args.access_token,
            pop_key=args.pop_key
        )

    with NebulAuthClient(load_options(args)) as client:
        headers = client.build_auth_headers(args.method, args.url, args.body, override)

    print(json.dumps(headers, indent=2, sort_keys=True))
    return 0


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        if args.command == 'verify-key':
            return handle_verify_key_command(args)
        elif args.command == 'auth-verify':
            return handle_auth_verify_command(args)
        elif args.command == 'sign-headers':
            return handle_sign_headers_command(args)
        else:
            # No command specified, show help
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except NebulAuthError as e:
        print(f"Error [{e.error_code}]: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
