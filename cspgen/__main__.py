"""
cspgen CLI
"""
import argparse
import asyncio
import json
import sys

from cspgen.config.loader import CSPGenSettings
from cspgen.errors import CSPGenerationError
from cspgen.logging_config import setup_logging


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        prog="cspgen",
        description="cspgen - Content-Security-Policy generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate a policy for a page
  python -m cspgen generate https://example.com

  # Keep literal origins instead of *.domain wildcards
  python -m cspgen generate example.com --no-wildcards

  # Emit the policy as JSON (directive -> sources)
  python -m cspgen generate example.com --json

  # Run the HTTP API
  python -m cspgen serve --port 3000
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Generate command
    gen_parser = subparsers.add_parser('generate', help='Generate a CSP for a URL')
    gen_parser.add_argument('url', help='Page URL (https:// is assumed when omitted)')
    gen_parser.add_argument('--no-wildcards', dest='use_wildcards', action='store_false',
                            help='Do not collapse known CDN subdomains into *.domain sources')
    gen_parser.add_argument('--json', action='store_true',
                            help='Print the policy as a JSON object')

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', help='Listen address (default from CSPGEN_LISTEN_HOST)')
    serve_parser.add_argument('--port', type=int, help='Listen port (default from CSPGEN_LISTEN_PORT)')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == 'generate':
        return cmd_generate(args)
    if args.command == 'serve':
        return cmd_serve(args)
    return 0


def cmd_generate(args):
    """Execute generate command"""
    from cspgen.crawler.generator import generate_csp
    from cspgen.policy.csp_builder import parse_csp

    settings = CSPGenSettings()
    setup_logging(log_level=settings.log_level, json_format=settings.log_json, stream=sys.stderr)

    try:
        csp = asyncio.run(generate_csp(args.url, args.use_wildcards, settings=settings))
    except CSPGenerationError as e:
        print(f"Error: {e.label}: {e.details}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(parse_csp(csp), indent=2))
    else:
        print(csp)
    return 0


def cmd_serve(args):
    """Execute serve command"""
    import uvicorn

    settings = CSPGenSettings()
    setup_logging(log_level=settings.log_level, json_format=settings.log_json)
    uvicorn.run(
        "cspgen.main:app",
        host=args.host or settings.listen_host,
        port=args.port or settings.listen_port,
        log_config=None,
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
