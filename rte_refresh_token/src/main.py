"""
rte-refresh-token CLI.

Usage::

    rte-refresh-token --client-id ID --client-secret SECRET console
    rte-refresh-token --client-id ID --client-secret SECRET \\
        kube-secret rte-token --secret-key token --namespace photon

``--client-id`` / ``--client-secret`` fall back to ``RTE_CLIENT_ID`` /
``RTE_CLIENT_SECRET``. Exits with status 0 on success, 1 on any error.

CHANGELOG:
- 2026-10-16: Initial creation

TODO:
- None
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from photon.src.log import configure_logging, masked_token
from rte_refresh_token.src.kube import KubeSecretOptions, exec_kube_secret
from rte_refresh_token.src.oauth import fetch_token
from rte_refresh_token.src.settings import TokenSettings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rte-refresh-token",
        description="Fetch an RTE API access token and output it.",
    )
    parser.add_argument(
        "--client-id", help="the client_id generated by the RTE portal"
    )
    parser.add_argument(
        "--client-secret", help="the client secret generated by the RTE portal"
    )

    commands = parser.add_subparsers(dest="output", required=True, metavar="OUTPUT")
    commands.add_parser("console", help="dump the token to the console")

    kube = commands.add_parser(
        "kube-secret", help="store the token as a kubernetes secret"
    )
    kube.add_argument("secret_name", help="the name of the secret to generate")
    kube.add_argument(
        "--secret-key",
        required=True,
        help="the key of the secret in which to store the token",
    )
    kube.add_argument(
        "--namespace", help="the kubernetes namespace in which to store the secret"
    )
    kube.add_argument("--context", help="the name of the kubeconfig context to use")
    kube.add_argument("--cluster", help="the name of the kubeconfig cluster to use")
    return parser


def run(args: argparse.Namespace, settings: TokenSettings) -> None:
    """Fetch the token and dispatch it to the selected output.

    Raises:
        ValueError: If client credentials are missing.
        Exception: Whatever the token request or the output raised.
    """
    client_id = args.client_id or settings.client_id
    client_secret = args.client_secret or settings.client_secret
    if not client_id or not client_secret:
        raise ValueError(
            "client id and secret are required "
            "(--client-id/--client-secret or RTE_CLIENT_ID/RTE_CLIENT_SECRET)"
        )

    logger.info(
        "Requesting token client_id=%s client_secret=%s",
        client_id,
        masked_token(client_secret),
    )
    auth = fetch_token(client_id, client_secret)

    if args.output == "console":
        print(auth.access_token)
    elif args.output == "kube-secret":
        exec_kube_secret(
            auth.access_token,
            KubeSecretOptions(
                secret_name=args.secret_name,
                secret_key=args.secret_key,
                namespace=args.namespace,
                context=args.context,
                cluster=args.cluster,
            ),
        )


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, configure logging, fetch and output the token.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        settings = TokenSettings()
    except ValidationError as exc:
        configure_logging()
        logger.error("Invalid environment settings: %s", exc)
        return 1

    configure_logging(settings.log_level)

    try:
        run(args, settings)
    except Exception:
        logger.error("Token refresh failed", exc_info=True)
        return 1
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
