"""Interface de linha de comando para executar uma consulta ao Vimeo."""

import argparse
import logging
import sys

from .accounts import EnvAccountClient
from .config import ENV_PREFIX, Config, ScopeSettings
from .io_ndjson import NDJSONReply
from .logging_config import configure_logging
from .query import CannedQuery, Query
from .vimeo_api import ApiClient

LOGGER = logging.getLogger("vimeo_scope.cli")


def build_parser() -> argparse.ArgumentParser:
    """Monta o parser de argumentos da CLI."""
    settings = ScopeSettings()
    p = argparse.ArgumentParser(
        description="Busca/navegação de vídeos do Vimeo com saída NDJSON")
    p.add_argument("query", nargs="?", default="",
                   help="texto da busca (vazio = modo navegação)")
    p.add_argument("--department", default="",
                   help="ID do canal/departamento (ou aggregated:...)")
    p.add_argument("--limit", type=int, default=None,
                   help="máximo de resultados aceitos pelo destino")
    p.add_argument("--apiroot", default=None,
                   help=f"raiz da API (ou env {ENV_PREFIX}APIROOT)")
    p.add_argument("--log-level", default=settings.log_level)
    return p


def main() -> None:
    """Ponto de entrada da CLI."""
    parser = build_parser()
    args = parser.parse_args()

    if args.limit is not None and args.limit < 0:
        parser.error("--limit deve ser >= 0.")

    configure_logging(args.log_level)
    config = Config(apiroot=args.apiroot) if args.apiroot else Config()

    reply = NDJSONReply(sys.stdout, limit=args.limit)
    with ApiClient.create(accounts=EnvAccountClient(), config=config) as client:
        query = Query(client, CannedQuery(args.query, args.department))
        outcome = query.run(reply)

    if outcome.error is not None:
        LOGGER.error("query failed after %d results: %s", outcome.pushed, outcome.error)
        sys.exit(1)


if __name__ == "__main__":
    main()
