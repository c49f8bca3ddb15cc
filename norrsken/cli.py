"""Kommandoradsverktyg för SIE-filer och nyckeltal."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .kpi import (
    DataUnavailableError,
    Journal,
    LedgerAccount,
    calculate_annual_kpis,
    calculate_ledger_kpis,
    calculate_monthly_kpis_from_document,
    find_unbalanced_verifications,
)
from .kpi.frames import kpi_frame
from .sie import SieParseError, WriteOptions, encode_sie_text, parse_sie, read_sie_file, write_sie
from .sie.dates import parse_sie_date
from .sie.frames import trial_balance_frame

_LOGGER = logging.getLogger(__name__)


def _load(path: str):
    return parse_sie(read_sie_file(path))


def _print(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _annual(args: argparse.Namespace) -> int:
    kpis = calculate_annual_kpis(_load(args.fil), args.ar)
    if args.visning:
        frame = kpi_frame(kpis)
        _print(dict(zip(frame["Benämning"], frame["Visning"])))
    else:
        _print(kpis.as_dict())
    return 0


def _monthly(args: argparse.Namespace) -> int:
    document = _load(args.fil)
    series = calculate_monthly_kpis_from_document(document)
    payload = series.as_dict()
    payload["obalanserade_verifikationer"] = [
        {"serie": item.series, "nummer": item.number, "summa": float(item.total)}
        for item in find_unbalanced_verifications(document.postings)
    ]
    _print(payload)
    return 0


def _trial_balance(args: argparse.Namespace) -> int:
    frame = trial_balance_frame(_load(args.fil), args.ar)
    _print(frame.drop(columns=["Konto_int"]).to_dict(orient="records"))
    return 0


def _write(args: argparse.Namespace) -> int:
    document = _load(args.fil)
    options = WriteOptions(file_format=args.format)
    output = Path(args.utfil)
    output.write_bytes(encode_sie_text(write_sie(document, options), options.file_format))
    _print(
        {
            "fil": str(output),
            "konton": len(document.accounts),
            "saldon": len(document.balances),
            "transaktioner": len(document.postings),
        }
    )
    return 0


def _ledger(args: argparse.Namespace) -> int:
    data: Dict[str, Any] = json.loads(Path(args.fil).read_text(encoding="utf-8"))
    result = calculate_ledger_kpis(
        [LedgerAccount.from_mapping(item) for item in data.get("accounts") or ()],
        [Journal.from_mapping(item) for item in data.get("journals") or ()],
        start_date=parse_sie_date(args.fran) if args.fran else None,
        end_date=parse_sie_date(args.till) if args.till else None,
    )
    _print(result.as_dict())
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="norrsken", description="Nyckeltal från SIE-filer")
    parser.add_argument("--verbose", action="store_true", help="Visa felsökningsloggar")
    commands = parser.add_subparsers(dest="kommando", required=True)

    annual = commands.add_parser("nyckeltal", help="Årsnyckeltal från IB/UB/RES")
    annual.add_argument("fil", help="Sökväg till SIE-filen")
    annual.add_argument("--ar", type=int, default=0, help="Årsindex, 0 är innevarande år")
    annual.add_argument("--visning", action="store_true", help="Formaterade värden med svenska namn")
    annual.set_defaults(handler=_annual)

    monthly = commands.add_parser("manad", help="Månadsnyckeltal från transaktioner")
    monthly.add_argument("fil", help="Sökväg till SIE-filen")
    monthly.set_defaults(handler=_monthly)

    trial_balance = commands.add_parser("saldobalans", help="Saldobalans per konto")
    trial_balance.add_argument("fil", help="Sökväg till SIE-filen")
    trial_balance.add_argument("--ar", type=int, default=0, help="Årsindex")
    trial_balance.set_defaults(handler=_trial_balance)

    write = commands.add_parser("skriv", help="Läs in och skriv ut filen på nytt")
    write.add_argument("fil", help="SIE-fil att läsa")
    write.add_argument("utfil", help="Fil att skriva till")
    write.add_argument("--format", choices=["PCUTF8", "PC8"], default="PCUTF8")
    write.set_defaults(handler=_write)

    ledger = commands.add_parser("bokforing", help="Nyckeltal från exporterad bokföring (JSON)")
    ledger.add_argument("fil", help="JSON med 'accounts' och 'journals'")
    ledger.add_argument("--fran", help="Periodens första dag (ÅÅÅÅ-MM-DD)")
    ledger.add_argument("--till", help="Periodens sista dag (ÅÅÅÅ-MM-DD)")
    ledger.set_defaults(handler=_ledger)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Kör ett delkommando och skriver resultatet som JSON."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.handler(args)
    except (SieParseError, DataUnavailableError) as exc:
        print(f"Fel: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        _LOGGER.debug("Kunde inte läsa eller skriva fil", exc_info=True)
        print(f"Filfel: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI används vid behov
    raise SystemExit(main())


__all__ = ["main"]
