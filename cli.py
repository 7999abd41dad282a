# cli.py
import argparse
import contextlib
import json
import sys

from dotenv import load_dotenv

from ethoscan.chains import CHAINS
from ethoscan.core.errors import InvalidAddress
from ethoscan.core.verify import Verifier
from ethoscan.utils.registries import load_registries


def format_report(report) -> str:
    lines = [
        "=== ETHOSCAN REPORT ===",
        f"Address: {report.address}",
        f"Score: {report.score}/{report.max_score}",
        f"Tier: {report.tier.value}",
        "",
        "Pillars:",
    ]
    for name, pillar in report.pillars.items():
        mark = "✅" if pillar.verified else "❌"
        lines.append(f"- {name.value}: {mark} ({pillar.points} pts) {pillar.details}".rstrip())
    if report.risks:
        lines += ["", "RISKS:"] + [f"- 🚩 {r}" for r in report.risks]
    if report.warnings:
        lines += ["", "WARNINGS:"] + [f"- ⚠️ {w}" for w in report.warnings]
    return "\n".join(lines)


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Ethoscan Genesis Score verifier")
    p.add_argument("--address", required=True, help="Wallet / treasury address (0x + 40 hex)")
    p.add_argument("--chain", default=None, choices=sorted(CHAINS), help="Chain to use (default: ETHOSCAN_CHAIN or base)")
    p.add_argument("--registry-file", default=None, help="JSON file with teams / pledges / locks")
    p.add_argument("--timeout", type=float, default=None, help="Overall deadline in seconds")
    p.add_argument("--json", action="store_true", help="Print the report as JSON on stdout; progress lines go to stderr")
    args = p.parse_args(argv)

    load_dotenv()

    # with --json, stdout carries the report and nothing else
    progress = contextlib.redirect_stdout(sys.stderr) if args.json else contextlib.nullcontext()
    with progress:
        print(f"[CLI] Args -> chain={args.chain} address={args.address} json={args.json}")

        try:
            registries = load_registries(args.registry_file) if args.registry_file else None
            verifier = Verifier.from_env(chain=args.chain, registries=registries, timeout=args.timeout)
        except (OSError, ValueError) as e:
            print(f"[CLI] ❌ setup failed: {e}", file=sys.stderr)
            return 1

        try:
            report = verifier.verify(args.address)
        except InvalidAddress as e:
            print(f"[CLI] ❌ {e}", file=sys.stderr)
            return 2

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
