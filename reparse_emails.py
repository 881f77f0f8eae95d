from __future__ import annotations

import argparse
from dataclasses import replace
import json
from pathlib import Path
from typing import Any

from config import Config, configure_logging
from email_ingest import IngestedEmail
import pipeline


def _load_json(path: Path) -> dict[str, Any] | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _stable_dump(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _match_only_id(path: Path, payload: dict[str, Any], only_ids: set[str]) -> bool:
    if not only_ids:
        return True
    candidates = {path.stem, str(payload.get("id") or "").strip(), str(payload.get("messageId") or "").strip()}
    return any(candidate in only_ids for candidate in candidates if candidate)


def _result_path(path: Path, out_dir: Path | None) -> Path:
    target_dir = out_dir or path.parent
    return target_dir / f"{path.stem}.parsed.json"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Reparse stored email payloads ({fromEmail, subject, body, bodyHtml}) into part requests."
    )
    parser.add_argument("dir", type=Path, help="Directory containing stored email JSON files")
    parser.add_argument(
        "--write",
        action="store_true",
        help="Write <name>.parsed.json next to each payload (or into --out-dir).",
    )
    parser.add_argument("--out-dir", type=Path, default=None, help="Directory for parsed results.")
    parser.add_argument(
        "--only-id",
        action="append",
        default=[],
        help="Only process matching payloads (file stem, id or messageId). Repeatable.",
    )
    args = parser.parse_args(argv)

    root = args.dir
    if not root.exists() or not root.is_dir():
        raise SystemExit(f"Not a directory: {root}")
    if args.out_dir is not None:
        args.out_dir.mkdir(parents=True, exist_ok=True)

    only_ids = {str(value).strip() for value in args.only_id if str(value).strip()}
    config = Config.from_env()
    configure_logging(config)

    scanned = filtered = parsed = with_orders = changed = written = errors = 0
    for path in sorted(root.glob("*.json")):
        if path.name.endswith(".parsed.json"):
            continue
        scanned += 1
        payload = _load_json(path)
        if payload is None:
            print(f"[error] {path.name}: not a JSON object")
            errors += 1
            continue
        if not _match_only_id(path, payload, only_ids):
            filtered += 1
            continue

        message = IngestedEmail.from_payload(payload)
        if not message.message_id:
            message = replace(message, message_id=path.stem)
        result = pipeline.process_message(message, config).to_dict()
        parsed += 1
        if result["orders"]:
            with_orders += 1
        print(
            f"[parsed] {path.name}: airline={result['airline'] or '-'} "
            f"strategy={result['strategy'] or '-'} orders={len(result['orders'])} "
            f"aviation={'true' if result['isAviationRequest'] else 'false'}"
        )

        target = _result_path(path, args.out_dir)
        previous = _load_json(target) if target.exists() else None
        if previous is not None and _stable_dump(previous) == _stable_dump(result):
            continue
        changed += 1
        if not args.write:
            continue
        try:
            target.write_text(json.dumps(result, ensure_ascii=False, indent=2), encoding="utf-8")
            written += 1
        except OSError as exc:
            print(f"[error] {path.name}: write failed: {exc}")
            errors += 1

    print(
        "scanned={scanned} filtered={filtered} parsed={parsed} with_orders={with_orders} "
        "changed={changed} written={written} errors={errors} write={write}".format(
            scanned=scanned,
            filtered=filtered,
            parsed=parsed,
            with_orders=with_orders,
            changed=changed,
            written=written,
            errors=errors,
            write=args.write,
        )
    )
    return 0 if errors == 0 else 2


if __name__ == "__main__":
    raise SystemExit(main())
