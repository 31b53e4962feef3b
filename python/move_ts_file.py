#!/usr/bin/env python
import json
import sys
from pathlib import Path


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 1:
        print(
            "Usage: move_ts_file.py '{\"workspace_root\": \"/path\", \"source\": \"/old.ts\", "
            "\"target\": \"/new.ts\", \"old_module\": \"@scope/a\", \"new_module\": \"@scope/b\"}'",
            file=sys.stderr,
        )
        return 2

    try:
        payload = json.loads(argv[0])
        workspace_root = Path(payload["workspace_root"]).resolve()
        source = Path(payload["source"])
        target = Path(payload["target"])
        old_module = payload["old_module"]
        new_module = payload["new_module"]
        overwrite = bool(payload.get("overwrite", False))
    except Exception as e:
        print(f"Invalid payload: {e}", file=sys.stderr)
        return 2

    try:
        # Import here so the extension fails gracefully if tsmover isn't installed yet
        from tsmover.errors import TsMoverError
        from tsmover.mover import move_unit
    except ImportError as e:
        print("Could not import 'tsmover'. Make sure it is installed in the selected Python environment.", file=sys.stderr)
        print(str(e), file=sys.stderr)
        return 3

    if not source.is_absolute():
        source = workspace_root / source
    if not target.is_absolute():
        target = workspace_root / target

    try:
        report = move_unit(source, target, old_module, new_module, workspace_root, overwrite=overwrite)
    except TsMoverError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(json.dumps(report.as_dict()))
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
