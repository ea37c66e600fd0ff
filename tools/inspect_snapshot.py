import argparse
import sys
from collections import defaultdict
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Print applied signatures per document from a snapshot file."
    )
    parser.add_argument(
        "--snapshot",
        default="storage/snapshot.json",
        help="快照文件（默认：storage/snapshot.json）",
    )
    parser.add_argument(
        "--document",
        default="",
        help="可选：只显示指定文档ID",
    )
    args = parser.parse_args()

    _add_backend_to_path()
    from signdesk.storage import Snapshot, read_snapshot

    path = Path(args.snapshot)
    if not path.exists():
        print(f"[ERROR] 快照文件不存在: {path}")
        return 1

    snapshot = Snapshot.model_validate(read_snapshot(path))
    names = {d.id: d.original_name for d in snapshot.documents}
    signatures = {s.id: s.name for s in snapshot.signatures}

    by_document = defaultdict(list)
    for applied in snapshot.applied_signatures:
        by_document[applied.document_id].append(applied)

    for document_id, placements in by_document.items():
        if args.document and document_id != args.document:
            continue
        print(f"{document_id} ({names.get(document_id, '?')}): {len(placements)}")
        for a in sorted(placements, key=lambda p: (p.page_number, p.applied_at)):
            print(
                f"  p{a.page_number:<4} {a.position.grid_position:<8} "
                f"{signatures.get(a.signature_id, a.signature_id)}  {a.id}"
            )

    dangling = snapshot.dangling_placements()
    if dangling:
        print(f"[WARN] 父记录缺失的落位: {len(dangling)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
