from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from rich.console import Console
from rich.table import Table

from wayfind.config import settings
from wayfind.core.bulk import BulkProgress, generate_bulk
from wayfind.core.engine import generate_instruction_set, prepare_path
from wayfind.core.models import PathRecord, Room, StepSize
from wayfind.core.steps import adjust_instruction_set, extract_step_count
from wayfind.errors import WayfindError
from wayfind.providers.factory import build_provider
from wayfind.store.instructions import get_store


def _read_floor(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _save_json(path: Path, obj) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2), encoding="utf-8")


def _segments_table(path: PathRecord, rooms: List[Room]) -> Table:
    prepared = prepare_path(path, rooms)
    table = Table(title=f"Wayfind — {path.from_room.label} → {path.to_room.label}")
    table.add_column("#")
    table.add_column("Direction")
    table.add_column("Steps")
    table.add_column("Instruction")
    table.add_column("Nearby")
    for i, seg in enumerate(prepared.segments, start=1):
        table.add_row(
            str(i),
            seg.direction,
            str(seg.steps),
            seg.relative_direction or "",
            ", ".join(seg.nearby_rooms),
        )
    return table


def _run_single(args, console: Console, data: dict) -> int:
    path = PathRecord(**data["path"])
    rooms = [Room(**r) for r in data.get("rooms", [])]

    console.print(_segments_table(path, rooms))
    if args.dry_run:
        return 0

    provider = build_provider(args.provider)
    with console.status("Generating instructions..."):
        instruction_set = generate_instruction_set(path, rooms, provider)
    get_store().upsert(instruction_set)

    shown = adjust_instruction_set(instruction_set, StepSize(args.step_size))
    for i, line in enumerate(shown.descriptive_instructions, start=1):
        console.print(f"{i}. {line}")
    total = sum(extract_step_count(line) or 0 for line in instruction_set.concise_instructions)
    console.print(f"Total: {total} steps at medium stride")

    out = Path(args.out)
    _save_json(out, instruction_set.model_dump())
    console.print(f"Saved: {out.resolve()}")
    return 0


def _run_bulk(args, console: Console, data: dict) -> int:
    paths = [PathRecord(**p) for p in data["paths"]]
    rooms = [Room(**r) for r in data.get("rooms", [])]
    rooms_by_path = {p.path_id: rooms for p in paths}

    def on_progress(progress: BulkProgress) -> None:
        logging.getLogger("wayfind.cli").debug(
            "batch %d/%d: %d completed, %d failed",
            progress.current_batch, progress.total_batches,
            progress.completed_paths, progress.failed_paths,
        )

    report = generate_bulk(
        paths, rooms_by_path, build_provider(args.provider), get_store(),
        batch_size=settings.bulk_batch_size, on_progress=on_progress,
    )

    table = Table(title="Bulk generation")
    table.add_column("Path")
    table.add_column("Result")
    table.add_column("Error")
    for r in report.results:
        table.add_row(r.path_id, "ok" if r.success else "failed", r.error or "")
    console.print(table)
    console.print(report.summary())
    return 0 if report.failed == 0 else 1


def main() -> None:
    ap = argparse.ArgumentParser(description="Turn floorplan paths into navigation instructions")
    ap.add_argument("--floor", default="floors/sample_path.json",
                    help="JSON file with {path, rooms} or {paths, rooms}")
    ap.add_argument("--provider", default=settings.default_provider, help="gemini | template")
    ap.add_argument("--step-size", default="MEDIUM", choices=[s.value for s in StepSize])
    ap.add_argument("--out", default="runs/last_instructions.json")
    ap.add_argument("--dry-run", action="store_true", help="Only print segments, no generation")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s [wayfind] %(levelname)s %(message)s",
    )

    console = Console()
    data = _read_floor(Path(args.floor))

    try:
        if "paths" in data:
            code = _run_bulk(args, console, data)
        else:
            code = _run_single(args, console, data)
    except WayfindError as e:
        console.print(f"[red]Failed to generate instructions:[/red] {e.message}")
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
