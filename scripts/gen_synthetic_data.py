# scripts/gen_synthetic_data.py
from __future__ import annotations

import csv
import json
import random
import sys
from collections.abc import Iterable
from pathlib import Path

"""
Synthetic dataset generator (single run → clients.csv, workers.csv, tasks.csv).

Design:
- Parameters are hard-coded as constants below (no CLI args).
- Cells are written in the loose spreadsheet encodings the normalizer accepts:
  comma-separated lists, bracketed slot lists, "start-end" phase ranges and
  embedded JSON.
- A small share of rows is deliberately damaged (unknown task references,
  out-of-range priorities, broken JSON) so the validation report has content.

Edit the constants in the "CONFIG" section to produce different datasets.
"""

# =========================
# CONFIG: EDIT THESE
# =========================
CLIENTS: int = 12
WORKERS: int = 10
TASKS: int = 15
PHASES: int = 6
OUTPUT_DIR: str = "data/input"

SKILLS: tuple[str, ...] = ("python", "react", "design", "marketing", "qa", "devops", "writing")
CATEGORIES: tuple[str, ...] = ("Development", "Design", "Marketing", "Operations")
DAMAGE_RATE: float = 0.1  # share of rows with an injected defect

# Deterministic generation
RANDOM_SEED: int = 42
# =========================


def _write_csv(path: Path, header: Iterable[str], rows: Iterable[Iterable[object]]) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(list(header))
        for row in rows:
            writer.writerow(list(row))
            count += 1
    return count


def _task_rows(rng: random.Random) -> list[list[object]]:
    rows = []
    for i in range(1, TASKS + 1):
        start = rng.randint(1, PHASES)
        end = rng.randint(start, PHASES)
        phases = f"{start}-{end}" if rng.random() < 0.5 else f"[{start},{end}]"
        skills = rng.sample(SKILLS, k=rng.randint(1, 2))
        rows.append(
            [
                f"T{i}",
                f"Task {i}",
                rng.choice(CATEGORIES),
                rng.randint(1, 4),
                ",".join(skills),
                phases,
                rng.randint(1, 3),
            ]
        )
    return rows


def _worker_rows(rng: random.Random) -> list[list[object]]:
    rows = []
    for i in range(1, WORKERS + 1):
        slots = sorted(rng.sample(range(1, PHASES + 1), k=rng.randint(1, PHASES)))
        rows.append(
            [
                f"W{i}",
                f"Worker {i}",
                ",".join(rng.sample(SKILLS, k=rng.randint(1, 3))),
                "[" + ",".join(str(s) for s in slots) + "]",
                rng.randint(1, 3),
                f"Group{rng.randint(1, 3)}",
                rng.choice(("Junior", "Mid", "Senior", "Lead")),
            ]
        )
    return rows


def _client_rows(rng: random.Random) -> list[list[object]]:
    rows = []
    for i in range(1, CLIENTS + 1):
        requested = [f"T{rng.randint(1, TASKS)}" for _ in range(rng.randint(1, 3))]
        priority: object = rng.randint(1, 5)
        attributes = json.dumps({"location": rng.choice(("NY", "SF", "LDN")), "budget": 1000 * i})

        if rng.random() < DAMAGE_RATE:
            requested.append(f"T{TASKS + 50 + i}")
        if rng.random() < DAMAGE_RATE:
            priority = rng.choice((0, 6, 7))
        if rng.random() < DAMAGE_RATE:
            attributes = attributes[:-1]

        rows.append(
            [
                f"C{i}",
                f"Client {i}",
                priority,
                ",".join(dict.fromkeys(requested)),
                f"Group{rng.choice('AB')}",
                attributes,
            ]
        )
    return rows


def main() -> int:
    rng = random.Random(RANDOM_SEED)
    out = Path(OUTPUT_DIR)

    n_tasks = _write_csv(
        out / "tasks.csv",
        (
            "TaskID",
            "TaskName",
            "Category",
            "Duration",
            "RequiredSkills",
            "PreferredPhases",
            "MaxConcurrent",
        ),
        _task_rows(rng),
    )
    n_workers = _write_csv(
        out / "workers.csv",
        (
            "WorkerID",
            "WorkerName",
            "Skills",
            "AvailableSlots",
            "MaxLoadPerPhase",
            "WorkerGroup",
            "QualificationLevel",
        ),
        _worker_rows(rng),
    )
    n_clients = _write_csv(
        out / "clients.csv",
        ("ClientID", "ClientName", "PriorityLevel", "RequestedTaskIDs", "GroupTag", "AttributesJSON"),
        _client_rows(rng),
    )

    print(f"Generated {n_clients} clients, {n_workers} workers, {n_tasks} tasks in {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
