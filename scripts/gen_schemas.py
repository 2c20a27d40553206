# scripts/gen_schemas.py
"""
Generate JSON Schemas for the alloccheck data models.

This script exports JSON Schema files for:
    - Client, Worker, Task (input records)
    - Config
    - ValidationResult (report)

Output directory: schemas/
"""

import json
from pathlib import Path

from alloccheck.schemas.models import Client, Config, Task, ValidationResult, Worker


def export_schema(model_cls, name: str, out_dir: Path) -> Path:
    """
    @brief
    Exports the JSON schema of a given Pydantic model.

    @details
    Record models are exported in serialization mode with aliases, so the
    schema describes the canonical column names (ClientID, PriorityLevel, ...).

    @returns
        Path of the written "<name>.schema.json" file.
    """
    # (1) Ensure output directory exists
    out_dir.mkdir(parents=True, exist_ok=True)

    # (2) Compute target path and generate schema data
    schema_path = (out_dir / f"{name}.schema.json").resolve()
    schema = model_cls.model_json_schema(by_alias=True, mode="serialization")

    # (3) Serialize JSON Schema to file with indentation and final newline
    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
        f.write("\n")

    try:
        rel = schema_path.relative_to(Path.cwd())
    except ValueError:
        rel = schema_path
    print(f"Generated {rel}")
    return schema_path


def main() -> None:
    out_dir = Path("schemas").resolve()
    export_schema(Client, "client", out_dir)
    export_schema(Worker, "worker", out_dir)
    export_schema(Task, "task", out_dir)
    export_schema(Config, "config", out_dir)
    export_schema(ValidationResult, "validation_result", out_dir)


if __name__ == "__main__":
    main()
