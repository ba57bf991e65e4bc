"""Export JSON schemas for the Itinerary document and ExpenseSummary."""

import json
from pathlib import Path

from voyage.models import ExpenseSummary, Itinerary


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    # Stored document, with the aliases used on the wire
    itinerary_schema = Itinerary.model_json_schema(by_alias=True)
    itinerary_path = schemas_dir / "Itinerary.schema.json"
    with open(itinerary_path, "w", encoding="utf-8") as f:
        json.dump(itinerary_schema, f, indent=2, ensure_ascii=False)
    print(f"Exported Itinerary schema to {itinerary_path}")

    expenses_schema = ExpenseSummary.model_json_schema()
    expenses_path = schemas_dir / "ExpenseSummary.schema.json"
    with open(expenses_path, "w", encoding="utf-8") as f:
        json.dump(expenses_schema, f, indent=2, ensure_ascii=False)
    print(f"Exported ExpenseSummary schema to {expenses_path}")


if __name__ == "__main__":
    main()
