#!/usr/bin/env python3
"""Validate the records of a YAML service store against the record schema."""
import math
import sys
from pathlib import Path
from typing import Any, Dict, List

import yaml
from jsonschema import Draft7Validator

from servicelog import entry_from_dict, load_schema
from servicelog.config import DEFAULT_STORE_PATH


def validate_record(record: Any, validator: Draft7Validator) -> List[str]:
    """Validate one stored record. Returns list of errors."""
    errors = []
    for err in validator.iter_errors(record):
        message = f"Schema validation error: {err.message}"
        if err.path:
            message += f" (at {'.'.join(str(p) for p in err.path)})"
        errors.append(message)
    if errors or not isinstance(record, dict):
        return errors or ["Record is not a mapping"]

    totals = entry_from_dict(record).totals
    for field, expected in (
        ("totalSpareCost", totals.total_spare_cost),
        ("totalServiceCost", totals.total_service_cost),
        ("totalCost", totals.total_cost),
    ):
        if not math.isclose(record[field], expected, abs_tol=1e-9):
            errors.append(f"{field} is {record.get(field)}, line items add up to {expected}")
    return errors


def validate_store_file(filepath: Path) -> Dict[str, List[str]]:
    """
    Validate every record in a YAML store file.

    Returns ``{"services/VN/key": [errors]}`` for records with problems, or
    ``{str(filepath): [errors]}`` when the file itself can't be read.
    """
    validator = Draft7Validator(load_schema("record"))
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        return {str(filepath): [f"YAML parse error: {e}"]}
    except OSError as e:
        return {str(filepath): [f"Error: {e}"]}

    if not isinstance(data, dict) or not isinstance(data.get("services") or {}, dict):
        return {str(filepath): ["Expected a mapping with a 'services' key"]}

    problems = {}
    for vehicle_number, records in (data.get("services") or {}).items():
        if not isinstance(records, dict):
            problems[f"services/{vehicle_number}"] = ["Expected a mapping of records"]
            continue
        for key, record in records.items():
            errors = validate_record(record, validator)
            if isinstance(record, dict) and record.get("vehicleNumber") not in (None, vehicle_number):
                errors.append(
                    f"vehicleNumber {record.get('vehicleNumber')} stored under {vehicle_number}"
                )
            if errors:
                problems[f"services/{vehicle_number}/{key}"] = errors
    return problems


def main(argv=None):
    """Validate the YAML store given on the command line (or the default one)."""
    argv = sys.argv[1:] if argv is None else argv
    filepath = Path(argv[0]) if argv else DEFAULT_STORE_PATH

    if not filepath.exists():
        print(f"Error: store file not found: {filepath}")
        return 1

    problems = validate_store_file(filepath)
    if not problems:
        print(f"OK: {filepath}")
        return 0

    for location, errors in problems.items():
        print(f"FAIL: {location}")
        for error in errors:
            print(f"  {error}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
