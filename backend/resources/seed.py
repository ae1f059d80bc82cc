from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from resources.decode import ApiResource, resource_from_api
from resources.types import RESOURCE_KINDS, Resource, ResourceKind


Dataset = dict[ResourceKind, list[Resource]]


def empty_dataset() -> Dataset:
    return {kind: [] for kind in RESOURCE_KINDS}


def load_dataset(path: Path) -> Dataset:
    """
    Load a seed dataset for the provider service.

    Input: JSON or YAML with one list per kind, each item in the API wire shape:
    {"containers": [{"id": ..., "category": ..., "geoJson": {...}}], "trucks": [...]}
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(raw) or {}
    else:
        data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid dataset root: {path}")
    return dataset_from_dict(data)


def dataset_from_dict(data: dict[str, Any]) -> Dataset:
    out = empty_dataset()
    for kind in RESOURCE_KINDS:
        items = data.get(kind) or []
        if not isinstance(items, list):
            raise ValueError(f"Dataset entry `{kind}` must be a list")
        out[kind] = [
            resource_from_api(kind, ApiResource.model_validate(item)) for item in items
        ]
    return out
