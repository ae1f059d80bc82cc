import os
import sys
from pathlib import Path


# Ensure `backend/` is on sys.path so tests can import local modules
# like `fetch.*`, `clusters.*`, and `main`.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT))

# Importing `main` builds the default app; keep it from opening a DuckDB file under data/.
os.environ.setdefault("ECOMAP_TELEMETRY", "0")


import pytest  # noqa: E402

from resources.seed import Dataset, dataset_from_dict  # noqa: E402


def _feature(lon, lat, way=None, municipality=None):
    props = {}
    if way:
        props["wayName"] = way
    if municipality:
        props["municipalityName"] = municipality
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
        "properties": props,
    }


def sample_dataset() -> Dataset:
    """
    Two containers sharing a Lisbon street corner, one in Porto, and two trucks.
    """
    return dataset_from_dict(
        {
            "containers": [
                {
                    "id": "c1",
                    "category": "glass",
                    "geoJson": _feature(-9.14, 38.71, "Rua Augusta", "Lisboa"),
                    "createdAt": "2024-01-01T00:00:00Z",
                },
                {
                    "id": "c2",
                    "category": "paper",
                    "geoJson": _feature(-9.14, 38.71, "Rua Augusta", "Lisboa"),
                    "createdAt": "2024-01-02T00:00:00Z",
                },
                {
                    "id": "c3",
                    "category": "glass",
                    "geoJson": _feature(-8.61, 41.15, "Rua de Santa Catarina", "Porto"),
                    "createdAt": "2024-01-03T00:00:00Z",
                },
            ],
            "trucks": [
                {
                    "id": "t1",
                    "licensePlate": "AA-00-01",
                    "geoJson": _feature(-9.15, 38.72),
                    "createdAt": "2024-02-01T00:00:00Z",
                },
                {
                    "id": 7,
                    "licensePlate": "BB-00-02",
                    "geoJson": _feature(-9.16, 38.73),
                    "createdAt": "2024-02-02T00:00:00Z",
                },
            ],
        }
    )


@pytest.fixture()
def dataset() -> Dataset:
    return sample_dataset()
