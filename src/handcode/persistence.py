"""Gesture library persistence.

Directory layout (one sub-directory per class)::

    <root>/
        OpenPalm/
            meta.json          {"id": "1", "name": "OpenPalm", "count": 2, ...}
            samples.md5        "<md5>  data/sample-1-ab12cd34.json" per line
            data/
                sample-1-ab12cd34.json   {"features": [...], "sampleHash": "..."}

Loading is lenient: unreadable meta or sample files are skipped with a
warning so one bad file does not take the whole library down.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from handcode.features import compute_gesture_code, compute_sample_hash
from handcode.types import GestureClass, GestureLibrary, Sample

logger = logging.getLogger(__name__)

META_FILE = "meta.json"
DATA_DIR = "data"
MANIFEST_FILE = "samples.md5"
FORMAT_VERSION = 1


def load_library(root: Union[str, Path]) -> GestureLibrary:
    """Load every class directory under ``root``.

    Args:
        root: Library root directory.

    Returns:
        GestureLibrary with one class per sub-directory. Directory order is
        sorted so codebooks are reproducible.

    Raises:
        FileNotFoundError: If ``root`` is not a directory.
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Gesture library directory not found: {root}")

    library = GestureLibrary()
    for class_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        library.add_class(load_class(class_dir))

    logger.info(
        "Loaded gesture library %s: %d classes, %d samples",
        root, len(library), library.sample_count,
    )
    return library


def load_class(class_dir: Union[str, Path]) -> GestureClass:
    """Load one class directory (meta.json + data/*.json)."""
    class_dir = Path(class_dir)
    class_id = ""
    name = class_dir.name

    meta = _read_json(class_dir / META_FILE)
    if isinstance(meta, dict):
        class_id = str(meta.get("id") if meta.get("id") is not None else "")
        name = str(meta.get("name") if meta.get("name") is not None else class_dir.name)

    gesture_class = GestureClass(id=class_id, name=name, code=compute_gesture_code(class_id, name))

    data_dir = class_dir / DATA_DIR
    if data_dir.is_dir():
        for path in sorted(data_dir.iterdir()):
            if not path.is_file() or path.suffix.lower() != ".json":
                continue
            sample = _read_sample(path, gesture_class)
            if sample is not None:
                gesture_class.add_sample(sample)

    return gesture_class


def save_class(root: Union[str, Path], gesture_class: GestureClass) -> Path:
    """Write a class to ``<root>/<name>/`` with an integrity manifest.

    The directory ends up holding exactly the class's current samples:
    files with the same names are overwritten and other ``data/*.json``
    files are removed.

    Returns:
        The class directory.
    """
    class_dir = Path(root) / gesture_class.name
    data_dir = class_dir / DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)

    manifest: List[str] = []
    written = set()
    for i, sample in enumerate(gesture_class.samples, start=1):
        sample_hash = sample.sample_hash or compute_sample_hash(sample.features)
        file_name = f"sample-{i}-{sample_hash[:8]}.json"
        text = json.dumps(
            {
                "id": gesture_class.id,
                "name": gesture_class.name,
                "sampleHash": sample_hash,
                "features": [float(v) for v in sample.features],
            },
            indent=2,
        )
        (data_dir / file_name).write_bytes(text.encode("utf-8"))
        manifest.append(f"{_md5_text(text)}  {DATA_DIR}/{file_name}")
        written.add(file_name)

    # Samples from a previous save that are no longer in the class.
    for path in data_dir.glob("*.json"):
        if path.name not in written:
            logger.debug("Removing stale sample %s", path)
            path.unlink()

    meta = {
        "id": gesture_class.id,
        "name": gesture_class.name,
        "code": gesture_class.code,
        "count": len(gesture_class.samples),
        "version": FORMAT_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    (class_dir / META_FILE).write_text(json.dumps(meta, indent=2), encoding="utf-8")
    (class_dir / MANIFEST_FILE).write_text("\n".join(manifest) + "\n", encoding="utf-8")
    return class_dir


def save_library(root: Union[str, Path], library: GestureLibrary) -> Path:
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)
    for gesture_class in library:
        save_class(root, gesture_class)
    return root


def verify_class(class_dir: Union[str, Path]) -> List[str]:
    """Check a class directory against its ``samples.md5`` manifest.

    Returns:
        Relative paths that are missing or whose checksum differs. Empty
        when everything matches or no manifest exists.
    """
    class_dir = Path(class_dir)
    manifest = class_dir / MANIFEST_FILE
    if not manifest.is_file():
        return []

    mismatched: List[str] = []
    for line in manifest.read_text(encoding="utf-8").splitlines():
        parts = line.strip().split(None, 1)
        if len(parts) != 2:
            continue
        expected, rel_path = parts
        target = class_dir / rel_path
        if not target.is_file() or _md5_bytes(target.read_bytes()) != expected:
            mismatched.append(rel_path)
    return mismatched


def _read_json(path: Path) -> Optional[object]:
    if not path.is_file():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Skipping unreadable %s: %s", path, e)
        return None


def _read_sample(path: Path, gesture_class: GestureClass) -> Optional[Sample]:
    obj = _read_json(path)
    if not isinstance(obj, dict):
        return None

    raw = obj.get("features")
    if not isinstance(raw, list) or not raw:
        logger.warning("Skipping %s: no feature list", path)
        return None
    try:
        features = np.asarray(raw, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError):
        logger.warning("Skipping %s: non-numeric features", path)
        return None

    return Sample(
        class_id=gesture_class.id,
        class_name=gesture_class.name,
        class_code=gesture_class.code,
        features=features,
        sample_hash=str(obj.get("sampleHash") or ""),
        source_path=f"{DATA_DIR}/{path.name}",
    )


def _md5_text(text: str) -> str:
    return _md5_bytes(text.encode("utf-8"))


def _md5_bytes(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


__all__ = [
    "load_library",
    "load_class",
    "save_class",
    "save_library",
    "verify_class",
]
