"""Reading and rewriting ``package.json``."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from npub.platform.files import write_json

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str

__all__ = ["MANIFEST_NAME", "Manifest", "ManifestError", "load_manifest", "save_manifest_version"]

MANIFEST_NAME = "package.json"


@dataclass(frozen=True, slots=True)
class ManifestError:
    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Manifest:
    """Package identity plus the full parsed document.

    ``data`` is kept so a rewrite only touches ``version``.
    """

    name: str
    version: str
    path: Path
    data: StrDict = field(compare=False, repr=False)

    def with_version(self, version: str) -> Manifest:
        data = dict(self.data)
        data["version"] = version
        return Manifest(name=self.name, version=version, path=self.path, data=data)


def load_manifest(path: Path) -> Result[Manifest, ManifestError]:
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ManifestError(f"manifest not found: {path}", path=path))
    except PermissionError:
        return Err(ManifestError(f"permission denied reading: {path}", path=path))
    except json.JSONDecodeError as e:
        return Err(ManifestError(f"invalid JSON in {path}: {e}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ManifestError(f"error reading manifest: {e}", path=path))

    data = as_str_dict(obj)
    if data is None:
        return Err(ManifestError("manifest root must be a JSON object", path=path))

    name = get_str(data, "name")
    version = get_str(data, "version")
    if name is None or version is None:
        return Err(ManifestError(f"manifest needs string 'name' and 'version': {path}", path=path))

    return Ok(Manifest(name=name, version=version, path=path, data=data))


def save_manifest_version(manifest: Manifest, version: str) -> Result[Manifest, ManifestError]:
    """Rewrite the manifest in place with a new version."""
    updated = manifest.with_version(version)
    try:
        write_json(manifest.path, updated.data)
    except OSError as e:
        return Err(ManifestError(f"error writing manifest: {e}", path=manifest.path))
    return Ok(updated)
