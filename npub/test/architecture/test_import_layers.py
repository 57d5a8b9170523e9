from __future__ import annotations

import pytest

from ._gate import require_arch_checks_enabled
from ._utils import iter_python_files, matches_prefix, package_root, parse_imports


@pytest.mark.parametrize(
    ("layer", "forbidden"),
    [
        ("services", ("npub.cli",)),
        ("core", ("npub.cli", "npub.services", "npub.output")),
        ("platform", ("npub.cli", "npub.services", "npub.output")),
        ("output", ("npub.cli", "npub.services")),
    ],
)
def test_lower_layers_do_not_import_upper_ones(layer: str, forbidden: tuple[str, ...]) -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders: list[str] = []
    for path in iter_python_files(root / layer):
        for item in parse_imports(path):
            if any(matches_prefix(item.module, prefix) for prefix in forbidden):
                rel = path.relative_to(root)
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, f"{layer} layering violations:\n" + "\n".join(offenders)


def test_typer_stays_in_the_cli() -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders = [
        f"{path.relative_to(root)}:{item.line}"
        for layer in ("core", "platform", "output", "services")
        for path in iter_python_files(root / layer)
        for item in parse_imports(path)
        if matches_prefix(item.module, "typer")
    ]

    assert not offenders, "typer imported outside npub.cli:\n" + "\n".join(offenders)
