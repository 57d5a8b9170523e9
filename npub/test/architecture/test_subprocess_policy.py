from __future__ import annotations

import ast

from ._gate import require_arch_checks_enabled
from ._utils import iter_source_files, package_root, read_tree


def _subprocess_calls(tree: ast.AST) -> list[int]:
    lines: list[int] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
            continue
        func = node.func
        if func.attr not in {"run", "check_output", "Popen", "call", "check_call"}:
            continue
        if isinstance(func.value, ast.Name) and func.value.id == "subprocess":
            lines.append(node.lineno)
    return lines


def test_only_the_process_adapter_spawns_commands() -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders = [
        f"{path.relative_to(root)}:{line}: direct subprocess call"
        for path in iter_source_files()
        if str(path.relative_to(root)) != "platform/process.py"
        for line in _subprocess_calls(read_tree(path))
    ]

    assert not offenders, "Subprocess policy violations:\n" + "\n".join(offenders)
