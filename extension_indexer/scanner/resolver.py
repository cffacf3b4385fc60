"""Name and path resolution for module sources."""

import ast
import builtins
from pathlib import Path
from typing import Dict, Optional, Set


def resolve_module_path(base_dir: Path, candidate: str) -> Optional[Path]:
    """
    Resolve a source directory named in the corpus manifest.

    Tries multiple resolution strategies:
    1. As an absolute path.
    2. Relative to the manifest's directory.

    Args:
        base_dir: Directory containing the manifest.
        candidate: The path string from the manifest.

    Returns:
        Resolved Path if the directory exists, None otherwise.
    """
    if not candidate:
        return None

    normalized = candidate.strip().replace("\\", "/")
    candidate_path = Path(normalized).expanduser()

    if candidate_path.is_absolute():
        try:
            resolved = candidate_path.resolve()
            if resolved.is_dir():
                return resolved
        except (OSError, ValueError):
            pass
        return None

    try:
        resolved = (base_dir / candidate_path).resolve()
        if resolved.is_dir():
            return resolved
    except (OSError, ValueError):
        pass

    return None


def resolve_relative_import(module_name: str, is_package: bool, level: int, target: Optional[str]) -> str:
    """
    Turn a relative ``from`` import into an absolute module name.

    Args:
        module_name: Dotted name of the importing module.
        is_package: Whether the importing module is a package ``__init__``.
        level: Number of leading dots.
        target: The module named after the dots, if any.

    Returns:
        The absolute dotted module name.
    """
    parts = module_name.split(".") if module_name else []
    if not is_package:
        parts = parts[:-1]
    if level > 1:
        parts = parts[: len(parts) - (level - 1)] if level - 1 <= len(parts) else []
    if target:
        parts.append(target)
    return ".".join(parts)


def build_import_table(tree: ast.Module, module_name: str, is_package: bool = False) -> Dict[str, str]:
    """
    Map every name bound by an import statement to the qualified name it stands for.

    ``import a.b`` binds ``a``; ``import a.b as c`` binds ``c`` to ``a.b``;
    ``from x import Y as Z`` binds ``Z`` to ``x.Y``. Star imports bind nothing.
    """
    table: Dict[str, str] = {}

    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.asname:
                    table[alias.asname] = alias.name
                else:
                    head = alias.name.split(".")[0]
                    table[head] = head
        elif isinstance(node, ast.ImportFrom):
            if node.level:
                source = resolve_relative_import(module_name, is_package, node.level, node.module)
            else:
                source = node.module or ""
            for alias in node.names:
                if alias.name == "*":
                    continue
                bound = alias.asname or alias.name
                table[bound] = f"{source}.{alias.name}" if source else alias.name

    return table


def resolve_name(
    expr: ast.expr,
    imports: Dict[str, str],
    module_name: str,
    local_names: Set[str],
) -> Optional[str]:
    """
    Resolve a base-class or decorator expression to a qualified name.

    Args:
        expr: The expression as written in the class statement.
        imports: Import table of the file.
        module_name: Dotted name of the module the expression appears in.
        local_names: Qualified names of classes defined in the module.

    Returns:
        The qualified name, or None for builtins and expressions that are
        not plain (dotted) names.
    """
    if isinstance(expr, ast.Call):
        return resolve_name(expr.func, imports, module_name, local_names)

    if isinstance(expr, ast.Subscript):
        # Generic[T], Base[int] and the like
        return resolve_name(expr.value, imports, module_name, local_names)

    if isinstance(expr, ast.Name):
        if expr.id in imports:
            return imports[expr.id]
        local = _qualify(module_name, expr.id)
        if local in local_names:
            return local
        if hasattr(builtins, expr.id):
            return None
        return local

    if isinstance(expr, ast.Attribute):
        head = resolve_name(expr.value, imports, module_name, local_names)
        if head is None:
            return None
        return f"{head}.{expr.attr}"

    return None


def _qualify(module_name: str, name: str) -> str:
    return f"{module_name}.{name}" if module_name else name
