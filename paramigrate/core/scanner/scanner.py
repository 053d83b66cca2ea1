"""Filesystem scanner -- builds a ProjectState from a JS/TS project root.

Line-level regex detection only:

* ``package.json`` ``dependencies`` + ``devDependencies``
* ES module imports (single- and multi-line named imports)
* side-effect stylesheet imports
* provider JSX tags (``<PrivyProvider ...>``) and factory calls
  (``createAppKit({...})``) with their literal props
* hook calls whose name was imported in the same file
* entry points by file name

Files that cannot be read are skipped with a warning; only a missing root
or an unusable ``package.json`` aborts the scan.
"""

import json
import logging
import os
import re
from typing import Dict, List, Optional, Tuple

from ..config import TargetSettings
from ..errors import ScanError
from ..migration.models import (
    FileImport,
    HookUsage,
    ProjectState,
    ProviderUsage,
    StyleImport,
    is_target_module,
)
from .utils import (
    classify_module,
    is_entry_point,
    is_supported_file,
    parse_object_literal,
    parse_value,
    read_balanced,
    should_skip_directory,
)

logger = logging.getLogger(__name__)

# Components rendered as ``<Name ...>``
PROVIDER_COMPONENTS = (
    "PrivyProvider",
    "AppKit",
    "AppKitProvider",
    "Web3Modal",
    "Web3ModalProvider",
    "ParaProvider",
)

# Factories called as ``name({...})``
PROVIDER_FACTORIES = ("createAppKit", "createWeb3Modal")

_IMPORT_START_RE = re.compile(r"^\s*import(?=[\s{*])")
_FROM_CLAUSE_RE = re.compile(r"""\bfrom\s*['"]""")
_IMPORT_RE = re.compile(
    r"""^\s*import\s+(?:type\s+)?(?P<clause>.+?)\s+from\s+['"](?P<module>[^'"]+)['"]""",
    re.DOTALL,
)
_SIDE_EFFECT_IMPORT_RE = re.compile(r"""^\s*import\s+['"](?P<path>[^'"]+)['"]""")
_PROVIDER_TAG_RE = re.compile(rf"<({'|'.join(PROVIDER_COMPONENTS)})\b")
_FACTORY_RE = re.compile(rf"\b({'|'.join(PROVIDER_FACTORIES)})\s*\(")
_HOOK_CALL_RE = re.compile(r"\b(use[A-Z]\w*)\s*\(")
_JSX_ATTR_RE = re.compile(r"([A-Za-z_][\w-]*)\s*=\s*")
_STYLE_EXTENSIONS = (".css", ".scss", ".sass", ".less")

# Lines scanned past a provider tag looking for the end of its opening tag
_MAX_BLOCK_LINES = 60


class FileSystemScanner:
    """Default :class:`ProjectScanner` backed by the local filesystem."""

    def __init__(self, target: Optional[TargetSettings] = None):
        self.target = target or TargetSettings()

    def scan(self, root: str) -> ProjectState:
        if not os.path.isdir(root):
            raise ScanError(root, "project root does not exist")

        dependencies = self.read_dependencies(root)
        imports: List[FileImport] = []
        providers: List[ProviderUsage] = []
        hooks: List[HookUsage] = []
        styles: List[StyleImport] = []
        entry_points: List[str] = []

        for rel_path in self.iter_source_files(root):
            try:
                with open(os.path.join(root, rel_path), encoding="utf-8") as f:
                    source = f.read()
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable file {rel_path}: {e}")
                continue

            file_imports, file_styles = self.scan_imports(rel_path, source)
            imports.extend(file_imports)
            styles.extend(file_styles)
            providers.extend(self.scan_providers(rel_path, source))
            hooks.extend(self.scan_hooks(rel_path, source, file_imports))
            if is_entry_point(rel_path):
                entry_points.append(rel_path)

        logger.debug(
            "Scanned %s: %d imports, %d providers, %d hooks, %d styles",
            root, len(imports), len(providers), len(hooks), len(styles),
        )
        return ProjectState(
            dependencies=dependencies,
            imports=imports,
            providers=providers,
            hooks=hooks,
            styles=styles,
            entry_points=entry_points,
        )

    # ── package.json ─────────────────────────────────────────────

    @staticmethod
    def read_dependencies(root: str) -> Dict[str, str]:
        """Merge ``dependencies`` and ``devDependencies`` from package.json."""
        manifest = os.path.join(root, "package.json")
        try:
            with open(manifest, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ScanError(root, "package.json not found") from None
        except (OSError, ValueError) as e:
            raise ScanError(root, f"invalid package.json: {e}") from e

        if not isinstance(data, dict):
            raise ScanError(root, "invalid package.json: not an object")

        dependencies: Dict[str, str] = {}
        for section in ("dependencies", "devDependencies"):
            entries = data.get(section) or {}
            if not isinstance(entries, dict):
                raise ScanError(root, f"invalid package.json: {section} is not an object")
            for name, version in entries.items():
                dependencies.setdefault(name, str(version))
        return dependencies

    # ── File walking ─────────────────────────────────────────────

    @staticmethod
    def iter_source_files(root: str) -> List[str]:
        """Relative POSIX paths of every JS/TS source file, sorted."""
        found = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not should_skip_directory(d))
            for filename in sorted(filenames):
                if is_supported_file(filename):
                    rel = os.path.relpath(os.path.join(dirpath, filename), root)
                    found.append(rel.replace(os.sep, "/"))
        return found

    # ── Imports ──────────────────────────────────────────────────

    def scan_imports(self, file: str, source: str) -> Tuple[List[FileImport], List[StyleImport]]:
        imports: List[FileImport] = []
        styles: List[StyleImport] = []
        lines = source.splitlines()
        i = 0
        while i < len(lines):
            line = lines[i]
            if not _IMPORT_START_RE.match(line):
                i += 1
                continue

            side_effect = _SIDE_EFFECT_IMPORT_RE.match(line)
            if side_effect:
                path = side_effect.group("path")
                if path.endswith(_STYLE_EXTENSIONS):
                    styles.append(StyleImport(
                        file=file,
                        line=i + 1,
                        imported_path=path,
                        is_target_style=self._is_target_style(path),
                    ))
                i += 1
                continue

            # Named imports may span several lines up to the ``from`` clause
            start = i
            statement = line
            while not _FROM_CLAUSE_RE.search(statement) and i + 1 < len(lines) and i - start < 50:
                i += 1
                statement += " " + lines[i].strip()
            i += 1

            match = _IMPORT_RE.match(statement)
            if not match:
                continue
            module = match.group("module")
            imports.append(FileImport(
                file=file,
                line=start + 1,
                imported_symbols=_imported_symbols(match.group("clause")),
                source_module=module,
                provider_tag=classify_module(module, self.target.package),
            ))
        return imports, styles

    def _is_target_style(self, path: str) -> bool:
        return path == self.target.stylesheet or is_target_module(path, self.target.package)

    # ── Providers ────────────────────────────────────────────────

    def scan_providers(self, file: str, source: str) -> List[ProviderUsage]:
        usages: List[ProviderUsage] = []
        lines = source.splitlines()
        for index, line in enumerate(lines):
            active = not _is_comment(line)

            for match in _PROVIDER_TAG_RE.finditer(line):
                block = "\n".join(lines[index:index + _MAX_BLOCK_LINES])
                offset = match.end()
                usages.append(ProviderUsage(
                    file=file,
                    line=index + 1,
                    provider_name=match.group(1),
                    props=_jsx_props(block[offset:]),
                    active=active,
                ))

            for match in _FACTORY_RE.finditer(line):
                block = "\n".join(lines[index:index + _MAX_BLOCK_LINES])
                usages.append(ProviderUsage(
                    file=file,
                    line=index + 1,
                    provider_name=match.group(1),
                    props=_factory_props(block, match.end() - 1),
                    active=active,
                ))
        return usages

    # ── Hooks ────────────────────────────────────────────────────

    @staticmethod
    def scan_hooks(file: str, source: str, file_imports: List[FileImport]) -> List[HookUsage]:
        """Hook calls whose name this file imports; the import gives the source module."""
        origins: Dict[str, str] = {}
        for imp in file_imports:
            for symbol in imp.imported_symbols:
                origins.setdefault(symbol, imp.source_module)

        hooks: List[HookUsage] = []
        for index, line in enumerate(source.splitlines()):
            if _IMPORT_START_RE.match(line) or _is_comment(line):
                continue
            for match in _HOOK_CALL_RE.finditer(line):
                name = match.group(1)
                module = origins.get(name)
                if module is None:
                    continue
                hooks.append(HookUsage(
                    file=file,
                    line=index + 1,
                    hook_name=name,
                    source_module=module,
                    raw_usage_text=line.strip(),
                ))
        return hooks


def _is_comment(line: str) -> bool:
    stripped = line.lstrip()
    return stripped.startswith(("//", "/*", "*", "{/*"))


def _imported_symbols(clause: str) -> Tuple[str, ...]:
    """Local names bound by an import clause: default, named and namespace."""
    symbols: List[str] = []
    clause = clause.strip()
    named = ""
    if "{" in clause:
        head, _, rest = clause.partition("{")
        named, _, _ = rest.partition("}")
        clause = head
    for part in clause.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("*"):
            part = part.split()[-1]
        symbols.append(part)
    for part in named.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("type "):
            part = part[5:].strip()
        # ``a as b`` keeps the exported name; strategies map exported names
        symbols.append(part.split(" as ")[0].strip())
    return tuple(symbols)


def _jsx_props(text: str) -> Dict[str, object]:
    """Attributes of a JSX opening tag, read from just after the tag name."""
    props: Dict[str, object] = {}
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == ">" or text.startswith("/>", i):
            break
        if ch.isspace():
            i += 1
            continue
        match = _JSX_ATTR_RE.match(text, i)
        if not match:
            # Boolean attribute or spread; skip one token
            if ch == "{":
                end = read_balanced(text, i)
                if end is None:
                    break
                i = end
                continue
            while i < len(text) and not text[i].isspace() and text[i] not in ">/":
                i += 1
            if i < len(text) and text[i] == "/" and not text.startswith("/>", i):
                i += 1
            continue

        name = match.group(1)
        i = match.end()
        if i >= len(text):
            break
        if text[i] in "'\"":
            close = text.find(text[i], i + 1)
            if close == -1:
                break
            props[name] = text[i + 1:close]
            i = close + 1
        elif text[i] == "{":
            end = read_balanced(text, i)
            if end is None:
                break
            props[name] = parse_value(text[i + 1:end - 1])
            i = end
        else:
            break
    return props


def _factory_props(text: str, paren: int) -> Dict[str, object]:
    """Object-literal first argument of ``factory({...})``, or nothing."""
    end = read_balanced(text, paren)
    if end is None:
        return {}
    argument = text[paren + 1:end - 1].strip()
    if not argument.startswith("{"):
        return {}
    close = read_balanced(argument, 0)
    if close is None:
        return {}
    return parse_object_literal(argument[:close])
