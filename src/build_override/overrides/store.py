"""Namespaced XML store for MSBuild per-user project files."""

from __future__ import annotations

import codecs
import contextlib
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from lxml import etree

from ..errors import NotFoundError, ParseError, SchemaError, StoreIOError

MSBUILD_NAMESPACE = "http://schemas.microsoft.com/developer/msbuild/2003"
ROOT_TAG = "Project"
GROUP_TAG = "PropertyGroup"

_PROLOGUE_RE = re.compile(r"^(?:<\?xml[^>]*\?>\s*)?")

# UTF-32 is not listed: its little-endian BOM starts with the UTF-16 one.
_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)

_NAME_RE = re.compile(r"^[A-Za-z_][\w.\-]*$")
_ILLEGAL_XML_CHARS_RE = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

logger = logging.getLogger(__name__)


def check_setting(name: str, value: str) -> None:
    """Raise ValueError unless ``name`` is an element name and ``value`` is XML text."""
    if not _NAME_RE.match(name):
        raise ValueError(f"{name!r} is not a valid setting name")
    if _ILLEGAL_XML_CHARS_RE.search(value):
        raise ValueError(f"Value for {name} contains characters not allowed in XML")


@dataclass
class ConfigDocument:
    path: Path
    tree: etree._ElementTree
    prologue: str = ""
    epilogue: str = ""
    encoding: str = "utf-8"
    bom: bytes = b""
    crlf: bool = False

    @property
    def root(self) -> etree._Element:
        return self.tree.getroot()


def _qualify(namespace: str, tag: str) -> str:
    return f"{{{namespace}}}{tag}"


def _first_child(parent: etree._Element, tag: str) -> etree._Element | None:
    for child in parent:
        if child.tag == tag:
            return child
    return None


class StructuredDocumentStore:
    """Load, address and save the ``Project/PropertyGroup/<Setting>`` leaf.

    Only elements in ``namespace`` are ever looked at; everything else in the
    document is carried through untouched.
    """

    def __init__(self, namespace: str = MSBUILD_NAMESPACE):
        self.namespace = namespace

    def load(self, path: Path | str) -> ConfigDocument:
        path = Path(path)
        if not path.exists():
            raise NotFoundError(f"{path} not found", path)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise StoreIOError(f"Cannot read {path}: {exc}", path) from exc
        parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)
        try:
            root = etree.fromstring(raw, parser=parser)
        except (etree.XMLSyntaxError, ValueError) as exc:
            raise ParseError(f"{path.name} is not well-formed XML: {exc}", path) from exc
        tree = root.getroottree()
        bom, encoding = _detect_encoding(raw, tree.docinfo.encoding)
        try:
            text = raw[len(bom):].decode(encoding)
        except (LookupError, UnicodeDecodeError) as exc:
            raise ParseError(f"{path.name} cannot be decoded as {encoding}: {exc}", path) from exc
        document = ConfigDocument(
            path=path,
            tree=tree,
            prologue=_PROLOGUE_RE.match(text).group(0),
            epilogue=text[len(text.rstrip()):],
            encoding=encoding,
            bom=bom,
            crlf="\r\n" in text,
        )
        logger.debug("Loaded %s (encoding=%s, crlf=%s)", path, document.encoding, document.crlf)
        return document

    def project_root(self, doc: ConfigDocument) -> etree._Element:
        root = doc.root
        if root.tag != _qualify(self.namespace, ROOT_TAG):
            raise SchemaError(f"Project node not found in {doc.path.name}", doc.path)
        return root

    def get_or_create_property_group(self, doc: ConfigDocument) -> tuple[etree._Element, bool]:
        """Return the first PropertyGroup and whether it had to be created."""
        root = self.project_root(doc)
        tag = _qualify(self.namespace, GROUP_TAG)
        group = _first_child(root, tag)
        if group is not None:
            return group, False
        return _append(root, tag), True

    def get_or_create_setting(self, group: etree._Element, name: str) -> tuple[etree._Element, bool]:
        """Return the first ``name`` child of ``group`` and whether it existed."""
        tag = _qualify(self.namespace, name)
        setting = _first_child(group, tag)
        if setting is not None:
            return setting, True
        return _append(group, tag), False

    def find_setting(self, doc: ConfigDocument, name: str) -> etree._Element | None:
        root = self.project_root(doc)
        group = _first_child(root, _qualify(self.namespace, GROUP_TAG))
        if group is None:
            return None
        return _first_child(group, _qualify(self.namespace, name))

    def read_text(self, setting: etree._Element) -> str:
        return setting.text or ""

    def write_text(self, setting: etree._Element, value: str) -> None:
        setting.text = value

    def remove(self, element: etree._Element) -> None:
        parent = element.getparent()
        if parent is None:
            raise ValueError("Cannot remove the document root")
        previous = element.getprevious()
        if previous is not None:
            previous.tail = element.tail
        elif element.tail is not None and not element.tail.strip():
            parent.text = element.tail
        # lxml drops the tail with the element, so it was moved above.
        parent.remove(element)

    def save(self, doc: ConfigDocument, path: Path | str | None = None) -> None:
        target = Path(path) if path is not None else doc.path
        body = etree.tostring(doc.tree, encoding="unicode").rstrip()
        if doc.crlf:
            body = body.replace("\r\n", "\n").replace("\n", "\r\n")
        text = doc.prologue + body + doc.epilogue
        content = doc.bom + text.encode(doc.encoding, errors="xmlcharrefreplace")
        try:
            _atomic_write(target, content)
        except OSError as exc:
            raise StoreIOError(f"Cannot write {target}: {exc}", target) from exc
        logger.debug("Saved %s", target)


def _detect_encoding(raw: bytes, declared: str | None) -> tuple[bytes, str]:
    for bom, encoding in _BOMS:
        if raw.startswith(bom):
            return bom, encoding
    return b"", declared or "utf-8"


def _atomic_write(target: Path, content: bytes) -> None:
    """Replace ``target`` with ``content`` so a failed write leaves it untouched."""
    if target.exists() and not os.access(target, os.W_OK):
        raise PermissionError(f"{target} is read-only")
    handle = tempfile.NamedTemporaryFile(
        dir=target.parent, prefix=f".{target.name}.", suffix=".tmp", delete=False
    )
    temp_path = Path(handle.name)
    try:
        with handle:
            handle.write(content)
        if target.exists():
            os.chmod(temp_path, target.stat().st_mode & 0o7777)
        os.replace(temp_path, target)
    except OSError:
        with contextlib.suppress(OSError):
            temp_path.unlink()
        raise


def _append(parent: etree._Element, tag: str) -> etree._Element:
    """Append a new ``tag`` element using the indentation already among its siblings."""
    siblings = list(parent)
    child = etree.SubElement(parent, tag)
    if siblings:
        last = siblings[-1]
        child.tail = last.tail
        last.tail = siblings[-2].tail if len(siblings) > 1 else parent.text
    return child


__all__ = [
    "ConfigDocument",
    "StructuredDocumentStore",
    "MSBUILD_NAMESPACE",
    "check_setting",
]
