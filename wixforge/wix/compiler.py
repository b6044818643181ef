"""Compile a :class:`FileManifest` into a WiX source document.

The generated document holds two ``<Fragment>`` elements per directory:

* a ``<DirectoryRef>`` declaring the directory's immediate child
  directories and one ``<Component>``/``<File>`` pair per file, and
* a ``<ComponentGroup>`` referencing every component at or below that
  directory.

Each fragment stands on its own, so an outer ``.wxs`` only has to reference
the root directory id and the root component group.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path, PurePath, PurePosixPath

from wixforge.files.manifest import FileManifest
from wixforge.wix.ids import (
    component_group_id,
    component_guid,
    component_id,
    directory_id,
    file_id,
    validate_identifier,
)
from wixforge.wix.models import (
    WIX_NAMESPACE,
    ChildDirectory,
    ComponentEntry,
    DirectoryFragment,
)

logger = logging.getLogger(__name__)


def _is_under(path: PurePosixPath, base: PurePosixPath) -> bool:
    return path.parts[: len(base.parts)] == base.parts


def _child_directories(
    directory: PurePosixPath | None,
    all_directories: list[PurePosixPath],
    id_prefix: str,
) -> tuple[ChildDirectory, ...]:
    children: list[ChildDirectory] = []
    for d in all_directories:
        if directory is None:
            # Children of the root are directories without a parent segment.
            if len(d.parts) != 1:
                continue
        elif d == directory or not _is_under(d, directory):
            continue
        elif len(d.parts) != len(directory.parts) + 1:
            continue
        children.append(ChildDirectory(id=directory_id(id_prefix, d), name=d.name))
    return tuple(children)


def plan_fragments(
    manifest: FileManifest,
    install_prefix: str | PurePath,
    root_directory_id: str,
    id_prefix: str,
) -> list[DirectoryFragment]:
    """Compute the fragment for every directory in *manifest*.

    ``install_prefix`` is where the files are found at compile time (the
    ``Source`` attribute); ``root_directory_id`` is the ``DirectoryRef`` id
    used for the install root and is expected to be defined by another
    ``.wxs`` file.
    """
    validate_identifier(root_directory_id)
    validate_identifier(id_prefix)
    install_prefix = PurePath(install_prefix)

    by_directory = manifest.entries_by_directory()
    directories = [d for d in by_directory if d is not None]
    all_paths = [p for p, _ in manifest.entries()]

    fragments: list[DirectoryFragment] = []
    for directory, files in by_directory.items():
        if directory is None:
            ref_id = root_directory_id
            group_id = component_group_id(id_prefix, root_directory_id)
            members = all_paths
        else:
            ref_id = directory_id(id_prefix, directory)
            group_id = component_group_id(id_prefix, directory)
            members = [p for p in all_paths if _is_under(p, directory)]

        components: list[ComponentEntry] = []
        for filename in files:
            rel = PurePosixPath(filename) if directory is None else directory / filename
            components.append(
                ComponentEntry(
                    path=rel,
                    id=component_id(id_prefix, rel),
                    guid=component_guid(id_prefix, rel),
                    file_id=file_id(id_prefix, filename),
                    source=str(install_prefix.joinpath(*rel.parts)),
                )
            )

        fragments.append(
            DirectoryFragment(
                directory=directory,
                ref_id=ref_id,
                children=_child_directories(directory, directories, id_prefix),
                components=tuple(components),
                group_id=group_id,
                group_members=tuple(component_id(id_prefix, p) for p in members),
            )
        )

    logger.debug(
        "planned %d directory fragments for %d files", len(fragments), len(all_paths)
    )
    return fragments


def fragments_to_element(fragments: list[DirectoryFragment]) -> ET.Element:
    root = ET.Element("Wix", {"xmlns": WIX_NAMESPACE})

    for fragment in fragments:
        frag_el = ET.SubElement(root, "Fragment")
        ref_el = ET.SubElement(frag_el, "DirectoryRef", {"Id": fragment.ref_id})
        for child in fragment.children:
            ET.SubElement(ref_el, "Directory", {"Id": child.id, "Name": child.name})
        for comp in fragment.components:
            comp_el = ET.SubElement(ref_el, "Component", {"Id": comp.id, "Guid": comp.guid})
            ET.SubElement(
                comp_el,
                "File",
                {"Id": comp.file_id, "KeyPath": "yes", "Source": comp.source},
            )

        # Every file below this directory is listed explicitly rather than
        # through nested <ComponentGroupRef>s.
        group_frag = ET.SubElement(root, "Fragment")
        group_el = ET.SubElement(group_frag, "ComponentGroup", {"Id": fragment.group_id})
        for member in fragment.group_members:
            ET.SubElement(group_el, "ComponentRef", {"Id": member})

    return root


def compile_manifest(
    manifest: FileManifest,
    install_prefix: str | PurePath,
    root_directory_id: str,
    id_prefix: str,
) -> ET.Element:
    """Build the ``<Wix>`` element describing every file in *manifest*."""
    fragments = plan_fragments(manifest, install_prefix, root_directory_id, id_prefix)
    return fragments_to_element(fragments)


def serialize(element: ET.Element) -> bytes:
    """Indented UTF-8 XML for *element*, with an XML declaration."""
    tree = ET.ElementTree(element)
    ET.indent(tree, space="  ", level=0)
    return ET.tostring(element, encoding="utf-8", xml_declaration=True) + b"\n"


def write_manifest_wxs(
    manifest: FileManifest,
    dest: Path,
    install_prefix: str | PurePath,
    root_directory_id: str,
    id_prefix: str,
) -> Path:
    """Compile *manifest* and write the document to *dest*."""
    data = serialize(compile_manifest(manifest, install_prefix, root_directory_id, id_prefix))
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    logger.info("wrote %s (%d files)", dest, len(manifest))
    return dest
