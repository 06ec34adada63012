"""
Media tree construction and traversal.

A work's files arrive as a nested folder listing. Everything here is pure and
single-threaded per call: lookups never raise for missing data, they return
None or an empty list instead.

Paths are "/"-joined folder titles relative to the tree root. The root itself
is the empty path "".
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from asmr_catalog.core.dto.media_tree import (
    Audio,
    Folder,
    FolderWork,
    Image,
    MediaFile,
    MediaTreeNode,
    NodeKind,
    Other,
    Text,
)

ROOT_TITLE = "root"
MAIN_AUDIO_FOLDER_TITLE = "mp3"

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Construction
# ------------------------------------------------------------------

def build_tree(raw_items: Any) -> Folder:
    """Wrap the raw tracks payload in the synthetic root folder."""
    if not isinstance(raw_items, list):
        raw_items = []
    children = [node for node in (_node_from_raw(r) for r in raw_items) if node is not None]
    return Folder(title=ROOT_TITLE, children=children)


def _work_from_raw(raw: Any) -> FolderWork:
    raw = raw if isinstance(raw, dict) else {}
    return FolderWork(
        id=int(raw.get("id") or 0),
        source_id=str(raw.get("source_id") or ""),
        source_type=str(raw.get("source_type") or ""),
    )


def _file_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "title": str(raw.get("title") or ""),
        "hash": str(raw.get("hash") or ""),
        "work": _work_from_raw(raw.get("work")),
        "work_title": str(raw.get("workTitle") or ""),
        "media_stream_url": str(raw.get("mediaStreamUrl") or ""),
        "media_download_url": str(raw.get("mediaDownloadUrl") or ""),
        "size": int(raw.get("size") or 0),
    }


def _node_from_raw(raw: Any) -> Optional[MediaTreeNode]:
    if not isinstance(raw, dict):
        return None

    kind = str(raw.get("type") or "").lower()

    if kind == NodeKind.FOLDER.value:
        children_raw = raw.get("children") or []
        children = [n for n in (_node_from_raw(c) for c in children_raw) if n is not None]
        return Folder(title=str(raw.get("title") or ""), children=children)

    fields = _file_fields(raw)
    if kind == NodeKind.AUDIO.value:
        return Audio(
            **fields,
            duration=float(raw.get("duration") or 0.0),
            stream_low_quality_url=raw.get("streamLowQualityUrl") or None,
        )
    if kind == NodeKind.TEXT.value:
        duration = raw.get("duration")
        return Text(**fields, duration=float(duration) if duration is not None else None)
    if kind == NodeKind.IMAGE.value:
        return Image(**fields)

    if kind != NodeKind.OTHER.value:
        logger.debug(f"Unknown media tree node type {kind!r}, treating as other")
    return Other(**fields)


# ------------------------------------------------------------------
# Traversal
# ------------------------------------------------------------------

def iter_nodes(folder: Folder) -> Iterator[MediaTreeNode]:
    """Pre-order walk over every descendant of `folder` (the folder excluded)."""
    for item in folder.children:
        yield item
        if isinstance(item, Folder):
            yield from iter_nodes(item)


def _join(current_path: str, title: str) -> str:
    return title if not current_path else f"{current_path}/{title}"


def get_all_audio_files(folder: Folder, recursive: bool) -> List[Audio]:
    if not recursive:
        return [item for item in folder.children if isinstance(item, Audio)]
    return [item for item in iter_nodes(folder) if isinstance(item, Audio)]


def find_all_folders_with_title(folder: Folder, title: str, current_path: str = "") -> List[str]:
    """
    Paths of every folder whose title matches `title` case-insensitively.
    A matching folder is not searched further.
    """
    result: List[str] = []
    wanted = title.casefold()
    for item in folder.children:
        if not isinstance(item, Folder):
            continue
        item_path = _join(current_path, item.title)
        if item.title.casefold() == wanted:
            result.append(item_path)
        else:
            result.extend(find_all_folders_with_title(item, title, item_path))
    return result


def find_folder_with_most_audio_files(folder: Folder, current_path: str = "") -> Tuple[Optional[str], int]:
    """
    Pre-order scan including `folder` itself. Only a strictly greater count
    replaces the current best, so ties keep the first folder found.
    """
    max_count = 0
    max_path: Optional[str] = None

    own_count = len(get_all_audio_files(folder, False))
    if own_count > 0:
        max_count = own_count
        max_path = current_path

    for item in folder.children:
        if isinstance(item, Folder):
            sub_path, sub_count = find_folder_with_most_audio_files(item, _join(current_path, item.title))
            if sub_path is not None and sub_count > max_count:
                max_count = sub_count
                max_path = sub_path

    return max_path, max_count


def find_main_audio_folder(tree: Folder) -> Optional[str]:
    """
    Pick the folder holding the work's main audio.

    Works often ship the same tracks in several formats; an "mp3" folder wins
    over raw file count when it has any audio at all.
    """
    best_path: Optional[str] = None
    best_count = 0
    for path in find_all_folders_with_title(tree, MAIN_AUDIO_FOLDER_TITLE):
        count = len(get_all_audio_files(get_folder(tree, path), False))
        if count > best_count:
            best_path, best_count = path, count

    if best_path is not None:
        return best_path
    return find_folder_with_most_audio_files(tree)[0]


def get_folder(tree: Folder, path: str) -> Folder:
    """
    Resolve a "/"-separated title path.

    Resolution stops at the first segment with no matching child folder and
    the deepest folder reached so far is returned. Callers that need an exact
    match must compare the returned folder themselves.
    """
    current = tree
    for part in path.split("/"):
        next_folder = next(
            (c for c in current.children if isinstance(c, Folder) and c.title == part),
            None,
        )
        if next_folder is None:
            break
        current = next_folder
    return current


def find_folder_with_audio(tree: Folder, audio_hash: str) -> Optional[Folder]:
    for item in tree.children:
        if isinstance(item, Audio) and item.hash == audio_hash:
            return tree
        if isinstance(item, Folder):
            found = find_folder_with_audio(item, audio_hash)
            if found is not None:
                return found
    return None


def find_file(tree: Folder, title: str) -> Optional[MediaTreeNode]:
    for item in iter_nodes(tree):
        if item.title == title or item.untranslated_title == title:
            return item
    return None


# ------------------------------------------------------------------
# Copy / translation helpers
# ------------------------------------------------------------------

def deep_copy(tree: Folder) -> Folder:
    return _copy_node(tree)


def _copy_node(node: MediaTreeNode) -> MediaTreeNode:
    if isinstance(node, Folder):
        return replace(
            node,
            children=[_copy_node(c) for c in node.children],
            original_title=node.untranslated_title,
        )
    if isinstance(node, MediaFile):
        return replace(node, original_title=node.untranslated_title)
    raise TypeError(f"Unsupported media tree node: {type(node).__name__}")


def get_all_titles(folder: Folder) -> List[str]:
    return [item.title for item in iter_nodes(folder)]


def apply_translations(folder: Folder, translations: Mapping[str, str]) -> None:
    """Rewrite titles in place; titles missing from `translations` are kept."""
    for item in iter_nodes(folder):
        item.title = translations.get(item.title, item.title)
