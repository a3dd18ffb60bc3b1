# src/trigger_adapter/core/paths.py

from typing import List, Optional


def normalize_path(path: Optional[str]) -> str:
    """Remove one leading and one trailing slash from a POSIX path"""
    if not path:
        return ''
    if path.startswith('/'):
        path = path[1:]
    if path.endswith('/'):
        path = path[:-1]
    return path


def path_parts(path: Optional[str]) -> List[str]:
    """Normalize a path and split it into segments"""
    if not path or path == '/':
        return []
    return normalize_path(path).split('/')


def join_path(base: Optional[str], child: Optional[str]) -> str:
    """Join two paths with a single separator"""
    return '/'.join(path_parts(base) + path_parts(child))
