# src/trigger_adapter/core/wildcards.py

import re
from typing import Dict, List, Optional

from .paths import path_parts

# Non-greedy brace scan: no nested or escaped braces
WILDCARD_REGEX = re.compile(r'{[^/{}]*}')
WILDCARD_CAPTURE_REGEX = re.compile(r'{[^/{}]+}')


def match_wildcards(template: Optional[str], instance: Optional[str]) -> Dict[str, str]:
    """
    Extract named parameters from a resource instance using a resource template.

    Matching is positional: the value for `{name}` is the instance segment at the
    position of `{name}` in the template. Positions past the end of the instance
    are left out. Never raises.

    Args:
        template: Resource template, e.g. "projects/_/instances/x/refs/users/{uid}"
        instance: Concrete resource name

    Returns:
        Mapping of wildcard name to the matched segment
    """
    params: Dict[str, str] = {}
    if not isinstance(template, str) or not isinstance(instance, str):
        return params

    wildcards = WILDCARD_REGEX.findall(template)
    if not wildcards:
        return params

    template_parts = template.split('/')
    instance_parts = instance.split('/')
    for wildcard in wildcards:
        position = template_parts.index(wildcard) if wildcard in template_parts else -1
        if 0 <= position < len(instance_parts):
            params[wildcard[1:-1]] = instance_parts[position]
    return params


def trim_param(param: str) -> str:
    """Strip braces and any `=pattern` suffix from a capture segment"""
    name = param[1:-1]
    if '=' in name:
        return name[:name.index('=')]
    return name


class _Segment:
    """One segment of a PathPattern"""

    def __init__(self, value: str, kind: str):
        self.value = value
        self.kind = kind  # 'segment', 'single-capture' or 'multi-capture'
        self.trimmed = trim_param(value) if kind != 'segment' else value

    def is_single_segment_wildcard(self) -> bool:
        if self.kind == 'single-capture':
            return True
        return self.kind == 'segment' and '*' in self.value and '**' not in self.value

    def is_multi_segment_wildcard(self) -> bool:
        return self.kind == 'multi-capture' or (self.kind == 'segment' and '**' in self.value)


class PathPattern:
    """
    Eventarc-style path pattern supporting `*`, `**`, `{name}`, `{name=*}` and
    one multi-segment capture `{name=**}`.
    """

    def __init__(self, raw: str):
        self.raw = raw
        self.segments: List[_Segment] = []
        for part in path_parts(raw):
            captures = WILDCARD_CAPTURE_REGEX.findall(part)
            if len(captures) == 1:
                kind = 'multi-capture' if '**' in part else 'single-capture'
            else:
                kind = 'segment'
            self.segments.append(_Segment(part, kind))

    def get_value(self) -> str:
        return self.raw

    def has_wildcards(self) -> bool:
        return any(
            s.is_single_segment_wildcard() or s.is_multi_segment_wildcard()
            for s in self.segments
        )

    def has_captures(self) -> bool:
        return any(s.kind in ('single-capture', 'multi-capture') for s in self.segments)

    def extract_matches(self, path: str) -> Dict[str, str]:
        """Extract capture values from a concrete path"""
        matches: Dict[str, str] = {}
        if not self.has_captures():
            return matches

        path_segments = path_parts(path)
        path_index = 0
        for segment_index, segment in enumerate(self.segments):
            if path_index >= len(path_segments):
                break
            remaining = len(self.segments) - 1 - segment_index
            next_path_index = len(path_segments) - remaining
            if segment.kind == 'single-capture':
                matches[segment.trimmed] = path_segments[path_index]
            elif segment.kind == 'multi-capture':
                matches[segment.trimmed] = '/'.join(path_segments[path_index:next_path_index])
            path_index = next_path_index if segment.is_multi_segment_wildcard() else path_index + 1

        return matches
