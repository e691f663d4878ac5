"""Transforms applied to a finished document.

A post processor is any callable taking the :class:`SwaggerDocument`; the
generator applies its configured list strictly in order once the walk is
complete. The defaults are:

1. :class:`ReplaceEmptyWithParent` - definitions that add nothing over a
   single parent definition (a bare ``$ref`` or an ``allOf`` of one reference
   and empty objects) are removed and every reference to them is pointed at
   the parent instead.
2. :class:`SortComplexModels` - definitions are reordered so that every
   definition comes after the definitions it depends on; independent
   definitions are ordered by name.

Both keep the definitions set closed: no reference is left pointing at a
removed definition.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Set

from .document import ComposedModel, Model, ObjectModel, RefModel, SwaggerDocument, model_references

logger = logging.getLogger(__name__)

Postprocessor = Callable[[SwaggerDocument], None]


class ReplaceEmptyWithParent:
    """Fold definitions that only alias a single parent definition."""

    def __call__(self, document: SwaggerDocument) -> None:
        while True:
            replacements = {
                name: parent
                for name, parent in (
                    (name, self._single_parent(model)) for name, model in document.definitions.items()
                )
                if parent is not None and parent != name and parent in document.definitions
            }
            for name in [n for n in replacements if _resolve(n, replacements) in replacements]:
                logger.warning("Definition %s aliases itself through %s, keeping it", name, replacements[name])
                del replacements[name]
            if not replacements:
                return

            document.replace_references(lambda ref: _resolve(ref, replacements))
            for name in replacements:
                logger.debug("Replacing empty definition %s with %s", name, replacements[name])
                del document.definitions[name]

    @staticmethod
    def _single_parent(model: Model) -> Optional[str]:
        if isinstance(model, RefModel):
            return model.ref
        if isinstance(model, ComposedModel):
            refs = [part for part in model.all_of if isinstance(part, RefModel)]
            rest = [part for part in model.all_of if not isinstance(part, RefModel)]
            if len(refs) == 1 and all(isinstance(p, ObjectModel) and p.is_empty() for p in rest):
                return refs[0].ref
        return None


def _resolve(name: str, replacements: Dict[str, str]) -> str:
    seen: Set[str] = set()
    while name in replacements and name not in seen:
        seen.add(name)
        name = replacements[name]
    return name


class SortComplexModels:
    """Order definitions dependencies first, ties broken by name."""

    def __call__(self, document: SwaggerDocument) -> None:
        definitions = document.definitions
        ordered: List[str] = []
        done: Set[str] = set()

        for start in sorted(definitions):
            if start in done:
                continue
            stack = [(start, iter(sorted(set(model_references(definitions[start])))))]
            visiting = {start}
            while stack:
                name, deps = stack[-1]
                dep = next(deps, None)
                if dep is None:
                    stack.pop()
                    visiting.discard(name)
                    if name not in done:
                        done.add(name)
                        ordered.append(name)
                elif dep in definitions and dep not in done and dep not in visiting:
                    visiting.add(dep)
                    stack.append((dep, iter(sorted(set(model_references(definitions[dep]))))))

        document.definitions = {name: definitions[name] for name in ordered}


def default_postprocessors() -> List[Postprocessor]:
    return [ReplaceEmptyWithParent(), SortComplexModels()]


def sort_document(document: SwaggerDocument) -> None:
    """Deterministic output order: sorted paths, dependency-ordered definitions."""
    SortComplexModels()(document)
    document.paths = {path: document.paths[path] for path in sorted(document.paths)}
