"""Pluggy hook namespace and conformance check specifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

from skillcheck.types import Failure, ResponseFacets

if TYPE_CHECKING:
    from skillcheck.envelope import SkillResponse

SKILLCHECK_HOOK_NAMESPACE = "skillcheck"
hookspec = pluggy.HookspecMarker(SKILLCHECK_HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(SKILLCHECK_HOOK_NAMESPACE)


class ConformanceSpecs:
    """Hook contract for response conformance checks."""

    @hookspec
    def check_response(self, facets: ResponseFacets, response: SkillResponse) -> Failure | None:
        """Inspect one response after its declared expectations passed."""
