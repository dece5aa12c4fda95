"""Navigation surfaces -- the browser side of a login flow.

Exports:
    :class:`NavigationSurface` -- abstract capability set used by the flow core.
    :class:`ScriptedSurface` -- in-memory surface for replays and tests.
    :class:`HttpSurface` -- headless surface backed by httpx.
"""

from authview.surfaces.base import NavigationSurface
from authview.surfaces.http import HttpSurface
from authview.surfaces.scripted import ScriptedSurface

__all__ = ["HttpSurface", "NavigationSurface", "ScriptedSurface"]
