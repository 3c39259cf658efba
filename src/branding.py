from __future__ import annotations

import shutil
from typing import Literal, Union

# --------------------------------------------------
# Layout constants
# --------------------------------------------------

DEFAULT_WIDTH = 72
LOG_GUTTER_WIDTH = 10  # "INFO      " column rendered by RichHandler

Width = Union[int, Literal["auto"]]


def _resolve_width(width: Width) -> int:
    if width == "auto":
        cols = shutil.get_terminal_size(fallback=(DEFAULT_WIDTH, 24)).columns
        return max(DEFAULT_WIDTH, cols - LOG_GUTTER_WIDTH)
    return max(DEFAULT_WIDTH, int(width))


# --------------------------------------------------
# Banner
# --------------------------------------------------

UPLOADARR_BANNER = r"""
 _   _       _                 _
| | | |_ __ | | ___   __ _  __| | __ _ _ __ _ __
| | | | '_ \| |/ _ \ / _` |/ _` |/ _` | '__| '__|
| |_| | |_) | | (_) | (_| | (_| | (_| | |  | |
 \___/| .__/|_|\___/ \__,_|\__,_|\__,_|_|  |_|
      |_|
"""


# --------------------------------------------------
# Headers / sections
# --------------------------------------------------


def UPLOADARR_HEADER(
    title: str,
    *,
    width: Width = DEFAULT_WIDTH,
    motif: str = "▲",
) -> str:
    title = title.strip()
    inner = max(_resolve_width(width) - 2, len(title) + 4)

    filler = inner - len(motif)
    left = filler // 2
    right = filler - left

    top = f"╔{'═' * left}{motif}{'═' * right}╗"
    mid = f"│{title.center(inner)}│"
    bot = f"╚{'═' * inner}╝"
    return f"\n{top}\n{mid}\n{bot}\n"


def UPLOADARR_SECTION_END(*, width: Width = DEFAULT_WIDTH, fill: str = "━") -> str:
    return f"\n{fill * _resolve_width(width)}\n"


class SYMBOLS:
    OK = "✔"
    FAIL = "✖"
    WAIT = "⏳"
    VIDEO = "🎬"
    PLAYLIST = "📻"
    QUOTA = "📊"
