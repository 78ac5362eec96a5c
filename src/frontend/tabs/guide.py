"""Guide tab with a short operating manual."""

from __future__ import annotations

from textual.containers import VerticalScroll
from textual.widgets import Markdown

GUIDE = """\
# Getting started

1. Put `DISCORD_TOKEN=...` in `.env` next to `config.json`.
2. Add the channels to roll in on the **Channels** tab. Daily commands go to
   the first enabled channel.
3. Tune roll commands, cooldown and the daily time on **Settings**.
4. Save with `ctrl+s`, then start with `rollwatch run` (or `--no-tui`).

# Wishlist

Characters are matched by name, and by series when both sides have one.
With fuzzy matching on, a name matches when its normalized edit similarity
reaches the threshold (0.8 by default). Entries without a series match any
series.

Manage entries from the dashboard (`a` add, `d` delete, `v` verify) or with
`rollwatch wishlist list|add|remove|export|import`.

# Dashboard keys

- `p` pause or resume automation
- `s` look a character up with the game bot
- `q` quit
"""


class GuideTab(VerticalScroll):
    def compose(self):
        yield Markdown(GUIDE, classes="guide-body")
