"""Keyword tables used by the intent classifier.

Order matters: abbreviations are expanded in table order, and the first
matching action phrase or breakpoint keyword wins.
"""

from pageguide.intent.types import Action, Breakpoint

ABBREVIATIONS: tuple[tuple[str, str], ...] = (
    ("bg", "background"),
    ("btn", "button"),
    ("txt", "text"),
    ("clr", "color"),
    ("colour", "color"),
    ("img", "image"),
    ("pic", "image"),
    ("photo", "image"),
    ("lnk", "link"),
    ("href", "link"),
    ("hdr", "header"),
    ("fnt", "font"),
    ("sz", "size"),
    ("wd", "width"),
    ("ht", "height"),
    ("pd", "padding"),
    ("mg", "margin"),
    ("bdr", "border"),
    ("rad", "radius"),
    ("alg", "alignment"),
    ("ctr", "center"),
    ("lft", "left"),
    ("rgt", "right"),
    ("desc", "description"),
    ("nav", "navigation"),
    ("ico", "icon"),
)

# Matched by substring containment against the normalized text.
ACTION_PHRASES: tuple[tuple[str, Action], ...] = (
    ("change", Action.CHANGE),
    ("set", Action.CHANGE),
    ("make", Action.CHANGE),
    ("update", Action.CHANGE),
    ("modify", Action.CHANGE),
    ("edit", Action.CHANGE),
    ("where", Action.FIND),
    ("find", Action.FIND),
    ("show", Action.FIND),
    ("locate", Action.FIND),
    ("how do i", Action.FIND),
    ("open", Action.FIND),
    ("enable", Action.ENABLE),
    ("turn on", Action.ENABLE),
    ("activate", Action.ENABLE),
    ("disable", Action.DISABLE),
    ("turn off", Action.DISABLE),
    ("hide", Action.DISABLE),
    ("remove", Action.DISABLE),
)

DEFAULT_ACTION = Action.FIND

# "responsive" is a general reference: it stops the scan without naming a breakpoint.
BREAKPOINT_KEYWORDS: dict[str, Breakpoint | None] = {
    "phone": Breakpoint.PHONE,
    "mobile": Breakpoint.PHONE,
    "tablet": Breakpoint.TABLET,
    "ipad": Breakpoint.TABLET,
    "desktop": Breakpoint.DESKTOP,
    "laptop": Breakpoint.DESKTOP,
    "responsive": None,
}
