"""Catalog change detection.

The catalog is polled often but changes rarely, so the comparison has to be
cheap and must ignore anything the UI does not render.
"""

from collections.abc import Sequence

from soundctrl.models.sound import Sound


def _tracked_fields(sound: Sound) -> tuple[object, ...]:
    """Return the fields whose change requires a re-render."""
    return (sound.name, sound.short_name, sound.color, sound.text_color)


def has_catalog_changed(old: Sequence[Sound], new: Sequence[Sound]) -> bool:
    """Check whether a freshly fetched catalog differs from the stored one.

    A catalog changed if the number of sounds differs, if a new sound has no
    old sound with the same ID, or if a matching pair differs in name, short
    name, color or text color. Order alone is not a change.

    Args:
        old: Currently stored catalog.
        new: Catalog just fetched from the server.

    Returns:
        True if the catalog changed.
    """
    # Fast path: cardinality differs
    if len(old) != len(new):
        return True

    old_by_id = {sound.id: sound for sound in old}
    if old_by_id.keys() != {sound.id for sound in new}:
        return True
    return any(_tracked_fields(old_by_id[sound.id]) != _tracked_fields(sound) for sound in new)
