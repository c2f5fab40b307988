"""Avatar selection."""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence

from realmforge.models.card import Card, Element, parse_element
from realmforge.models.failure import DataAbsenceError, FailureKind, KnownError

logger = logging.getLogger(__name__)

DEFAULT_ELEMENT = Element.WATER


def determine_dominant_element(
    elements: Iterable[str | Element],
    preferred_element: str | None = None,
) -> Element:
    """
    The element a deck is built around.

    An explicit preference wins. Otherwise the most common element in
    `elements`, or Water when there are none.

    Raises:
        KnownError: If the preference is not an element name
    """
    if preferred_element:
        element = parse_element(preferred_element)
        if element is None:
            raise KnownError(
                FailureKind.INVALID_INPUT,
                f"Unknown element: {preferred_element}",
                detail=f"Valid: {[e.value for e in Element]}",
            )
        return element

    counts = Counter(
        e if isinstance(e, Element) else parse_element(e) for e in elements
    )
    counts.pop(None, None)
    if not counts:
        return DEFAULT_ELEMENT
    return counts.most_common(1)[0][0]


def select_avatar(
    avatars: Sequence[Card],
    elements: Iterable[str | Element],
    preferred_element: str | None = None,
) -> tuple[Card, Element]:
    """
    Pick an avatar carrying the dominant element.

    Falls back to the first avatar when none carries it.

    Args:
        avatars: Avatars in the pool
        elements: Element tags across the pool, one entry per card-element
        preferred_element: Element requested by the user

    Returns:
        (avatar, dominant element)

    Raises:
        DataAbsenceError: If the pool has no avatars
    """
    if not avatars:
        raise DataAbsenceError("No avatars found in the card data.")

    dominant = determine_dominant_element(elements, preferred_element)
    avatar = next((a for a in avatars if dominant in a.elements), avatars[0])
    logger.info("Selected avatar %s for %s", avatar.name, dominant.value)
    return avatar, dominant
